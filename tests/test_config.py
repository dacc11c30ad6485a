# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_mirror.config import DEFAULT_SUBDIRECTORIES, MirrorConfig, load_config
from site_mirror.handlers import HandlerRegistry, RECURSIVE_SOURCES
from site_mirror.handlers.html import INLINE_CSS_SOURCES
from site_mirror.resource import ContentKind


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,loader,expect_exc",
    [
        ("urls: [http://example.com]\ndirectory: out", load_config, None),
        (json.dumps({"urls": ["http://example.com"], "directory": "out"}), load_config, None),
        ("{}", load_config, ValidationError),
        ("urls: []\ndirectory: out", load_config, ValidationError),
        ("urls: [http://example.com]\ndirectory: out\nexclude: '[unclosed'", load_config, ValidationError),
        ("urls: [http://example.com]\ndirectory: out\nunknown: 1", load_config, ValidationError),
        ("not: a: mapping", load_config, ValueError),
        ("- just\n- a list", load_config, TypeError),
    ],
)
def test_load_config_variants(tmp_path, content, loader, expect_exc):
    # Write YAML or JSON based on content
    suffix = ".yaml" if not content.strip().startswith("{") else ".json"
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            loader(cfg_path)
    else:
        cfg = loader(cfg_path)
        assert isinstance(cfg, MirrorConfig)
        assert cfg.seed_urls == ["http://example.com/"]
        assert cfg.directory == Path("out")


def test_load_config_default_missing(tmp_path, monkeypatch):
    # Ensure default file missing
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_unknown_suffix(tmp_path):
    with pytest.raises(ValueError):
        load_config(write_file(tmp_path, "urls = []", ".toml"))


def test_defaults(tmp_path):
    cfg = MirrorConfig(urls=["https://example.com/a"], directory=tmp_path)

    assert cfg.overwrite is False
    assert cfg.recursive is False
    assert cfg.max_depth is None
    assert cfg.subdirectories == DEFAULT_SUBDIRECTORIES
    assert cfg.default_filename == "index.html"
    assert any(rule.selector == "img" and rule.attr == "src" for rule in cfg.sources)


def test_config_is_frozen(tmp_path):
    cfg = MirrorConfig(urls=["https://example.com/"], directory=tmp_path)
    with pytest.raises(ValidationError):
        cfg.recursive = True


def test_subdirectory_extensions_are_normalized(tmp_path):
    cfg = MirrorConfig(urls=["https://example.com/"], directory=tmp_path, subdirectories={"media": ["MP4", ".WebM"]})
    assert cfg.subdirectories == {"media": [".mp4", ".webm"]}


def test_handlers_from_config(tmp_path):
    cfg = MirrorConfig(
        urls=["https://example.com/"],
        directory=tmp_path,
        recursive=True,
        sources=[{"selector": "img", "attr": "src"}],
    )
    registry = HandlerRegistry.from_config(cfg)
    html = registry.handler_for(ContentKind.HTML)

    assert list(html.sources) == [("img", "src"), *RECURSIVE_SOURCES, *INLINE_CSS_SOURCES]
