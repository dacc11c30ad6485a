# File: tests/test_cli.py
"""Тесты для CLI (`site_mirror/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `mirror`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import site_mirror.cli as cli_module
from site_mirror.aggregator import MirrorReport, ResourceEntry
from site_mirror.cli import cli


@pytest.fixture()
def cfg_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        json.dumps(
            {
                "urls": ["https://example.com"],
                "directory": str(tmp_path / "mirror"),
                "timeout": 1.0,
                "user_agent": "Agent/1.0",
                "rate_limit": 1.0,
                "retry_times": 0,
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def patch_start_mirror(monkeypatch):
    """Патчим start_mirror: возвращаем фиктивный отчёт без загрузки."""
    calls = []
    report = MirrorReport(
        seeds=["https://example.com/"],
        entries=[ResourceEntry("https://example.com/", "index.html", "html", "done", 0)],
    )

    async def fake_mirror(cfg):
        calls.append(cfg)
        return report

    monkeypatch.setattr(cli_module, "start_mirror", fake_mirror)
    return calls


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteMirror" in result.output


def test_show_config(cfg_file):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["urls"] == ["https://example.com/"]
    assert data["retry_times"] == 0


def test_bad_config_exits_with_error(tmp_path):
    cfg_path = tmp_path / "bad.yaml"
    cfg_path.write_text("urls: []\ndirectory: out", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_path), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_mirror_stdout(cfg_file, patch_start_mirror):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "mirror"])
    assert result.exit_code == 0
    counts = json.loads(result.output.splitlines()[-1])
    assert counts["done"] == 1
    assert counts["failed"] == 0
    assert len(patch_start_mirror) == 1


def test_mirror_overrides(cfg_file, tmp_path, patch_start_mirror):
    out = tmp_path / "elsewhere"
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "mirror", "--directory", str(out), "--overwrite"])
    assert result.exit_code == 0
    (cfg,) = patch_start_mirror
    assert cfg.directory == out
    assert cfg.overwrite is True


def test_mirror_manifest_file(cfg_file, tmp_path):
    out = tmp_path / "manifest.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "mirror", "--manifest", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["resources"][0]["local_path"] == "index.html"


def test_mirror_html_file(cfg_file, tmp_path):
    out = tmp_path / "report.html"
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "mirror", "--html", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    assert "index.html" in out.read_text(encoding="utf-8")


def test_mirror_timeout(monkeypatch, cfg_file):
    # Патчим start_mirror на долгую функцию
    async def slow(cfg):
        await asyncio.sleep(2)

    monkeypatch.setattr(cli_module, "start_mirror", slow)

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "mirror", "--mirror-timeout", "0.5"])
    assert result.exit_code != 0
    assert "не завершено" in result.output


def test_mirror_failure(monkeypatch, cfg_file):
    async def broken(cfg):
        raise FileExistsError("Directory is not empty")

    monkeypatch.setattr(cli_module, "start_mirror", broken)

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "mirror"])
    assert result.exit_code == 1
    assert "Directory is not empty" in result.output
