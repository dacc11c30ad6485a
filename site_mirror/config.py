# === FILE: site_mirror/config.py ===
"""
Модуль для загрузки и валидации конфигурации зеркалирования site_mirror.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError, field_validator

from site_mirror.handlers.html import DEFAULT_SOURCES

DEFAULT_SUBDIRECTORIES: Dict[str, List[str]] = {
    "img": [".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico", ".avif", ".bmp"],
    "js": [".js", ".mjs"],
    "css": [".css"],
    "fonts": [".woff", ".woff2", ".ttf", ".otf", ".eot"],
}


class SourceRule(BaseModel):
    """Селектор тегов и атрибут, содержащий ссылку на ресурс."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    selector: str = Field(..., min_length=1)
    attr: Optional[str] = None


def _default_sources() -> List[SourceRule]:
    return [SourceRule(selector=s.selector, attr=s.attr) for s in DEFAULT_SOURCES]


class MirrorConfig(BaseModel):
    """Конфигурация для одного запуска зеркалирования."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    urls: List[HttpUrl] = Field(..., min_length=1, description="Стартовые URL.")
    directory: Path = Field(..., description="Каталог для локальной копии.")
    overwrite: bool = Field(False, description="Разрешить запись в непустой каталог.")

    recursive: bool = Field(False, description="Следовать по ссылкам <a href>.")
    max_depth: Optional[int] = Field(None, ge=0, description="Максимальная глубина от стартовых URL.")
    same_origin_only: bool = Field(False, description="Загружать только ресурсы с хостов стартовых URL.")
    include: Optional[str] = Field(None, description="Регулярное выражение: загружать только подходящие URL.")
    exclude: Optional[str] = Field(None, description="Регулярное выражение: пропускать подходящие URL.")

    sources: List[SourceRule] = Field(default_factory=_default_sources, description="Откуда брать ссылки в HTML.")
    inline_css: bool = Field(True, description="Обрабатывать style-атрибуты и блоки <style>.")
    subdirectories: Optional[Dict[str, List[str]]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_SUBDIRECTORIES.items()},
        description="Подкаталоги по расширениям; null: всё в корне.",
    )
    default_filename: str = Field("index.html", min_length=1, description="Имя файла для пустого пути.")

    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("SiteMirror/1.0", min_length=1, description="Заголовок User-Agent.")
    rate_limit: float = Field(10.0, gt=0, description="Лимит запросов в секунду.")
    concurrency: int = Field(8, ge=1, description="Число одновременных запросов.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx и 429.")
    retry_backoff: float = Field(1.0, ge=0, description="Множитель экспоненциальной задержки между попытками.")

    @field_validator("include", "exclude")
    def _check_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f"Неправильное регулярное выражение {v!r}: {exc}") from exc
        return v

    @field_validator("subdirectories")
    def _normalize_extensions(cls, v: Optional[Dict[str, List[str]]]) -> Optional[Dict[str, List[str]]]:
        if v is None:
            return v
        return {
            name: [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in exts]
            for name, exts in v.items()
        }

    @property
    def seed_urls(self) -> List[str]:
        return [str(u) for u in self.urls]


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> MirrorConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект MirrorConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return MirrorConfig(**data)
    except ValidationError:
        raise


__all__ = ["MirrorConfig", "SourceRule", "DEFAULT_SUBDIRECTORIES", "load_config"]
