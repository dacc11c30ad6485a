# File: site_mirror/storage.py
"""site_mirror.storage: запись готового графа ресурсов в локальный каталог."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from site_mirror.logger import logger
from site_mirror.resource import ContentKind, Resource

__all__ = ["prepare_directory", "save_resource", "save_resources"]


def prepare_directory(directory: Union[str, Path], overwrite: bool = False) -> Path:
    """Создаёт каталог; непустой существующий каталог допускается только при overwrite."""
    path = Path(directory).expanduser()
    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")
        if not overwrite and any(path.iterdir()):
            raise FileExistsError(f"Directory is not empty: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_resource(resource: Resource, directory: Path) -> Path:
    """Записывает один ресурс по его local_path внутри directory."""
    if not resource.local_path:
        raise ValueError(f"{resource.url} has no local path")
    root = directory.resolve()
    target = (root / resource.local_path).resolve()
    if root != target and root not in target.parents:
        raise ValueError(f"Local path escapes the output directory: {resource.local_path}")
    target.parent.mkdir(parents=True, exist_ok=True)
    if resource.kind.is_textual:
        # same encoding the document was served in, so its own declaration stays true
        errors = "xmlcharrefreplace" if resource.kind is ContentKind.HTML else "replace"
        target.write_bytes(resource.get_text().encode(resource.encoding or "utf-8", errors=errors))
    else:
        target.write_bytes(resource.content or b"")
    return target


def save_resources(resources: Iterable[Resource], directory: Union[str, Path]) -> List[Path]:
    """Сохраняет все загруженные ресурсы; возвращает список записанных файлов."""
    root = Path(directory)
    written: List[Path] = []
    for resource in resources:
        if not resource.status.is_resolved:
            continue
        written.append(save_resource(resource, root))
    logger.info("Сохранено файлов: %d в %s", len(written), root)
    return written
