"""Blob storage backends for desktop (files) and web builds (localStorage)."""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import Any, Callable, Optional

IS_WEB = sys.platform == "emscripten"


def get_local_storage() -> Optional[Any]:
    if not IS_WEB:
        return None
    try:
        from js import localStorage  # type: ignore
    except ImportError:
        return None
    return localStorage


class FileStorage:
    """Named text blobs in one directory, replaced atomically."""

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def describe(self, name: str) -> str:
        return str(self.base_path / name)

    def exists(self, name: str) -> bool:
        return (self.base_path / name).exists()

    def read(self, name: str) -> Optional[str]:
        try:
            return (self.base_path / name).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, name: str, text: str, *, backup_name: Optional[str] = None) -> None:
        target = self.base_path / name
        tmp_path = target.with_suffix(target.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(text)
            if not text.endswith("\n"):
                handle.write("\n")
        if backup_name and target.exists():
            shutil.copy2(target, self.base_path / backup_name)
        tmp_path.replace(target)

    def delete(self, name: str) -> None:
        try:
            (self.base_path / name).unlink()
        except FileNotFoundError:
            pass


class WebStorage:
    """Same interface as :class:`FileStorage`, backed by a localStorage-like object."""

    PREFIX = "chronos.save:"

    def __init__(self, local_storage: Any, namespace: str = "") -> None:
        self._local_storage = local_storage
        self.namespace = namespace.strip("/")

    def _key(self, name: str) -> str:
        if self.namespace:
            return f"{self.PREFIX}{self.namespace}/{name}"
        return f"{self.PREFIX}{name}"

    def describe(self, name: str) -> str:
        return f"localStorage[{self._key(name)}]"

    def exists(self, name: str) -> bool:
        return self._local_storage.getItem(self._key(name)) is not None

    def read(self, name: str) -> Optional[str]:
        raw = self._local_storage.getItem(self._key(name))
        return None if raw is None else str(raw)

    def write(self, name: str, text: str, *, backup_name: Optional[str] = None) -> None:
        if backup_name:
            existing = self._local_storage.getItem(self._key(name))
            if existing is not None:
                self._local_storage.setItem(self._key(backup_name), existing)
        self._local_storage.setItem(self._key(name), text)

    def delete(self, name: str) -> None:
        self._local_storage.removeItem(self._key(name))


def default_storage(base_path: Path | str, *, print_func: Callable[[str], None] = print):
    local_storage = get_local_storage()
    if local_storage is not None:
        return WebStorage(local_storage, Path(base_path).as_posix())
    if IS_WEB:
        print_func(
            "[Save] localStorage unavailable in web build; "
            "falling back to filesystem storage."
        )
    return FileStorage(base_path)
