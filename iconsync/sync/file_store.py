from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol

from iconsync.core.errors import StorageError

ASSET_EXTENSION = ".svg"


class FileStore(Protocol):
    """Filesystem capability used by the sync core; paths are relative strings."""

    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, content: bytes) -> None: ...

    def ensure_dir(self, path: str) -> None: ...

    def remove(self, path: str) -> None: ...


class LocalFileStore:
    """FileStore rooted at the output directory."""

    def __init__(self, root: str):
        self.root = Path(root).expanduser()

    def _full(self, path: str) -> Path:
        rel = PurePosixPath(path)
        if rel.is_absolute() or ".." in rel.parts:
            raise StorageError(f"path_outside_store: {path}", details={"root": str(self.root)})
        return self.root / rel

    def exists(self, path: str) -> bool:
        return self._full(path).is_file()

    def read(self, path: str) -> bytes:
        full = self._full(path)
        try:
            return full.read_bytes()
        except OSError as e:
            raise StorageError(f"read_failed: {full}", details={"error": str(e)}) from e

    def write(self, path: str, content: bytes) -> None:
        full = self._full(path)
        try:
            full.write_bytes(content)
        except OSError as e:
            raise StorageError(f"write_failed: {full}", details={"error": str(e)}) from e

    def ensure_dir(self, path: str) -> None:
        full = self._full(path)
        try:
            full.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"mkdir_failed: {full}", details={"error": str(e)}) from e

    def remove(self, path: str) -> None:
        full = self._full(path)
        try:
            full.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"remove_failed: {full}", details={"error": str(e)}) from e


@dataclass(frozen=True)
class NamingPolicy:
    """Maps icon names ("socials/facebook") to paths inside the store."""

    ignore_subfolders: bool = False
    extension: str = ASSET_EXTENSION

    def path_for(self, name: str) -> str:
        if self.ignore_subfolders:
            return "_".join(name.split("/")) + self.extension
        return name + self.extension

    def dir_for(self, name: str) -> str:
        parent = PurePosixPath(self.path_for(name)).parent
        return "" if str(parent) == "." else str(parent)
