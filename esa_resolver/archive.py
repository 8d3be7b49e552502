"""Read-only directory view over unit and module archives.

Archives are zip containers. An exploded directory is packed into an
in-memory zip when opened as a source so every caller sees the same shape.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .errors import ArchiveError
from .errors import ManifestError

logger = logging.getLogger(__name__)

MODULE_EXTENSION = ".jar"
UNIT_EXTENSION = ".esa"
MODULE_MANIFEST_PATH = "META-INF/MANIFEST.MF"


@dataclass(frozen=True)
class ArchiveEntry:
    """A top-level file inside an archive."""

    name: str
    url: str
    archive: ArchiveDirectory

    def open(self) -> BinaryIO:
        return self.archive.open(self.name)

    def is_module(self) -> bool:
        return self.name.endswith(MODULE_EXTENSION)

    def is_unit(self) -> bool:
        return self.name.endswith(UNIT_EXTENSION)


class ArchiveDirectory:
    """Listable, openable view over a zip archive on disk."""

    def __init__(self, path: Path):
        self.path = path
        try:
            self._zip = zipfile.ZipFile(path)
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveError(f"Not a readable archive: {path}: {e}") from e

    def entries(self) -> list[ArchiveEntry]:
        """Direct file entries in the order the archive lists them."""
        base = self.path.resolve().as_uri()
        result = []
        for info in self._zip.infolist():
            if info.is_dir() or "/" in info.filename.rstrip("/"):
                continue
            result.append(ArchiveEntry(info.filename, f"{base}!/{info.filename}", self))
        return result

    def open(self, name: str) -> BinaryIO:
        try:
            return io.BytesIO(self._zip.read(name))
        except KeyError as e:
            raise FileNotFoundError(f"{name} not found in {self.path}") from e
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Corrupt entry {name} in {self.path}: {e}") from e

    def read_text(self, name: str) -> str | None:
        """Return the text of ``name`` or None when the archive lacks it."""
        if name not in self._zip.namelist():
            return None
        with self.open(name) as stream:
            return _decode(stream.read(), f"{self.path}!/{name}")

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> ArchiveDirectory:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def read_module_manifest(entry: ArchiveEntry) -> str | None:
    """Read META-INF/MANIFEST.MF from a module entry, if it has one."""
    with entry.open() as stream:
        data = stream.read()
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as module:
            if MODULE_MANIFEST_PATH not in module.namelist():
                return None
            return _decode(module.read(MODULE_MANIFEST_PATH), f"{entry.name}!/{MODULE_MANIFEST_PATH}")
    except zipfile.BadZipFile:
        logger.debug(f"Module {entry.name} is not a zip container, treating it as manifest-less")
        return None


def _decode(data: bytes, source: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestError(f"Manifest {source} is not valid UTF-8: {e}") from e


def pack_directory(path: Path) -> BinaryIO:
    """Pack an exploded archive directory into an in-memory zip."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for file in sorted(p for p in path.rglob("*") if p.is_file()):
            archive.write(file, file.relative_to(path).as_posix())
    buffer.seek(0)
    return buffer
