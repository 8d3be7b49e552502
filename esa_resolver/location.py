"""Unit locations.

A location string either follows the archive naming convention
``name[@version].esa`` or is an opaque address. ``subsystem://`` URIs carry
the symbolic name, version, and type as query parameters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from urllib.parse import parse_qs
from urllib.parse import unquote
from urllib.parse import urlparse

from .archive import pack_directory
from .errors import InvalidLocationError
from .version import Version

ARCHIVE_NAME = re.compile(r"^([^@]+)(?:@(.+))?\.esa$")
SUBSYSTEM_SCHEME = "subsystem"


@dataclass(frozen=True)
class Location:
    """Name, version, and type derived from a location string."""

    value: str
    name: str | None = None
    version: Version | None = None
    type: str | None = None
    url: str | None = None

    @classmethod
    def parse(cls, identifier: str) -> Location:
        """Derive a Location from an identifier string.

        Raises:
            InvalidLocationError: The identifier carries an invalid version
        """
        if not identifier:
            raise InvalidLocationError("Location must not be empty")

        if identifier.startswith(f"{SUBSYSTEM_SCHEME}://"):
            return cls._parse_subsystem_uri(identifier)

        match = ARCHIVE_NAME.match(_last_segment(identifier))
        if not match:
            return cls(identifier, url=identifier)

        name, version = match.group(1), match.group(2)
        return cls(identifier, name, _parse_version(identifier, version), url=identifier)

    @classmethod
    def _parse_subsystem_uri(cls, identifier: str) -> Location:
        query = parse_qs(urlparse(identifier).query)

        def first(key: str) -> str | None:
            values = query.get(key)
            return values[0] if values else None

        return cls(
            identifier,
            first("Subsystem-SymbolicName"),
            _parse_version(identifier, first("Subsystem-Version")),
            first("Subsystem-Type"),
            first("url"),
        )

    @property
    def symbolic_name(self) -> str | None:
        return self.name

    def open(self) -> BinaryIO:
        """Open the addressed archive for reading.

        Raises:
            InvalidLocationError: Address is not a readable local file or directory
        """
        path = _local_path(self.url or self.value)
        if path is None:
            raise InvalidLocationError(f"Cannot open location '{self.value}': unsupported scheme")
        if path.is_dir():
            return pack_directory(path)
        try:
            return path.open("rb")
        except OSError as e:
            raise InvalidLocationError(f"Cannot open location '{self.value}': {e}") from e

    def __str__(self) -> str:
        if self.name is None:
            return self.value
        if self.version is None:
            return self.name
        return f"{self.name}@{self.version}"


def _parse_version(identifier: str, text: str | None) -> Version | None:
    if text is None:
        return None
    try:
        return Version.parse(text)
    except ValueError as e:
        raise InvalidLocationError(f"Invalid version in location '{identifier}': {e}") from e


def _last_segment(identifier: str) -> str:
    if identifier.startswith("file:"):
        identifier = unquote(urlparse(identifier).path)
    return identifier.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def _local_path(address: str) -> Path | None:
    parsed = urlparse(address)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Windows drive letters parse as a one-letter scheme
    if parsed.scheme and len(parsed.scheme) > 1:
        return None
    return Path(address)
