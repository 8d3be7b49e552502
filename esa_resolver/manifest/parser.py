"""Manifest text and clause syntax.

Manifest text is a sequence of ``Name: value`` lines. A line that starts with
a single space continues the previous value. Header values are lists of
clauses separated by commas::

    com.example.api;com.example.spi;version="[1.0,2)";resolution:=optional
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any

from ..errors import ManifestError
from ..version import Version

# Limit in UTF-8 bytes, continuation space included
MAX_LINE_BYTES = 72


def parse_manifest(text: str) -> dict[str, str]:
    """Parse the main section of manifest text into an ordered header map.

    Raises:
        ManifestError: Malformed line or duplicate header
    """
    headers: dict[str, str] = {}
    current: str | None = None

    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            if headers:
                break
            continue

        if line.startswith(" "):
            if current is None:
                raise ManifestError(f"Line {number}: continuation without a header")
            headers[current] += line[1:]
            continue

        name, sep, value = line.partition(":")
        name = name.strip()
        if not sep or not name:
            raise ManifestError(f"Line {number}: expected 'Name: value', got '{line}'")
        if name in headers:
            raise ManifestError(f"Line {number}: duplicate header '{name}'")
        headers[name] = value[1:] if value.startswith(" ") else value
        current = name

    return headers


def write_manifest(headers: dict[str, str]) -> str:
    """Serialize an ordered header map, wrapping long lines."""
    lines = []
    for name, value in headers.items():
        lines.extend(_wrap(f"{name}: {value}"))
    return "\n".join(lines) + "\n"


def _wrap(line: str) -> list[str]:
    """Split ``line`` into physical lines without breaking a character."""
    lines = []
    current, size = "", 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > MAX_LINE_BYTES:
            lines.append(current)
            current, size = " ", 1
        current += char
        size += width
    lines.append(current)
    return lines


def split_quoted(text: str, separator: str) -> list[str]:
    """Split on ``separator`` outside double quotes."""
    parts = []
    current: list[str] = []
    quoted = False
    for char in text:
        if char == '"':
            quoted = not quoted
        if char == separator and not quoted:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if quoted:
        raise ManifestError(f"Unterminated quote in '{text}'")
    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    if any(c in value for c in ',;:="') or value != value.strip():
        return '"' + value + '"'
    return value


def convert_typed(value: str, type_name: str | None) -> Any:
    """Convert a typed attribute value (``name:Version=1.0``) to Python."""
    if not type_name or type_name == "String":
        return value
    try:
        if type_name == "Version":
            return Version.parse(value)
        if type_name == "Long":
            return int(value)
        if type_name == "Double":
            return float(value)
        if type_name.startswith("List"):
            element = type_name[5:-1] if type_name.endswith(">") else None
            return [convert_typed(v.strip(), element) for v in value.split(",")]
    except ValueError as e:
        raise ManifestError(f"Invalid {type_name} value '{value}': {e}") from e
    raise ManifestError(f"Unknown attribute type '{type_name}'")


@dataclass(frozen=True)
class Clause:
    """One comma-separated element of a header value."""

    paths: tuple[str, ...]
    attributes: dict[str, str] = field(default_factory=dict)
    directives: dict[str, str] = field(default_factory=dict)
    types: dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.paths[0]

    @classmethod
    def parse(cls, text: str) -> Clause:
        paths: list[str] = []
        attributes: dict[str, str] = {}
        directives: dict[str, str] = {}
        types: dict[str, str] = {}

        for part in split_quoted(text, ";"):
            part = part.strip()
            if not part:
                continue
            if ":=" in part.split('"', 1)[0]:
                key, value = part.split(":=", 1)
                directives[key.strip()] = _unquote(value)
            elif "=" in part.split('"', 1)[0]:
                key, value = part.split("=", 1)
                key = key.strip()
                if ":" in key:
                    key, type_name = key.split(":", 1)
                    types[key.strip()] = type_name.strip()
                    key = key.strip()
                attributes[key] = _unquote(value)
            else:
                if attributes or directives:
                    raise ManifestError(f"Path '{part}' follows parameters in clause '{text}'")
                paths.append(part)

        if not paths:
            raise ManifestError(f"Clause has no path: '{text}'")
        return cls(tuple(paths), attributes, directives, types)

    def typed_attributes(self) -> dict[str, Any]:
        return {key: convert_typed(value, self.types.get(key)) for key, value in self.attributes.items()}

    def __str__(self) -> str:
        parts = list(self.paths)
        for key, value in self.attributes.items():
            type_name = self.types.get(key)
            name = f"{key}:{type_name}" if type_name else key
            parts.append(f"{name}={_quote(value)}")
        for key, value in self.directives.items():
            parts.append(f"{key}:={_quote(value)}")
        return ";".join(parts)


def parse_clauses(value: str) -> tuple[Clause, ...]:
    """Parse a header value into clauses.

    Raises:
        ManifestError: Empty clause or malformed parameter
    """
    clauses = []
    for part in split_quoted(value, ","):
        if not part.strip():
            raise ManifestError(f"Empty clause in '{value}'")
        clauses.append(Clause.parse(part))
    return tuple(clauses)
