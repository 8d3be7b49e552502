"""Versions and version ranges.

Versions follow the ``major[.minor[.micro[.qualifier]]]`` grammar. Missing
numeric parts default to zero, so ``1`` and ``1.0.0`` are equal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_QUALIFIER = re.compile(r"^[A-Za-z0-9_-]*$")


@dataclass(frozen=True, order=True)
class Version:
    """Comparable version: numeric parts first, then the qualifier as text."""

    major: int = 0
    minor: int = 0
    micro: int = 0
    qualifier: str = ""

    @classmethod
    def parse(cls, text: str | None) -> Version:
        """Parse a version token.

        Raises:
            ValueError: Token is not a valid version
        """
        if text is None:
            return EMPTY_VERSION
        text = text.strip()
        if not text:
            return EMPTY_VERSION

        parts = text.split(".", 3)
        numbers = []
        for part in parts[:3]:
            if not part.isdigit():
                raise ValueError(f"Invalid version '{text}': '{part}' is not a non-negative integer")
            numbers.append(int(part))
        while len(numbers) < 3:
            numbers.append(0)

        qualifier = parts[3] if len(parts) == 4 else ""
        if len(parts) == 4 and (not qualifier or not _QUALIFIER.match(qualifier)):
            raise ValueError(f"Invalid version '{text}': bad qualifier '{qualifier}'")

        return cls(numbers[0], numbers[1], numbers[2], qualifier)

    def is_empty(self) -> bool:
        return self == EMPTY_VERSION

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.micro}"
        return f"{base}.{self.qualifier}" if self.qualifier else base


EMPTY_VERSION = Version()


@dataclass(frozen=True)
class VersionRange:
    """Interval of versions.

    A bare version parses to an "at least" range with no upper bound.
    """

    floor: Version = EMPTY_VERSION
    ceiling: Version | None = None
    include_floor: bool = True
    include_ceiling: bool = False

    @classmethod
    def parse(cls, text: str | None) -> VersionRange:
        """Parse ``[a,b)``-style interval notation or a bare version.

        Raises:
            ValueError: Malformed range
        """
        if text is None or not text.strip():
            return ANY_VERSION
        text = text.strip().strip('"')

        if text[0] not in "[(":
            return cls(floor=Version.parse(text))

        if text[-1] not in "])" or "," not in text:
            raise ValueError(f"Invalid version range '{text}'")

        low, high = text[1:-1].split(",", 1)
        floor = Version.parse(low)
        ceiling = Version.parse(high)
        if ceiling < floor:
            raise ValueError(f"Invalid version range '{text}': ceiling below floor")
        return cls(floor, ceiling, text[0] == "[", text[-1] == "]")

    @classmethod
    def exactly(cls, version: Version) -> VersionRange:
        return cls(version, version, True, True)

    def includes(self, version: Version) -> bool:
        if version < self.floor or (version == self.floor and not self.include_floor):
            return False
        if self.ceiling is None:
            return True
        if version > self.ceiling or (version == self.ceiling and not self.include_ceiling):
            return False
        return True

    def is_exact(self) -> bool:
        return self.ceiling == self.floor and self.include_floor and self.include_ceiling

    def to_filter(self, attribute: str = "version") -> str:
        """Render this range as an LDAP filter fragment over ``attribute``."""
        if self.ceiling is None:
            if self.floor.is_empty():
                return ""
            return f"({attribute}>={self.floor})"
        if self.is_exact():
            return f"({attribute}={self.floor})"

        parts = []
        if self.include_floor:
            parts.append(f"({attribute}>={self.floor})")
        else:
            parts.append(f"(!({attribute}<={self.floor}))")
        if self.include_ceiling:
            parts.append(f"({attribute}<={self.ceiling})")
        else:
            parts.append(f"(!({attribute}>={self.ceiling}))")
        return "(&" + "".join(parts) + ")"

    def __str__(self) -> str:
        if self.ceiling is None:
            return str(self.floor)
        left = "[" if self.include_floor else "("
        right = "]" if self.include_ceiling else ")"
        return f"{left}{self.floor},{self.ceiling}{right}"


ANY_VERSION = VersionRange()
