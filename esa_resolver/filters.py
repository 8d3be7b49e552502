"""LDAP-style filters used as requirement predicates.

Supports ``&``, ``|`` and ``!`` composition, the ``=``, ``~=``, ``>=`` and ``<=``
operators, presence tests (``(attr=*)``) and substring tests (``(attr=a*b)``).
Attribute names match case-insensitively. When the attribute value is a
``Version`` the operand is compared as a version.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .version import Version


class FilterSyntaxError(ValueError):
    """Raised when filter text cannot be parsed."""


class Filter:
    """Base class of parsed filter nodes."""

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class And(Filter):
    operands: tuple[Filter, ...]

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return all(operand.matches(attributes) for operand in self.operands)

    def __str__(self) -> str:
        return "(&" + "".join(str(o) for o in self.operands) + ")"


@dataclass(frozen=True)
class Or(Filter):
    operands: tuple[Filter, ...]

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return any(operand.matches(attributes) for operand in self.operands)

    def __str__(self) -> str:
        return "(|" + "".join(str(o) for o in self.operands) + ")"


@dataclass(frozen=True)
class Not(Filter):
    operand: Filter

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return not self.operand.matches(attributes)

    def __str__(self) -> str:
        return f"(!{self.operand})"


@dataclass(frozen=True)
class Present(Filter):
    attribute: str

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return _lookup(attributes, self.attribute) is not _MISSING

    def __str__(self) -> str:
        return f"({self.attribute}=*)"


@dataclass(frozen=True)
class Substring(Filter):
    attribute: str
    pieces: tuple[str, ...]

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        value = _lookup(attributes, self.attribute)
        if value is _MISSING:
            return False
        return any(self._match_one(str(v)) for v in _values(value))

    def _match_one(self, text: str) -> bool:
        first, *middle, last = self.pieces
        if not text.startswith(first):
            return False
        position = len(first)
        for piece in middle:
            found = text.find(piece, position)
            if found < 0:
                return False
            position = found + len(piece)
        return len(text) - position >= len(last) and text.endswith(last)

    def __str__(self) -> str:
        return f"({self.attribute}=" + "*".join(escape_filter_value(p) for p in self.pieces) + ")"


@dataclass(frozen=True)
class Comparison(Filter):
    attribute: str
    operator: str
    operand: str

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        value = _lookup(attributes, self.attribute)
        if value is _MISSING:
            return False
        return any(self._compare(v) for v in _values(value))

    def _compare(self, value: Any) -> bool:
        try:
            if isinstance(value, Version):
                other: Any = Version.parse(self.operand)
            elif isinstance(value, bool):
                other = self.operand.strip().lower() == "true"
            elif isinstance(value, int):
                other = int(self.operand.strip())
            elif isinstance(value, float):
                other = float(self.operand.strip())
            else:
                value = str(value)
                other = self.operand
        except ValueError:
            return False

        if self.operator == "=":
            return value == other
        if self.operator == "~=":
            return _approximate(str(value)) == _approximate(str(other))
        if self.operator == ">=":
            return value >= other
        return value <= other

    def __str__(self) -> str:
        return f"({self.attribute}{self.operator}{escape_filter_value(self.operand)})"


class _Missing:
    pass


_MISSING = _Missing()


def _lookup(attributes: Mapping[str, Any], name: str) -> Any:
    if name in attributes:
        return attributes[name]
    lowered = name.lower()
    for key, value in attributes.items():
        if key.lower() == lowered:
            return value
    return _MISSING


def _values(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return value
    return (value,)


def _approximate(text: str) -> str:
    return "".join(text.split()).lower()


def escape_filter_value(text: str) -> str:
    """Escape ``text`` for use as a filter operand."""
    return "".join("\\" + c if c in "\\*()" else c for c in text)


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> Filter:
        self._skip_ws()
        result = self._filter()
        self._skip_ws()
        if self.pos != len(self.text):
            raise self._error("trailing characters")
        return result

    def _error(self, reason: str) -> FilterSyntaxError:
        return FilterSyntaxError(f"Invalid filter '{self.text}' at {self.pos}: {reason}")

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _expect(self, char: str) -> None:
        self._skip_ws()
        if self.pos >= len(self.text) or self.text[self.pos] != char:
            raise self._error(f"expected '{char}'")
        self.pos += 1

    def _filter(self) -> Filter:
        self._expect("(")
        self._skip_ws()
        if self.pos >= len(self.text):
            raise self._error("unexpected end")

        char = self.text[self.pos]
        if char in "&|":
            self.pos += 1
            operands = self._filter_list()
            node: Filter = And(operands) if char == "&" else Or(operands)
        elif char == "!":
            self.pos += 1
            node = Not(self._filter())
        else:
            node = self._item()
        self._expect(")")
        return node

    def _filter_list(self) -> tuple[Filter, ...]:
        operands = []
        self._skip_ws()
        while self.pos < len(self.text) and self.text[self.pos] == "(":
            operands.append(self._filter())
            self._skip_ws()
        if not operands:
            raise self._error("empty composite filter")
        return tuple(operands)

    def _item(self) -> Filter:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in "=<>~()":
            self.pos += 1
        attribute = self.text[start : self.pos].strip()
        if not attribute:
            raise self._error("missing attribute name")

        operator = self._operator()
        pieces = self._value()

        if operator == "=" and len(pieces) > 1:
            if pieces == ["", ""]:
                return Present(attribute)
            return Substring(attribute, tuple(pieces))
        if len(pieces) > 1:
            raise self._error(f"wildcard not allowed with '{operator}'")
        return Comparison(attribute, operator, pieces[0])

    def _operator(self) -> str:
        for operator in ("~=", ">=", "<=", "="):
            if self.text.startswith(operator, self.pos):
                self.pos += len(operator)
                return operator
        raise self._error("expected operator")

    def _value(self) -> list[str]:
        pieces = []
        current: list[str] = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == ")":
                break
            if char == "(":
                raise self._error("unescaped '('")
            if char == "\\":
                self.pos += 1
                if self.pos >= len(self.text):
                    raise self._error("dangling escape")
                current.append(self.text[self.pos])
            elif char == "*":
                pieces.append("".join(current))
                current = []
            else:
                current.append(char)
            self.pos += 1
        pieces.append("".join(current))
        return pieces


def parse_filter(text: str) -> Filter:
    """Parse filter text into a matchable filter tree.

    Raises:
        FilterSyntaxError: Text is not a valid filter
    """
    return _Parser(text).parse()
