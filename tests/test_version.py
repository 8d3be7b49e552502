"""Tests for versions and version ranges."""

import pytest

from esa_resolver.version import ANY_VERSION
from esa_resolver.version import EMPTY_VERSION
from esa_resolver.version import Version
from esa_resolver.version import VersionRange


def test_parse_pads_missing_parts():
    assert Version.parse("1") == Version(1, 0, 0)
    assert Version.parse("1.2") == Version(1, 2, 0)
    assert str(Version.parse("1.2.3.beta")) == "1.2.3.beta"


def test_empty_text_is_empty_version():
    assert Version.parse("") is EMPTY_VERSION
    assert Version.parse(None).is_empty()
    assert str(EMPTY_VERSION) == "0.0.0"


@pytest.mark.parametrize("text", ["a.b", "1.-2", "1.2.3.", "1.2.3.bad qualifier"])
def test_parse_rejects_garbage(text):
    with pytest.raises(ValueError):
        Version.parse(text)


def test_ordering_numeric_then_qualifier():
    assert Version.parse("1.10") > Version.parse("1.9")
    assert Version.parse("1.0.0.b") > Version.parse("1.0.0.a")
    assert Version.parse("1.0.0") < Version.parse("1.0.0.a")


def test_bare_range_is_at_least():
    version_range = VersionRange.parse("1.5")
    assert version_range.includes(Version.parse("1.5"))
    assert version_range.includes(Version.parse("99"))
    assert not version_range.includes(Version.parse("1.4.9"))
    assert str(version_range) == "1.5.0"


def test_interval_bounds():
    version_range = VersionRange.parse("[1.0,2.0)")
    assert version_range.includes(Version.parse("1.0"))
    assert version_range.includes(Version.parse("1.9.9"))
    assert not version_range.includes(Version.parse("2.0"))
    assert str(version_range) == "[1.0.0,2.0.0)"

    exclusive = VersionRange.parse("(1.0,2.0]")
    assert not exclusive.includes(Version.parse("1.0"))
    assert exclusive.includes(Version.parse("2.0"))


def test_quoted_range_and_empty_range():
    assert VersionRange.parse('"[1,2)"') == VersionRange.parse("[1,2)")
    assert VersionRange.parse(None) == ANY_VERSION
    assert ANY_VERSION.includes(EMPTY_VERSION)


def test_invalid_ranges():
    with pytest.raises(ValueError):
        VersionRange.parse("[2.0,1.0]")
    with pytest.raises(ValueError):
        VersionRange.parse("[1.0")


def test_range_filters():
    assert ANY_VERSION.to_filter() == ""
    assert VersionRange.parse("1.2").to_filter() == "(version>=1.2.0)"
    assert VersionRange.exactly(Version(1, 2, 0)).to_filter() == "(version=1.2.0)"
    assert VersionRange.parse("[1,2)").to_filter("bundle-version") == (
        "(&(bundle-version>=1.0.0)(!(bundle-version>=2.0.0)))"
    )
