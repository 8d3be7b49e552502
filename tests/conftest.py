"""Pytest configuration for resolver tests."""

from pathlib import Path

import pytest

from esa_resolver.settings import ResolverContext
from esa_resolver.settings import ResolverSettings


@pytest.fixture
def context(tmp_path: Path) -> ResolverContext:
    """Context writing working directories under tmp_path/data."""
    return ResolverContext(settings=ResolverSettings(data_dir=tmp_path / "data"))


@pytest.fixture
def write_archive(tmp_path: Path):
    """Write archive bytes to tmp_path/archives/<name> and return the path string."""
    archives = tmp_path / "archives"
    archives.mkdir()

    def write(name: str, data: bytes) -> str:
        path = archives / name
        path.write_bytes(data)
        return str(path)

    return write
