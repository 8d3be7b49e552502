"""Tests for the archive directory view."""

from pathlib import Path

import pytest

from archive_builders import jar
from archive_builders import zip_bytes
from esa_resolver.archive import ArchiveDirectory
from esa_resolver.archive import pack_directory
from esa_resolver.archive import read_module_manifest
from esa_resolver.errors import ArchiveError
from esa_resolver.errors import ManifestError


@pytest.fixture
def archive_path(tmp_path: Path) -> Path:
    path = tmp_path / "unit.esa"
    path.write_bytes(
        zip_bytes(
            {
                "OSGI-INF/SUBSYSTEM.MF": "Subsystem-SymbolicName: unit\n",
                "b.jar": jar({"Bundle-SymbolicName": "b"}),
                "a.jar": jar(),
                "nested/c.jar": jar(),
                "notes.txt": "hello",
            }
        )
    )
    return path


def test_entries_are_top_level_files_in_archive_order(archive_path):
    with ArchiveDirectory(archive_path) as archive:
        entries = archive.entries()
    assert [e.name for e in entries] == ["b.jar", "a.jar", "notes.txt"]
    assert [e.is_module() for e in entries] == [True, True, False]
    assert entries[0].url == f"{archive_path.resolve().as_uri()}!/b.jar"


def test_read_text(archive_path):
    with ArchiveDirectory(archive_path) as archive:
        assert archive.read_text("OSGI-INF/SUBSYSTEM.MF") == "Subsystem-SymbolicName: unit\n"
        assert archive.read_text("OSGI-INF/DEPLOYMENT.MF") is None


def test_open_missing_entry(archive_path):
    with ArchiveDirectory(archive_path) as archive:
        with pytest.raises(FileNotFoundError):
            archive.open("missing.jar")


def test_module_manifest(archive_path):
    with ArchiveDirectory(archive_path) as archive:
        b, a, notes = archive.entries()
        assert "Bundle-SymbolicName: b" in read_module_manifest(b)
        assert read_module_manifest(a) is None
        assert read_module_manifest(notes) is None


def test_undecodable_module_manifest(tmp_path):
    path = tmp_path / "unit.esa"
    broken = b"Manifest-Version: 1.0\nBundle-SymbolicName: caf\xe9\n"
    path.write_bytes(zip_bytes({"bar.jar": zip_bytes({"META-INF/MANIFEST.MF": broken})}))

    with ArchiveDirectory(path) as archive:
        (entry,) = archive.entries()
        with pytest.raises(ManifestError, match="bar.jar"):
            read_module_manifest(entry)


def test_undecodable_subsystem_manifest(tmp_path):
    path = tmp_path / "unit.esa"
    path.write_bytes(zip_bytes({"OSGI-INF/SUBSYSTEM.MF": b"Subsystem-SymbolicName: caf\xe9\n"}))

    with ArchiveDirectory(path) as archive:
        with pytest.raises(ManifestError, match="not valid UTF-8"):
            archive.read_text("OSGI-INF/SUBSYSTEM.MF")


def test_not_a_zip(tmp_path):
    path = tmp_path / "broken.esa"
    path.write_bytes(b"not a zip")
    with pytest.raises(ArchiveError):
        ArchiveDirectory(path)


def test_pack_directory(tmp_path):
    source = tmp_path / "exploded"
    (source / "OSGI-INF").mkdir(parents=True)
    (source / "OSGI-INF" / "SUBSYSTEM.MF").write_text("Subsystem-SymbolicName: x\n")
    (source / "a.jar").write_bytes(jar())

    packed = tmp_path / "packed.esa"
    packed.write_bytes(pack_directory(source).read())

    with ArchiveDirectory(packed) as archive:
        assert [e.name for e in archive.entries()] == ["a.jar"]
        assert archive.read_text("OSGI-INF/SUBSYSTEM.MF") == "Subsystem-SymbolicName: x\n"
