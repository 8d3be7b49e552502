"""Tests for module resources."""

from pathlib import Path

from archive_builders import esa
from archive_builders import jar
from esa_resolver.archive import ArchiveDirectory
from esa_resolver.manifest import Manifest
from esa_resolver.module import ModuleResource
from esa_resolver.repository import LocalRepository
from esa_resolver.version import Version


def _module(tmp_path: Path, headers=None) -> ModuleResource:
    path = tmp_path / "holder.esa"
    path.write_bytes(esa({"lib.jar": jar(headers)}))
    with ArchiveDirectory(path) as archive:
        (entry,) = archive.entries()
        return ModuleResource.from_entry(entry)


def test_without_manifest_identity_is_entry_name(tmp_path):
    module = _module(tmp_path)
    assert module.symbolic_name == "lib.jar"
    assert module.version.is_empty()
    (identity,) = module.capabilities("osgi.identity")
    assert identity.attributes == {"osgi.identity": "lib.jar", "version": Version(), "type": "osgi.bundle"}
    assert identity.resource is module
    assert module.requirements() == []
    assert module.location.endswith("!/lib.jar")


def test_manifest_headers_become_capabilities(tmp_path):
    module = _module(
        tmp_path,
        {
            "Bundle-SymbolicName": "com.example.lib;singleton:=true",
            "Bundle-Version": "1.4.0",
            "Export-Package": 'com.example.lib.api;version="1.4"',
            "Provide-Capability": "com.example.db;kind=sql",
        },
    )
    assert module.symbolic_name == "com.example.lib"
    assert module.version == Version(1, 4, 0)

    (bundle,) = module.capabilities("osgi.wiring.bundle")
    assert bundle.attributes == {"osgi.wiring.bundle": "com.example.lib", "bundle-version": Version(1, 4, 0)}

    (export,) = module.capabilities("osgi.wiring.package")
    assert export.attributes["osgi.wiring.package"] == "com.example.lib.api"
    assert export.attributes["version"] == Version(1, 4, 0)
    assert export.attributes["bundle-symbolic-name"] == "com.example.lib"

    (provided,) = module.capabilities("com.example.db")
    assert provided.attributes == {"kind": "sql"}


def test_manifest_headers_become_requirements(tmp_path):
    module = _module(
        tmp_path,
        {
            "Bundle-SymbolicName": "com.example.app",
            "Import-Package": 'com.example.lib.api;version="[1,2)"',
            "Require-Bundle": "com.example.base",
            "Require-Capability": 'com.example.db;filter:="(kind=sql)"',
        },
    )
    assert [r.namespace for r in module.requirements()] == [
        "osgi.wiring.package",
        "osgi.wiring.bundle",
        "com.example.db",
    ]
    assert all(r.resource is module for r in module.requirements())


def test_import_resolves_against_export():
    exporter = ModuleResource(
        "lib.jar",
        "lib.jar",
        Manifest.from_text('Bundle-SymbolicName: lib\nExport-Package: com.example.api;version="1.5"\n'),
    )
    importer = ModuleResource(
        "app.jar",
        "app.jar",
        Manifest.from_text('Bundle-SymbolicName: app\nImport-Package: com.example.api;version="[1,2)"\n'),
    )
    (requirement,) = importer.requirements()
    (provider,) = LocalRepository([importer, exporter]).find_providers(requirement)
    assert provider.resource is exporter
