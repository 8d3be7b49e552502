"""Module resources - leaf artifacts inside a unit archive."""

from __future__ import annotations

import logging

from .archive import ArchiveEntry
from .archive import read_module_manifest
from .manifest import BundleSymbolicNameHeader
from .manifest import BundleVersionHeader
from .manifest import ExportPackageHeader
from .manifest import ImportPackageHeader
from .manifest import Manifest
from .manifest import ProvideCapabilityHeader
from .manifest import RequireBundleHeader
from .manifest import RequireCapabilityHeader
from .namespaces import BUNDLE_NAMESPACE
from .namespaces import BUNDLE_SYMBOLIC_NAME_ATTRIBUTE
from .namespaces import BUNDLE_VERSION_ATTRIBUTE
from .namespaces import IDENTITY_NAMESPACE
from .namespaces import TYPE_ATTRIBUTE
from .namespaces import TYPE_BUNDLE
from .namespaces import VERSION_ATTRIBUTE
from .resource import Capability
from .resource import Requirement
from .resource import filter_by_namespace
from .version import EMPTY_VERSION

logger = logging.getLogger(__name__)


class ModuleResource:
    """A module archive, described by its own manifest when it has one.

    Without a manifest the entry name is the symbolic name and the version is
    the empty version.
    """

    def __init__(self, location: str, name: str, manifest: Manifest | None = None):
        self.location = location
        self.manifest = manifest or Manifest()

        header = self.manifest.get(BundleSymbolicNameHeader.NAME)
        self.symbolic_name = header.symbolic_name if isinstance(header, BundleSymbolicNameHeader) else name
        version_header = self.manifest.get(BundleVersionHeader.NAME)
        self.version = version_header.version if isinstance(version_header, BundleVersionHeader) else EMPTY_VERSION

        self._capabilities = self._compute_capabilities()
        self._requirements = self._compute_requirements()

    @classmethod
    def from_entry(cls, entry: ArchiveEntry) -> ModuleResource:
        text = read_module_manifest(entry)
        manifest = Manifest.from_text(text) if text else None
        if manifest is None:
            logger.debug(f"Module {entry.name} has no manifest, identifying it by entry name")
        return cls(entry.url, entry.name, manifest)

    def capabilities(self, namespace: str | None = None) -> list[Capability]:
        return filter_by_namespace(self._capabilities, namespace)

    def requirements(self, namespace: str | None = None) -> list[Requirement]:
        return filter_by_namespace(self._requirements, namespace)

    def _compute_capabilities(self) -> list[Capability]:
        capabilities = [
            Capability(
                IDENTITY_NAMESPACE,
                {IDENTITY_NAMESPACE: self.symbolic_name, VERSION_ATTRIBUTE: self.version, TYPE_ATTRIBUTE: TYPE_BUNDLE},
                {},
                self,
            ),
            Capability(
                BUNDLE_NAMESPACE,
                {BUNDLE_NAMESPACE: self.symbolic_name, BUNDLE_VERSION_ATTRIBUTE: self.version},
                {},
                self,
            ),
        ]
        exports = self.manifest.get(ExportPackageHeader.NAME)
        if isinstance(exports, ExportPackageHeader):
            capabilities.extend(
                exports.to_capabilities(
                    self,
                    **{BUNDLE_SYMBOLIC_NAME_ATTRIBUTE: self.symbolic_name, BUNDLE_VERSION_ATTRIBUTE: self.version},
                )
            )
        provided = self.manifest.get(ProvideCapabilityHeader.NAME)
        if isinstance(provided, ProvideCapabilityHeader):
            capabilities.extend(provided.to_capabilities(self))
        return capabilities

    def _compute_requirements(self) -> list[Requirement]:
        requirements: list[Requirement] = []
        for header_type in (ImportPackageHeader, RequireBundleHeader, RequireCapabilityHeader):
            header = self.manifest.get(header_type.NAME)
            if isinstance(header, header_type):
                requirements.extend(header.to_requirements(self))
        return requirements

    def __repr__(self) -> str:
        return f"ModuleResource({self.symbolic_name}@{self.version})"
