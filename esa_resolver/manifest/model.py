"""Manifest collections and the subsystem manifest builder."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from ..errors import ManifestError
from ..namespaces import IDENTITY_NAMESPACE
from ..namespaces import TYPE_ATTRIBUTE
from ..namespaces import VERSION_ATTRIBUTE
from ..resource import Capability
from ..resource import Requirement
from ..resource import Resource
from .headers import ContentHeader
from .headers import DeployedContentHeader
from .headers import Header
from .headers import ImportPackageHeader
from .headers import ProvisionResourceHeader
from .headers import RequireBundleHeader
from .headers import RequireCapabilityHeader
from .headers import SymbolicNameHeader
from .headers import TypeHeader
from .headers import VersionHeader
from .headers import create_header
from .parser import parse_manifest
from .parser import write_manifest


class Manifest:
    """Ordered, name-unique collection of headers."""

    def __init__(self, headers: dict[str, Header] | None = None):
        self._headers: dict[str, Header] = dict(headers or {})

    @classmethod
    def from_text(cls, text: str):
        """Parse manifest text into typed headers.

        Raises:
            ManifestError: Malformed text or header value
        """
        headers = {}
        for name, value in parse_manifest(text).items():
            headers[name] = create_header(name, value)
        return cls(headers)

    @classmethod
    def from_file(cls, path: Path):
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ManifestError(f"Manifest {path} is not valid UTF-8: {e}") from e
        return cls.from_text(text)

    def get(self, name: str) -> Header | None:
        return self._headers.get(name)

    def headers(self) -> dict[str, Header]:
        return dict(self._headers)

    def to_text(self) -> str:
        return write_manifest({name: header.value for name, header in self._headers.items()})

    def to_dict(self) -> dict[str, str]:
        return {name: header.value for name, header in self._headers.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and self.to_dict() == other.to_dict()  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"


class SubsystemManifest(Manifest):
    """The manifest describing a unit (OSGI-INF/SUBSYSTEM.MF)."""

    PATH = "OSGI-INF/SUBSYSTEM.MF"

    @property
    def symbolic_name_header(self) -> SymbolicNameHeader | None:
        return self._typed(SymbolicNameHeader)

    @property
    def version_header(self) -> VersionHeader:
        return self._typed(VersionHeader) or VersionHeader()

    @property
    def type_header(self) -> TypeHeader:
        return self._typed(TypeHeader) or TypeHeader()

    @property
    def content_header(self) -> ContentHeader | None:
        return self._typed(ContentHeader)

    @property
    def import_package_header(self) -> ImportPackageHeader | None:
        return self._typed(ImportPackageHeader)

    @property
    def require_bundle_header(self) -> RequireBundleHeader | None:
        return self._typed(RequireBundleHeader)

    @property
    def require_capability_header(self) -> RequireCapabilityHeader | None:
        return self._typed(RequireCapabilityHeader)

    def is_composite(self) -> bool:
        return self.type_header.is_composite()

    def _typed(self, header_type):
        header = self._headers.get(header_type.NAME)
        if header is None:
            return None
        if not isinstance(header, header_type):
            raise ManifestError(f"Header {header_type.NAME} has unexpected kind {type(header).__name__}")
        return header

    def to_requirements(self, resource: Resource | None = None) -> list[Requirement]:
        """Requirements declared by the manifest's own requirement headers."""
        requirements: list[Requirement] = []
        for header in (self.import_package_header, self.require_bundle_header, self.require_capability_header):
            if header is not None:
                requirements.extend(header.to_requirements(resource))
        return requirements

    def to_capabilities(self, resource: Resource | None = None) -> list[Capability]:
        """The identity capability of the unit this manifest describes."""
        header = self.symbolic_name_header
        if header is None:
            return []
        attributes = {
            IDENTITY_NAMESPACE: header.symbolic_name,
            VERSION_ATTRIBUTE: self.version_header.version,
            TYPE_ATTRIBUTE: self.type_header.type,
        }
        return [Capability(IDENTITY_NAMESPACE, attributes, {}, resource)]

    class Builder:
        """Accumulates headers; later headers replace earlier ones of the same name."""

        def __init__(self):
            self._headers: dict[str, Header] = {}

        def manifest(self, manifest: Manifest | None) -> SubsystemManifest.Builder:
            if manifest is not None:
                for name, header in manifest.headers().items():
                    self._headers[name] = header
            return self

        def header(self, header: Header | None) -> SubsystemManifest.Builder:
            if header is not None:
                self._headers[header.name] = header
            return self

        def symbolic_name(self, name: str) -> SubsystemManifest.Builder:
            return self.header(SymbolicNameHeader(name))

        def build(self) -> SubsystemManifest:
            return SubsystemManifest(self._headers)


class DeploymentManifest(Manifest):
    """The resolved deployment of a unit (OSGI-INF/DEPLOYMENT.MF)."""

    PATH = "OSGI-INF/DEPLOYMENT.MF"

    @property
    def deployed_content_header(self) -> DeployedContentHeader | None:
        header = self._headers.get(DeployedContentHeader.NAME)
        return header if isinstance(header, DeployedContentHeader) else None

    @property
    def provision_resource_header(self) -> ProvisionResourceHeader | None:
        header = self._headers.get(ProvisionResourceHeader.NAME)
        return header if isinstance(header, ProvisionResourceHeader) else None
