"""Unit resolution - turns a unit archive into a fully described resource.

Construction runs one strictly sequential pipeline:

    extract -> resources -> local repository -> manifest (before requirements)
    -> requirements -> manifest (after requirements) -> capabilities
    -> deployment manifest

Nested unit archives are resolved by a complete run of the same pipeline.
Any failure aborts construction; no partially built unit is ever returned.
The working directory created for a failed unit is left for the caller.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import BinaryIO

from .archive import ArchiveDirectory
from .dependency import DependencyCalculator
from .dependency import find_provider
from .errors import DirectoryCollisionError
from .errors import ManifestError
from .errors import NestingError
from .location import Location
from .manifest import ContentHeader
from .manifest import DeploymentManifest
from .manifest import ImportPackageHeader
from .manifest import RequireBundleHeader
from .manifest import RequireCapabilityHeader
from .manifest import SubsystemManifest
from .manifest import SymbolicNameHeader
from .manifest import TypeHeader
from .manifest import VersionHeader
from .module import ModuleResource
from .namespaces import BUNDLE_NAMESPACE
from .namespaces import PACKAGE_NAMESPACE
from .namespaces import is_reserved
from .repository import CompositeRepository
from .repository import LocalRepository
from .resource import Capability
from .resource import Requirement
from .resource import Resource
from .resource import filter_by_namespace
from .settings import ResolverContext

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".ssa"
COPY_CHUNK = 64 * 1024


class UnitResource:
    """A resolved unit archive.

    Args:
        location: Identifier of the archive (path, file URL, or subsystem URI)
        content: Archive bytes; opened from ``location`` when omitted
        context: Shared collaborators (identifiers, external repository, settings)
        ancestry: Content digests of enclosing units, outermost first
    """

    def __init__(
        self,
        location: str,
        content: BinaryIO | None = None,
        context: ResolverContext | None = None,
        ancestry: tuple[str, ...] = (),
    ):
        self.context = context or ResolverContext()
        self.location = Location.parse(location)

        max_depth = self.context.settings.max_depth
        if len(ancestry) > max_depth:
            raise NestingError(f"Unit '{location}' is nested deeper than the limit of {max_depth}")

        self.id = self.context.identifiers.next_id()
        self.directory = self._create_directory()

        if content is None:
            with self.location.open() as stream:
                self.digest = self._copy(stream)
        else:
            self.digest = self._copy(content)

        if self.digest in ancestry:
            raise NestingError(f"Unit '{location}' contains itself")
        logger.debug(f"[unit:{self.id}] extracted {self.location} to {self.archive_path}")

        with ArchiveDirectory(self.archive_path) as archive:
            self._resources = self._compute_resources(archive, ancestry + (self.digest,))
            self.local_repository = LocalRepository(self._resources)
            manifest = self._compute_existing_manifest(archive)
            manifest = self._compute_manifest_before_requirements(manifest)
            self.dependencies: list[Resource] = []
            self._requirements = self._compute_requirements(manifest)
            self.manifest = self._compute_manifest_after_requirements(manifest)
            self._capabilities = self.manifest.to_capabilities(self)
            self.deployment_manifest = self._compute_deployment_manifest(archive)

        logger.info(
            f"[unit:{self.id}] resolved {self.symbolic_name}@{self.version}: "
            f"{len(self._resources)} resources, {len(self._requirements)} requirements"
        )

    @property
    def archive_path(self) -> Path:
        return self.directory / f"{self.id}{ARCHIVE_SUFFIX}"

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources)

    @property
    def symbolic_name(self) -> str:
        header = self.manifest.symbolic_name_header
        if header is None:
            raise ManifestError(f"Unit {self.id} has no {SymbolicNameHeader.NAME} header")
        return header.symbolic_name

    @property
    def version(self):
        return self.manifest.version_header.version

    @property
    def type(self) -> str:
        return self.manifest.type_header.type

    def capabilities(self, namespace: str | None = None) -> list[Capability]:
        return filter_by_namespace(self._capabilities, namespace)

    def requirements(self, namespace: str | None = None) -> list[Requirement]:
        return filter_by_namespace(self._requirements, namespace)

    def _create_directory(self) -> Path:
        data_dir = self.context.settings.data_dir
        data_dir.mkdir(parents=True, exist_ok=True)
        directory = data_dir / str(self.id)
        try:
            directory.mkdir()
        except FileExistsError as e:
            raise DirectoryCollisionError(f"Unable to make directory {directory.absolute()}: already exists") from e
        return directory

    def _copy(self, content: BinaryIO) -> str:
        digest = hashlib.sha256()
        with open(self.archive_path, "xb") as out:
            while chunk := content.read(COPY_CHUNK):
                digest.update(chunk)
                out.write(chunk)
        return digest.hexdigest()

    def _compute_resources(self, archive: ArchiveDirectory, ancestry: tuple[str, ...]) -> list[Resource]:
        resources: list[Resource] = []
        for entry in archive.entries():
            if entry.is_module():
                resources.append(ModuleResource.from_entry(entry))
            elif entry.is_unit():
                logger.debug(f"[unit:{self.id}] descending into {entry.name}")
                with entry.open() as stream:
                    resources.append(UnitResource(entry.url, stream, self.context, ancestry))
        logger.debug(f"[unit:{self.id}] discovered {len(resources)} resources")
        return resources

    def _compute_existing_manifest(self, archive: ArchiveDirectory) -> SubsystemManifest:
        text = archive.read_text(SubsystemManifest.PATH)
        if text is None:
            return SubsystemManifest.Builder().build()
        return SubsystemManifest.from_text(text)

    def _compute_deployment_manifest(self, archive: ArchiveDirectory) -> DeploymentManifest | None:
        text = archive.read_text(DeploymentManifest.PATH)
        if text is None:
            return None
        return DeploymentManifest.from_text(text)

    def _compute_manifest_before_requirements(self, manifest: SubsystemManifest) -> SubsystemManifest:
        builder = SubsystemManifest.Builder().manifest(manifest)
        builder.header(self._compute_symbolic_name_header(manifest))
        builder.header(self._compute_version_header(manifest))
        builder.header(self._compute_type_header(manifest))
        builder.header(self._compute_content_header(manifest))
        return builder.build()

    def _compute_symbolic_name_header(self, manifest: SubsystemManifest) -> SymbolicNameHeader:
        header = manifest.symbolic_name_header
        if header is None:
            header = SymbolicNameHeader(self.location.symbolic_name or f"unit.{self.id}")
        return header

    def _compute_version_header(self, manifest: SubsystemManifest) -> VersionHeader:
        header = manifest.version_header
        if header.version.is_empty() and self.location.version is not None:
            header = VersionHeader.of(self.location.version)
        return header

    def _compute_type_header(self, manifest: SubsystemManifest) -> TypeHeader | None:
        if TypeHeader.NAME in manifest or self.location.type is None:
            return None
        return TypeHeader(self.location.type)

    def _compute_content_header(self, manifest: SubsystemManifest) -> ContentHeader | None:
        header = manifest.content_header
        if header is None and self._resources:
            header = ContentHeader.from_resources(self._resources)
        return header

    def _compute_requirements(self, manifest: SubsystemManifest) -> list[Requirement]:
        if manifest.is_composite():
            logger.debug(f"[unit:{self.id}] composite, keeping declared requirements")
            return manifest.to_requirements(self)

        header = manifest.content_header
        if header is None:
            return []

        repository = CompositeRepository(self.local_repository, self.context.external_repository)
        seeds = []
        for requirement in header.to_requirements(self):
            provider = find_provider(repository, requirement, self.context.selector)
            if provider is not None:
                seeds.append(provider)

        calculator = DependencyCalculator(seeds, repository, self.context.selector)
        self.dependencies = calculator.closure()
        requirements = calculator.calculate_dependencies()
        logger.debug(
            f"[unit:{self.id}] {len(seeds)} content providers, "
            f"{len(self.dependencies)} in closure, {len(requirements)} outward requirements"
        )
        return requirements

    def _compute_manifest_after_requirements(self, manifest: SubsystemManifest) -> SubsystemManifest:
        if manifest.is_composite():
            return manifest
        builder = SubsystemManifest.Builder().manifest(manifest)
        builder.header(self._compute_import_package_header())
        builder.header(self._compute_require_bundle_header())
        builder.header(self._compute_require_capability_header())
        return builder.build()

    def _compute_import_package_header(self) -> ImportPackageHeader | None:
        requirements = [r for r in self._requirements if r.namespace == PACKAGE_NAMESPACE]
        return ImportPackageHeader.from_requirements(requirements) if requirements else None

    def _compute_require_bundle_header(self) -> RequireBundleHeader | None:
        requirements = [r for r in self._requirements if r.namespace == BUNDLE_NAMESPACE]
        return RequireBundleHeader.from_requirements(requirements) if requirements else None

    def _compute_require_capability_header(self) -> RequireCapabilityHeader | None:
        requirements = [r for r in self._requirements if not is_reserved(r.namespace)]
        return RequireCapabilityHeader.from_requirements(requirements) if requirements else None

    def __repr__(self) -> str:
        return f"UnitResource(id={self.id}, {self.location})"
