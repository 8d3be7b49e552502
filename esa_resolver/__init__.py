"""Unit archive resolution.

Expands a unit archive (``.esa``) into its module and nested-unit resources,
resolves the requirements of its content, and synthesizes the unit manifest.

Public API:
- UnitResource: Resolve an archive (the entry point)
- ResolverContext / ResolverSettings / load_settings: Injected configuration
- Location: Parse archive identifiers
- LocalRepository / ExternalRepository / CompositeRepository / RepositoryRegistry
- DependencyCalculator / FirstProviderSelector: Dependency closure
- Capability / Requirement: Resource model
"""

from .dependency import DependencyCalculator
from .dependency import FirstProviderSelector
from .dependency import ProviderSelector
from .errors import ArchiveError
from .errors import DirectoryCollisionError
from .errors import InvalidLocationError
from .errors import ManifestError
from .errors import NestingError
from .errors import ResolutionError
from .errors import ResolverError
from .identifiers import IdentifierSource
from .location import Location
from .module import ModuleResource
from .repository import CompositeRepository
from .repository import ExternalRepository
from .repository import LocalRepository
from .repository import RepositoryRegistry
from .resource import Capability
from .resource import Requirement
from .settings import ResolverContext
from .settings import ResolverSettings
from .settings import load_settings
from .unit import UnitResource
from .version import Version
from .version import VersionRange

__all__ = [
    "ArchiveError",
    "Capability",
    "CompositeRepository",
    "DependencyCalculator",
    "DirectoryCollisionError",
    "ExternalRepository",
    "FirstProviderSelector",
    "IdentifierSource",
    "InvalidLocationError",
    "LocalRepository",
    "Location",
    "ManifestError",
    "ModuleResource",
    "NestingError",
    "ProviderSelector",
    "RepositoryRegistry",
    "Requirement",
    "ResolutionError",
    "ResolverContext",
    "ResolverError",
    "ResolverSettings",
    "UnitResource",
    "Version",
    "VersionRange",
    "load_settings",
]
