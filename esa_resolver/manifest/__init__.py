"""Manifest model - headers, clause syntax, and manifest collections.

Public API:
- Manifest / SubsystemManifest / DeploymentManifest: ordered header collections
- Header kinds: SymbolicNameHeader, VersionHeader, TypeHeader, ContentHeader,
  ImportPackageHeader, RequireBundleHeader, RequireCapabilityHeader, ...
- parse_manifest / write_manifest / Clause: raw text syntax
"""

from .headers import BundleSymbolicNameHeader
from .headers import BundleVersionHeader
from .headers import ContentHeader
from .headers import DeployedContentHeader
from .headers import ExportPackageHeader
from .headers import GenericHeader
from .headers import Header
from .headers import ImportPackageHeader
from .headers import ProvideCapabilityHeader
from .headers import ProvisionResourceHeader
from .headers import RequireBundleHeader
from .headers import RequireCapabilityHeader
from .headers import SymbolicNameHeader
from .headers import TypeHeader
from .headers import VersionHeader
from .headers import create_header
from .model import DeploymentManifest
from .model import Manifest
from .model import SubsystemManifest
from .parser import Clause
from .parser import parse_clauses
from .parser import parse_manifest
from .parser import write_manifest

__all__ = [
    "BundleSymbolicNameHeader",
    "BundleVersionHeader",
    "Clause",
    "ContentHeader",
    "DeployedContentHeader",
    "DeploymentManifest",
    "ExportPackageHeader",
    "GenericHeader",
    "Header",
    "ImportPackageHeader",
    "Manifest",
    "ProvideCapabilityHeader",
    "ProvisionResourceHeader",
    "RequireBundleHeader",
    "RequireCapabilityHeader",
    "SubsystemManifest",
    "SymbolicNameHeader",
    "TypeHeader",
    "VersionHeader",
    "create_header",
    "parse_clauses",
    "parse_manifest",
    "write_manifest",
]
