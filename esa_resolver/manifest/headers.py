"""Typed manifest headers.

Each header kind parses its raw clause text on construction and serializes
back to it through ``value``. Headers that describe requirements or
capabilities convert to and from the resource model.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..errors import ManifestError
from ..filters import And
from ..filters import Comparison
from ..filters import Filter
from ..filters import FilterSyntaxError
from ..filters import Not
from ..filters import escape_filter_value
from ..namespaces import BUNDLE_NAMESPACE
from ..namespaces import BUNDLE_SYMBOLIC_NAME_ATTRIBUTE
from ..namespaces import BUNDLE_VERSION_ATTRIBUTE
from ..namespaces import FILTER_DIRECTIVE
from ..namespaces import IDENTITY_NAMESPACE
from ..namespaces import PACKAGE_NAMESPACE
from ..namespaces import RESOLUTION_DIRECTIVE
from ..namespaces import RESOLUTION_OPTIONAL
from ..namespaces import TYPE_APPLICATION
from ..namespaces import TYPE_ATTRIBUTE
from ..namespaces import TYPE_BUNDLE
from ..namespaces import TYPE_COMPOSITE
from ..namespaces import TYPE_FEATURE
from ..namespaces import VERSION_ATTRIBUTE
from ..resource import Capability
from ..resource import Requirement
from ..resource import Resource
from ..resource import identity_capability
from ..version import EMPTY_VERSION
from ..version import Version
from ..version import VersionRange
from .parser import Clause
from .parser import parse_clauses


class Header:
    """A named header holding its raw value verbatim."""

    NAME = ""

    def __init__(self, value: str, name: str | None = None):
        self.name = name or self.NAME
        if not self.name:
            raise ManifestError("Header name must not be empty")
        self.value = value.strip()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Header) and (self.name, self.value) == (other.name, other.value)

    def __hash__(self) -> int:
        return hash((self.name, self.value))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name}: {self.value})"


class GenericHeader(Header):
    """Header with no dedicated kind; kept as raw text."""


class ClauseHeader(Header):
    """Header whose value is a list of clauses."""

    def __init__(self, value: str, name: str | None = None):
        super().__init__(value, name)
        self.clauses: tuple[Clause, ...] = parse_clauses(self.value)

    @classmethod
    def from_clauses(cls, clauses: Iterable[Clause]):
        clauses = list(clauses)
        if not clauses:
            raise ManifestError(f"{cls.NAME} requires at least one clause")
        return cls(",".join(str(c) for c in clauses))


class SymbolicNameHeader(ClauseHeader):
    NAME = "Subsystem-SymbolicName"

    def __init__(self, value: str, name: str | None = None):
        super().__init__(value, name)
        if len(self.clauses) != 1 or len(self.clauses[0].paths) != 1:
            raise ManifestError(f"{self.name} must name exactly one symbolic name: '{value}'")

    @property
    def symbolic_name(self) -> str:
        return self.clauses[0].path


class BundleSymbolicNameHeader(SymbolicNameHeader):
    NAME = "Bundle-SymbolicName"


class VersionHeader(Header):
    NAME = "Subsystem-Version"

    def __init__(self, value: str = "", name: str | None = None):
        super().__init__(value or str(EMPTY_VERSION), name)
        try:
            self.version = Version.parse(self.value)
        except ValueError as e:
            raise ManifestError(f"{self.name}: {e}") from e

    @classmethod
    def of(cls, version: Version):
        return cls(str(version))


class BundleVersionHeader(VersionHeader):
    NAME = "Bundle-Version"


class TypeHeader(ClauseHeader):
    NAME = "Subsystem-Type"
    TYPES = (TYPE_APPLICATION, TYPE_COMPOSITE, TYPE_FEATURE)

    def __init__(self, value: str = TYPE_APPLICATION, name: str | None = None):
        super().__init__(value, name)
        if len(self.clauses) != 1 or self.clauses[0].path not in self.TYPES:
            raise ManifestError(f"Unsupported {self.NAME} '{value}'")

    @property
    def type(self) -> str:
        return self.clauses[0].path

    @property
    def provision_policy(self) -> str | None:
        return self.clauses[0].directives.get("provision-policy")

    def is_composite(self) -> bool:
        return self.type == TYPE_COMPOSITE


def _content_name(clause: Clause) -> str:
    return clause.path


def _content_range(clause: Clause) -> VersionRange:
    try:
        return VersionRange.parse(clause.attributes.get(VERSION_ATTRIBUTE))
    except ValueError as e:
        raise ManifestError(f"Content '{clause.path}': {e}") from e


class ContentHeader(ClauseHeader):
    """Subsystem-Content: the resources a unit is made of."""

    NAME = "Subsystem-Content"

    def __init__(self, value: str, name: str | None = None):
        super().__init__(value, name)
        for clause in self.clauses:
            _content_range(clause)

    @classmethod
    def from_resources(cls, resources: Iterable[Resource]) -> ContentHeader | None:
        """One clause per resource, pinned to the resource's exact version."""
        clauses = []
        for resource in resources:
            capability = identity_capability(resource)
            if capability is None:
                continue
            attributes = capability.attributes
            version = attributes.get(VERSION_ATTRIBUTE, EMPTY_VERSION)
            if not isinstance(version, Version):
                version = Version.parse(str(version))
            clauses.append(
                Clause(
                    (attributes[IDENTITY_NAMESPACE],),
                    {
                        VERSION_ATTRIBUTE: str(VersionRange.exactly(version)),
                        TYPE_ATTRIBUTE: attributes.get(TYPE_ATTRIBUTE, TYPE_BUNDLE),
                    },
                )
            )
        if not clauses:
            return None
        return cls.from_clauses(clauses)

    def entries(self) -> list[dict[str, Any]]:
        result = []
        for clause in self.clauses:
            start_order = clause.directives.get("start-order")
            result.append(
                {
                    "name": _content_name(clause),
                    "version": _content_range(clause),
                    "type": clause.attributes.get(TYPE_ATTRIBUTE, TYPE_BUNDLE),
                    "optional": clause.directives.get(RESOLUTION_DIRECTIVE) == RESOLUTION_OPTIONAL,
                    "start_order": int(start_order) if start_order else None,
                }
            )
        return result

    def to_requirements(self, resource: Resource | None = None) -> list[Requirement]:
        requirements = []
        for entry in self.entries():
            parts = [
                f"({IDENTITY_NAMESPACE}={escape_filter_value(entry['name'])})",
                f"({TYPE_ATTRIBUTE}={escape_filter_value(entry['type'])})",
            ]
            version_filter = entry["version"].to_filter(VERSION_ATTRIBUTE)
            if version_filter:
                parts.append(version_filter)
            directives = {FILTER_DIRECTIVE: "(&" + "".join(parts) + ")"}
            if entry["optional"]:
                directives[RESOLUTION_DIRECTIVE] = RESOLUTION_OPTIONAL
            requirements.append(Requirement(IDENTITY_NAMESPACE, directives=directives, resource=resource))
        return requirements


def _describe_filter(node: Filter | None, name_attribute: str, version_attribute: str):
    """Recover (name, version range) from a filter built by the headers below."""
    name = None
    floor, ceiling = EMPTY_VERSION, None
    include_floor, include_ceiling = True, False

    def visit(n: Filter, negated: bool = False) -> None:
        nonlocal name, floor, ceiling, include_floor, include_ceiling
        if isinstance(n, And) and not negated:
            for operand in n.operands:
                visit(operand)
        elif isinstance(n, Not) and not negated:
            visit(n.operand, True)
        elif isinstance(n, Comparison):
            attribute = n.attribute.lower()
            if attribute == name_attribute.lower() and n.operator == "=" and not negated:
                name = n.operand
            elif attribute == version_attribute.lower():
                version = Version.parse(n.operand)
                if n.operator == "=" and not negated:
                    floor, ceiling, include_floor, include_ceiling = version, version, True, True
                elif n.operator == ">=":
                    if negated:
                        ceiling, include_ceiling = version, False
                    else:
                        floor, include_floor = version, True
                elif n.operator == "<=":
                    if negated:
                        floor, include_floor = version, False
                    else:
                        ceiling, include_ceiling = version, True

    if node is not None:
        visit(node)
    return name, VersionRange(floor, ceiling, include_floor, include_ceiling)


class RequirementHeader(ClauseHeader):
    """Header whose clauses each name one requirement in NAMESPACE."""

    NAMESPACE = ""
    VERSION_ATTRIBUTE = VERSION_ATTRIBUTE

    @classmethod
    def clause_for(cls, requirement: Requirement) -> Clause:
        try:
            name, version_range = _describe_filter(requirement.filter, cls.NAMESPACE, cls.VERSION_ATTRIBUTE)
        except (FilterSyntaxError, ValueError) as e:
            raise ManifestError(f"Cannot express requirement {requirement}: {e}") from e
        name = name or requirement.attributes.get(cls.NAMESPACE)
        if not name:
            raise ManifestError(f"Cannot express requirement {requirement} as {cls.NAME}")

        attributes = {}
        if version_range != VersionRange():
            attributes[cls.VERSION_ATTRIBUTE] = str(version_range)
        directives = {}
        if requirement.is_optional():
            directives[RESOLUTION_DIRECTIVE] = RESOLUTION_OPTIONAL
        return Clause((str(name),), attributes, directives)

    @classmethod
    def from_requirements(cls, requirements: Iterable[Requirement]):
        return cls.from_clauses(cls.clause_for(r) for r in requirements)

    def to_requirements(self, resource: Resource | None = None) -> list[Requirement]:
        requirements = []
        for clause in self.clauses:
            try:
                version_range = VersionRange.parse(clause.attributes.get(self.VERSION_ATTRIBUTE))
            except ValueError as e:
                raise ManifestError(f"{self.name} '{clause.path}': {e}") from e
            extra = [
                f"({key}={escape_filter_value(value)})"
                for key, value in clause.attributes.items()
                if key not in (self.VERSION_ATTRIBUTE, "specification-version")
            ]
            for path in clause.paths:
                parts = [f"({self.NAMESPACE}={escape_filter_value(path)})", *extra]
                version_filter = version_range.to_filter(self.VERSION_ATTRIBUTE)
                if version_filter:
                    parts.append(version_filter)
                text = parts[0] if len(parts) == 1 else "(&" + "".join(parts) + ")"
                directives = {FILTER_DIRECTIVE: text}
                if clause.directives.get(RESOLUTION_DIRECTIVE) == RESOLUTION_OPTIONAL:
                    directives[RESOLUTION_DIRECTIVE] = RESOLUTION_OPTIONAL
                requirements.append(Requirement(self.NAMESPACE, directives=directives, resource=resource))
        return requirements


class ImportPackageHeader(RequirementHeader):
    NAME = "Import-Package"
    NAMESPACE = PACKAGE_NAMESPACE


class RequireBundleHeader(RequirementHeader):
    NAME = "Require-Bundle"
    NAMESPACE = BUNDLE_NAMESPACE
    VERSION_ATTRIBUTE = BUNDLE_VERSION_ATTRIBUTE


class RequireCapabilityHeader(ClauseHeader):
    """Generic requirements: the clause path is the namespace."""

    NAME = "Require-Capability"

    @classmethod
    def clause_for(cls, requirement: Requirement) -> Clause:
        attributes = {key: str(value) for key, value in requirement.attributes.items()}
        return Clause((requirement.namespace,), attributes, dict(requirement.directives))

    @classmethod
    def from_requirements(cls, requirements: Iterable[Requirement]) -> RequireCapabilityHeader:
        return cls.from_clauses(cls.clause_for(r) for r in requirements)

    def to_requirements(self, resource: Resource | None = None) -> list[Requirement]:
        return [
            Requirement(namespace, clause.typed_attributes(), dict(clause.directives), resource)
            for clause in self.clauses
            for namespace in clause.paths
        ]


class ExportPackageHeader(ClauseHeader):
    NAME = "Export-Package"

    def to_capabilities(self, resource: Resource | None = None, **extra: Any) -> list[Capability]:
        capabilities = []
        for clause in self.clauses:
            attributes = clause.typed_attributes()
            try:
                version = Version.parse(str(attributes.pop(VERSION_ATTRIBUTE, "")))
            except ValueError as e:
                raise ManifestError(f"{self.name} '{clause.path}': {e}") from e
            for path in clause.paths:
                capabilities.append(
                    Capability(
                        PACKAGE_NAMESPACE,
                        {PACKAGE_NAMESPACE: path, VERSION_ATTRIBUTE: version, **extra, **attributes},
                        dict(clause.directives),
                        resource,
                    )
                )
        return capabilities


class ProvideCapabilityHeader(ClauseHeader):
    NAME = "Provide-Capability"

    def to_capabilities(self, resource: Resource | None = None) -> list[Capability]:
        return [
            Capability(namespace, clause.typed_attributes(), dict(clause.directives), resource)
            for clause in self.clauses
            for namespace in clause.paths
        ]


class DeploymentEntryHeader(ClauseHeader):
    """Deployment headers: each clause pins one resource to a deployed version."""

    def __init__(self, value: str, name: str | None = None):
        super().__init__(value, name)
        for clause in self.clauses:
            if "deployed-version" not in clause.attributes:
                raise ManifestError(f"{self.name} '{clause.path}' lacks deployed-version")
            try:
                Version.parse(clause.attributes["deployed-version"])
            except ValueError as e:
                raise ManifestError(f"{self.name} '{clause.path}': {e}") from e

    def entries(self) -> list[dict[str, Any]]:
        return [
            {
                "name": clause.path,
                "deployed_version": Version.parse(clause.attributes["deployed-version"]),
                "type": clause.attributes.get(TYPE_ATTRIBUTE, TYPE_BUNDLE),
                "resource_id": clause.attributes.get("resource-id"),
            }
            for clause in self.clauses
        ]


class DeployedContentHeader(DeploymentEntryHeader):
    NAME = "Deployed-Content"


class ProvisionResourceHeader(DeploymentEntryHeader):
    NAME = "Provision-Resource"


HEADER_TYPES: dict[str, type[Header]] = {
    cls.NAME: cls
    for cls in (
        SymbolicNameHeader,
        BundleSymbolicNameHeader,
        VersionHeader,
        BundleVersionHeader,
        TypeHeader,
        ContentHeader,
        ImportPackageHeader,
        RequireBundleHeader,
        RequireCapabilityHeader,
        ExportPackageHeader,
        ProvideCapabilityHeader,
        DeployedContentHeader,
        ProvisionResourceHeader,
    )
}


def create_header(name: str, value: str) -> Header:
    """Build the typed header for ``name``, or a GenericHeader if none is known."""
    header_type = HEADER_TYPES.get(name)
    if header_type is None:
        return GenericHeader(value, name)
    return header_type(value)
