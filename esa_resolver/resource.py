"""Capabilities, requirements, and the resource interface.

A resource offers capabilities and declares requirements, each tagged with a
namespace. Requirements match capabilities either through an LDAP-style
``filter`` directive or through an explicit predicate supplied at creation.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from functools import cached_property
from typing import Any
from typing import Protocol

from .filters import Filter
from .filters import parse_filter
from .namespaces import FILTER_DIRECTIVE
from .namespaces import IDENTITY_NAMESPACE
from .namespaces import RESOLUTION_DIRECTIVE
from .namespaces import RESOLUTION_OPTIONAL
from .namespaces import TYPE_ATTRIBUTE
from .namespaces import VERSION_ATTRIBUTE


class Resource(Protocol):
    """Anything that offers capabilities and declares requirements."""

    def capabilities(self, namespace: str | None = None) -> list[Capability]: ...

    def requirements(self, namespace: str | None = None) -> list[Requirement]: ...


@dataclass(frozen=True, eq=False)
class Capability:
    """A namespaced assertion offered by a resource."""

    namespace: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    directives: Mapping[str, str] = field(default_factory=dict)
    resource: Resource | None = field(default=None, repr=False)

    def __post_init__(self):
        if not self.namespace:
            raise ValueError("Capability namespace must not be empty")


@dataclass(frozen=True, eq=False)
class Requirement:
    """A namespaced need declared by a resource.

    ``predicate``, when given, replaces the ``filter`` directive as the
    matching rule.
    """

    namespace: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    directives: Mapping[str, str] = field(default_factory=dict)
    resource: Resource | None = field(default=None, repr=False)
    predicate: Callable[[Capability], bool] | None = field(default=None, repr=False)

    def __post_init__(self):
        if not self.namespace:
            raise ValueError("Requirement namespace must not be empty")

    @cached_property
    def filter(self) -> Filter | None:
        text = self.directives.get(FILTER_DIRECTIVE)
        return parse_filter(text) if text else None

    def is_optional(self) -> bool:
        return self.directives.get(RESOLUTION_DIRECTIVE) == RESOLUTION_OPTIONAL

    def matches(self, capability: Capability) -> bool:
        if capability.namespace != self.namespace:
            return False
        if self.predicate is not None:
            return self.predicate(capability)
        if self.filter is None:
            return True
        return self.filter.matches(capability.attributes)

    def key(self) -> tuple:
        """Structural identity used to collapse equal requirements."""
        return (
            self.namespace,
            self.directives.get(FILTER_DIRECTIVE),
            self.is_optional(),
            self.predicate,
            tuple(sorted((k, str(v)) for k, v in self.attributes.items())),
        )


def identity_capability(resource: Resource) -> Capability | None:
    capabilities = resource.capabilities(IDENTITY_NAMESPACE)
    return capabilities[0] if capabilities else None


def resource_identity(resource: Resource) -> tuple:
    """Return (symbolic name, version, type) for a resource.

    Resources without an identity capability fall back to object identity.
    """
    capability = identity_capability(resource)
    if capability is None:
        return ("", id(resource))
    attributes = capability.attributes
    return (
        attributes.get(IDENTITY_NAMESPACE),
        str(attributes.get(VERSION_ATTRIBUTE, "")),
        attributes.get(TYPE_ATTRIBUTE),
    )


def filter_by_namespace(items: list, namespace: str | None) -> list:
    if namespace is None:
        return list(items)
    return [item for item in items if item.namespace == namespace]
