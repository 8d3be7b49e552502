"""Capability repositories.

Repository variants:
- LocalRepository: capabilities of an explicit resource collection
- ExternalRepository: lookups delegated to a RepositoryRegistry
- CompositeRepository: ordered union of member repositories
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from .resource import Capability
from .resource import Requirement
from .resource import Resource

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "esa_resolver.repositories"


class Repository(Protocol):
    def find_providers(self, requirement: Requirement) -> list[Capability]: ...


class LocalRepository:
    """Repository over an explicit, ordered resource collection."""

    def __init__(self, resources: Iterable[Resource]):
        self.resources = tuple(resources)

    def find_providers(self, requirement: Requirement) -> list[Capability]:
        return [
            capability
            for resource in self.resources
            for capability in resource.capabilities(requirement.namespace)
            if requirement.matches(capability)
        ]

    def __repr__(self) -> str:
        return f"LocalRepository({len(self.resources)} resources)"


class CompositeRepository:
    """Queries members in order and concatenates their answers."""

    def __init__(self, *members: Repository):
        self.members = tuple(members)

    def find_providers(self, requirement: Requirement) -> list[Capability]:
        result: list[Capability] = []
        for member in self.members:
            result.extend(member.find_providers(requirement))
        return result

    def __repr__(self) -> str:
        return f"CompositeRepository({', '.join(repr(m) for m in self.members)})"


class RepositoryRegistry:
    """Directory of named repositories available to every resolution.

    Repositories are queried in registration order. Registration may happen
    from any thread; lookups see a snapshot taken at call time.
    """

    def __init__(self):
        self._repositories: dict[str, Repository] = {}
        self._lock = threading.Lock()

    def register(self, name: str, repository: Repository) -> None:
        with self._lock:
            if name in self._repositories:
                raise ValueError(f"Repository '{name}' is already registered")
            self._repositories[name] = repository
        logger.debug(f"Registered repository {name}: {repository!r}")

    def unregister(self, name: str) -> None:
        with self._lock:
            self._repositories.pop(name, None)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._repositories)

    def find_providers(self, requirement: Requirement) -> list[Capability]:
        with self._lock:
            repositories = list(self._repositories.values())
        result: list[Capability] = []
        for repository in repositories:
            result.extend(repository.find_providers(requirement))
        return result

    @classmethod
    def from_entry_points(cls, group: str = ENTRY_POINT_GROUP) -> RepositoryRegistry:
        """Build a registry from installed repository factories.

        Each entry point must reference a zero-argument callable that returns
        a repository.
        """
        import importlib.metadata

        registry = cls()
        for entry_point in importlib.metadata.entry_points(group=group):
            factory = entry_point.load()
            registry.register(entry_point.name, factory())
        return registry


class ExternalRepository:
    """Adapts a RepositoryRegistry to the repository interface."""

    def __init__(self, registry: RepositoryRegistry | None = None):
        self.registry = registry or RepositoryRegistry()

    def find_providers(self, requirement: Requirement) -> list[Capability]:
        return self.registry.find_providers(requirement)

    def __repr__(self) -> str:
        return f"ExternalRepository({self.registry.names()})"
