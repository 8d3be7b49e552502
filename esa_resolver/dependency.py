"""Dependency closure over a repository.

Provider choice is greedy: the selector picks one capability per requirement
and no alternative is ever revisited. Given the same repository order and
resource order the outcome is the same on every run.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Protocol

from .errors import ResolutionError
from .repository import Repository
from .resource import Capability
from .resource import Requirement
from .resource import Resource
from .resource import resource_identity

logger = logging.getLogger(__name__)


class ProviderSelector(Protocol):
    """Strategy choosing one provider among the candidates for a requirement."""

    def select(self, requirement: Requirement, candidates: list[Capability]) -> Capability | None: ...


class FirstProviderSelector:
    """Take the first candidate the repository returned."""

    def select(self, requirement: Requirement, candidates: list[Capability]) -> Capability | None:
        return candidates[0] if candidates else None


def find_provider(
    repository: Repository,
    requirement: Requirement,
    selector: ProviderSelector | None = None,
) -> Resource | None:
    """Return the resource owning the selected provider of ``requirement``.

    Raises:
        ResolutionError: The repository lookup itself failed
    """
    selector = selector or FirstProviderSelector()
    try:
        candidates = repository.find_providers(requirement)
    except ResolutionError:
        raise
    except Exception as e:
        raise ResolutionError(f"Provider lookup failed for {requirement}: {e}") from e

    capability = selector.select(requirement, candidates)
    if capability is None:
        return None
    return capability.resource


class DependencyCalculator:
    """Computes the transitive closure of a seed resource set.

    Args:
        resources: Seed resources, each already chosen as a provider
        repository: Repository used to find providers for further requirements
        selector: Provider choice strategy (first match by default)
    """

    def __init__(
        self,
        resources: Iterable[Resource],
        repository: Repository,
        selector: ProviderSelector | None = None,
    ):
        self.seeds = _unique(resources)
        self.repository = repository
        self.selector = selector or FirstProviderSelector()
        self._closure: list[Resource] | None = None

    def closure(self) -> list[Resource]:
        """Seeds followed by every resource they transitively require, in BFS order."""
        if self._closure is not None:
            return list(self._closure)

        result = list(self.seeds)
        visited = {resource_identity(r) for r in result}
        queue = deque(result)

        while queue:
            resource = queue.popleft()
            for requirement in resource.requirements():
                provider = find_provider(self.repository, requirement, self.selector)
                if provider is None:
                    if not requirement.is_optional():
                        # Unsatisfied mandatory requirements are skipped, not failed
                        logger.warning(f"No provider for mandatory requirement {requirement} of {resource!r}")
                    continue
                identity = resource_identity(provider)
                if identity in visited:
                    continue
                visited.add(identity)
                result.append(provider)
                queue.append(provider)

        logger.debug(f"Closure of {len(self.seeds)} seeds contains {len(result)} resources")
        self._closure = result
        return list(result)

    def calculate_dependencies(self) -> list[Requirement]:
        """Requirements of the seeds that no seed satisfies.

        These are the requirements the seed set as a whole places on its
        environment. Structurally equal requirements are collapsed.
        """
        content_capabilities = [c for seed in self.seeds for c in seed.capabilities()]
        dependencies: list[Requirement] = []
        seen: set[tuple] = set()

        for seed in self.seeds:
            for requirement in seed.requirements():
                if any(requirement.matches(c) for c in content_capabilities):
                    continue
                key = requirement.key()
                if key in seen:
                    continue
                seen.add(key)
                dependencies.append(requirement)
        return dependencies


def _unique(resources: Iterable[Resource]) -> list[Resource]:
    result = []
    seen = set()
    for resource in resources:
        identity = resource_identity(resource)
        if identity in seen:
            continue
        seen.add(identity)
        result.append(resource)
    return result
