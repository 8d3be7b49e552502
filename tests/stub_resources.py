"""In-memory resources for repository and dependency tests."""

from esa_resolver.resource import Capability
from esa_resolver.resource import Requirement
from esa_resolver.version import Version


class StubResource:
    """Resource with an identity capability plus hand-picked capabilities and requirements."""

    def __init__(self, name, version="1.0.0", provides=(), requires=()):
        self.name = name
        self._capabilities = [
            Capability(
                "osgi.identity",
                {"osgi.identity": name, "version": Version.parse(version), "type": "osgi.bundle"},
                {},
                self,
            )
        ]
        for package in provides:
            self._capabilities.append(Capability("osgi.wiring.package", {"osgi.wiring.package": package}, {}, self))
        self._requirements = [package_requirement(package, self) for package in requires]

    def capabilities(self, namespace=None):
        return [c for c in self._capabilities if namespace is None or c.namespace == namespace]

    def requirements(self, namespace=None):
        return [r for r in self._requirements if namespace is None or r.namespace == namespace]

    def __repr__(self):
        return f"StubResource({self.name})"


def package_requirement(package, resource=None, optional=False):
    directives = {"filter": f"(osgi.wiring.package={package})"}
    if optional:
        directives["resolution"] = "optional"
    return Requirement("osgi.wiring.package", directives=directives, resource=resource)
