"""Well-known capability namespaces, attributes, and unit types."""

IDENTITY_NAMESPACE = "osgi.identity"
PACKAGE_NAMESPACE = "osgi.wiring.package"
BUNDLE_NAMESPACE = "osgi.wiring.bundle"

# Namespaces with this prefix never appear in a synthesized Require-Capability header
RESERVED_PREFIX = "osgi."

VERSION_ATTRIBUTE = "version"
TYPE_ATTRIBUTE = "type"
BUNDLE_VERSION_ATTRIBUTE = "bundle-version"
BUNDLE_SYMBOLIC_NAME_ATTRIBUTE = "bundle-symbolic-name"

FILTER_DIRECTIVE = "filter"
RESOLUTION_DIRECTIVE = "resolution"
RESOLUTION_MANDATORY = "mandatory"
RESOLUTION_OPTIONAL = "optional"

TYPE_BUNDLE = "osgi.bundle"
TYPE_APPLICATION = "osgi.subsystem.application"
TYPE_COMPOSITE = "osgi.subsystem.composite"
TYPE_FEATURE = "osgi.subsystem.feature"


def is_reserved(namespace: str) -> bool:
    return namespace.startswith(RESERVED_PREFIX)
