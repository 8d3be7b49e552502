"""Error taxonomy for unit resolution.

Every failure aborts the unit construction in progress and propagates to the
caller. Nothing here is retried.
"""


class ResolverError(Exception):
    """Base class for all resolution failures."""


class InvalidLocationError(ResolverError):
    """Raised when an identifier cannot be parsed or opened as a readable source."""


class ManifestError(ResolverError):
    """Raised when manifest content is structurally invalid."""


class DirectoryCollisionError(ResolverError):
    """Raised when a unit's working directory already exists."""


class ResolutionError(ResolverError):
    """Raised when a repository lookup fails during requirement resolution."""


class NestingError(ResolverError):
    """Raised when nested archives exceed the depth limit or contain themselves."""


class ArchiveError(OSError):
    """Raised when an archive container cannot be read."""
