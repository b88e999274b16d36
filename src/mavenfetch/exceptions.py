"""Exception hierarchy raised by the resolver.

Everything a caller can observe derives from ``MavenResolutionError``.
Repository-local absence is never an exception: the transport reports it as
``None`` and the engine moves on to the next repository.
"""
from __future__ import annotations

from typing import Optional


class MavenResolutionError(Exception):
    """Base class for all resolution failures."""


class ConfigurationError(MavenResolutionError):
    """Resolver configuration is missing, malformed or inconsistent."""


class InvalidScope(MavenResolutionError, ValueError):
    """A scope name is not one of the known dependency scopes."""

    def __init__(self, name: Optional[str]):
        super().__init__(f"Invalid dependency scope: {name!r}")
        self.name = name


class InvalidCoordinate(MavenResolutionError, ValueError):
    """A dependency id or structured spec cannot be turned into a coordinate."""

    def __init__(self, spec, reason: str = ""):
        message = f"Invalid dependency id: {spec!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.spec = spec
        self.reason = reason


class NotASnapshot(MavenResolutionError):
    """Snapshot version arithmetic was requested for a non-snapshot version."""

    def __init__(self, version: Optional[str], reason: str = "version must end with -SNAPSHOT"):
        super().__init__(f"Cannot compute snapshot version for {version!r}: {reason}")
        self.version = version


class DescriptorParseError(MavenResolutionError):
    """A POM or metadata document could not be parsed."""


class DownloadFailed(MavenResolutionError):
    """A transfer exhausted its retry budget."""

    def __init__(self, location: str, cause: Optional[BaseException] = None):
        message = f"Failed to download '{location}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.location = location
        self.cause = cause


class UnresolvableDependency(MavenResolutionError):
    """No repository in the chain could serve the coordinate's descriptor."""

    def __init__(self, coordinate, reason: str = ""):
        message = f"Cannot resolve dependency {coordinate}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.coordinate = coordinate


class UnresolvableArtifact(MavenResolutionError):
    """No repository in the chain could serve the coordinate's artifact file."""

    def __init__(self, coordinate):
        super().__init__(f"Cannot download dependency {coordinate}")
        self.coordinate = coordinate
