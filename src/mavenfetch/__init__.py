"""mavenfetch - transitive Maven dependency resolution and artifact download.

Typical use::

    from mavenfetch import MavenResolver, Repository

    resolver = MavenResolver(
        Repository.local("local", "./repository"),
        [Repository.remote("central", "https://repo1.maven.org/maven2/")],
    )
    for artifact in resolver.resolve(["org.slf4j:slf4j-api:2.0.13"]):
        print(artifact.file)
"""

from .config import ResolverConfiguration, load_config
from .engine import ResolutionEngine, reconcile
from .exceptions import (
    ConfigurationError,
    DescriptorParseError,
    DownloadFailed,
    InvalidCoordinate,
    InvalidScope,
    MavenResolutionError,
    NotASnapshot,
    UnresolvableArtifact,
    UnresolvableDependency,
)
from .models import (
    DEFAULT_RESOLVING_SCOPES,
    Coordinate,
    DependencyScope,
    ResolvedArtifact,
    ResolvedExtra,
    parse_coordinate,
)
from .repository import Repository, RepositoryKind, RepositoryPolicy
from .resolver import MavenResolver
from .transport import Transport

__all__ = [
    "ConfigurationError",
    "Coordinate",
    "DEFAULT_RESOLVING_SCOPES",
    "DependencyScope",
    "DescriptorParseError",
    "DownloadFailed",
    "InvalidCoordinate",
    "InvalidScope",
    "MavenResolutionError",
    "MavenResolver",
    "NotASnapshot",
    "Repository",
    "RepositoryKind",
    "RepositoryPolicy",
    "ResolutionEngine",
    "ResolvedArtifact",
    "ResolvedExtra",
    "ResolverConfiguration",
    "Transport",
    "UnresolvableArtifact",
    "UnresolvableDependency",
    "load_config",
    "parse_coordinate",
    "reconcile",
]
