"""Public entry point: resolve a list of dependency specs to files on disk."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from mavenfetch.common.logging_utils import Timer, extra_context
from mavenfetch.config import ResolverConfiguration, load_config
from mavenfetch.engine import ResolutionEngine, reconcile
from mavenfetch.exceptions import ConfigurationError, InvalidCoordinate
from mavenfetch.models import (
    DEFAULT_RESOLVING_SCOPES,
    DEFAULT_SCOPE,
    Coordinate,
    DependencyScope,
    ResolvedArtifact,
    make_coordinate,
    parse_coordinate,
)
from mavenfetch.repository import Repository
from mavenfetch.transport import Transport

logger = logging.getLogger(__name__)

DependencySpec = Union[str, Coordinate, Mapping[str, Any]]
ScopeSpec = Union[str, DependencyScope]

_FIELD_ALIASES = {
    "group_id": ("group_id", "groupId", "group"),
    "artifact_id": ("artifact_id", "artifactId", "artifact"),
    "extension": ("extension", "type"),
    "classifier": ("classifier",),
    "version": ("version",),
    "scope": ("scope",),
}


def _raw_field(spec: Mapping[str, Any], name: str) -> Any:
    """First non-None value among the aliases of ``name``."""
    for alias in _FIELD_ALIASES[name]:
        value = spec.get(alias)
        if value is not None:
            return value
    return None


def _field(spec: Mapping[str, Any], name: str) -> Optional[str]:
    """Like ``_raw_field`` but stringified."""
    value = _raw_field(spec, name)
    return None if value is None else str(value)


def _to_scope(scope: ScopeSpec) -> DependencyScope:
    """Accept a DependencyScope member or its wire name."""
    if isinstance(scope, DependencyScope):
        return scope
    return DependencyScope.of(scope)


def to_coordinate(spec: DependencySpec) -> Coordinate:
    """Normalize a dependency id string, mapping or Coordinate.

    Raises:
        InvalidCoordinate: the spec is malformed.
        InvalidScope: a mapping names an unknown scope.
    """
    if isinstance(spec, Coordinate):
        return spec.unresolved()
    if isinstance(spec, str):
        return parse_coordinate(spec)
    if isinstance(spec, Mapping):
        scope = _raw_field(spec, "scope")
        return make_coordinate(
            _field(spec, "group_id"),
            _field(spec, "artifact_id"),
            _field(spec, "extension"),
            _field(spec, "classifier"),
            _field(spec, "version"),
            _to_scope(scope) if scope not in (None, "") else DEFAULT_SCOPE,
        )
    raise InvalidCoordinate(spec, f"unsupported spec type {type(spec).__name__}")


def to_scopes(scopes: Optional[Iterable[ScopeSpec]]) -> frozenset:
    """Normalize a scope filter; None or an empty filter means compile + runtime."""
    if scopes is None:
        return DEFAULT_RESOLVING_SCOPES
    if isinstance(scopes, (str, DependencyScope)):
        scopes = [scopes]
    normalized = frozenset(_to_scope(scope) for scope in scopes)
    return normalized or DEFAULT_RESOLVING_SCOPES


class MavenResolver:
    """Resolve dependency closures against one local and several remote repositories.

    Repository names must be unique across the local repository and the
    remotes.
    """

    def __init__(
        self,
        local_repository: Repository,
        remote_repositories: Sequence[Repository] = (),
        transport: Optional[Transport] = None,
    ):
        if not local_repository.is_local:
            raise ConfigurationError(f"Repository '{local_repository.name}' is not a local repository")
        names = [local_repository.name]
        for repository in remote_repositories:
            if not repository.is_remote:
                raise ConfigurationError(f"Repository '{repository.name}' is not a remote repository")
            if repository.name in names:
                raise ConfigurationError(f"Duplicate repository name '{repository.name}'")
            names.append(repository.name)
        self._engine = ResolutionEngine(local_repository, remote_repositories, transport)

    @classmethod
    def from_config(cls, config, transport: Optional[Transport] = None) -> "MavenResolver":
        """Build a resolver from a ``ResolverConfiguration`` or a configuration file path."""
        if not isinstance(config, ResolverConfiguration):
            config = load_config(Path(config))
        return cls(config.local_repository, config.remote_repositories, transport)

    @property
    def local_repository(self) -> Repository:
        return self._engine.local_repository

    @property
    def remote_repositories(self) -> List[Repository]:
        return list(self._engine.remote_repositories)

    def resolve(
        self,
        dependencies: Iterable[DependencySpec],
        scopes: Optional[Iterable[ScopeSpec]] = None,
    ) -> List[ResolvedArtifact]:
        """Resolve every root and its transitive dependencies.

        Args:
            dependencies: Dependency ids (``g:a[:ext[:cls]]:v``), mappings or Coordinates.
            scopes: Scopes followed through transitive dependencies; defaults to
                compile and runtime.

        Returns:
            One artifact per (group, artifact, classifier, extension), the most
            recently updated one, in discovery order.
        """
        roots = [to_coordinate(spec) for spec in dependencies]
        if not roots:
            return []
        resolving_scopes = to_scopes(scopes)

        discovered: List[ResolvedArtifact] = []
        with Timer() as t:
            for root in roots:
                discovered.extend(self._engine.resolve_closure(root, resolving_scopes))
            artifacts = reconcile(discovered)
        logger.info(
            "Resolved %d artifact(s) for %d dependency(ies)",
            len(artifacts),
            len(roots),
            extra=extra_context(
                event="resolve",
                component="resolver",
                outcome="success",
                duration_ms=t.duration_ms(),
            ),
        )
        return artifacts

    def resolve_files(
        self,
        dependencies: Iterable[DependencySpec],
        scopes: Optional[Iterable[ScopeSpec]] = None,
    ) -> List[Path]:
        """Like ``resolve`` but return only the artifact file paths."""
        return [artifact.file for artifact in self.resolve(dependencies, scopes)]
