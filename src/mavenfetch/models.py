"""Coordinate, scope and artifact value types."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, Optional, Tuple

from mavenfetch.constants import Constants
from mavenfetch.exceptions import InvalidCoordinate, InvalidScope

if TYPE_CHECKING:
    from mavenfetch.repository import Repository

# Freshness of resolutions that were not backed by repository metadata.
UNKNOWN_UPDATE_TIME = datetime.min

# Identity without version, used to reconcile duplicate artifacts.
ArtifactKey = Tuple[str, str, str, str]


class DependencyScope(Enum):
    """Dependency scopes understood by the resolver."""

    COMPILE = "compile"
    PROVIDED = "provided"
    SYSTEM = "system"
    RUNTIME = "runtime"
    TEST = "test"

    @classmethod
    def of(cls, name: Optional[str]) -> "DependencyScope":
        """Look up a scope by its wire name.

        Raises:
            InvalidScope: if ``name`` is blank or unknown.
        """
        if name is None or not str(name).strip():
            raise InvalidScope(name)
        wanted = str(name).strip()
        for scope in cls:
            if scope.value == wanted:
                return scope
        raise InvalidScope(name)


DEFAULT_SCOPE = DependencyScope.COMPILE
DEFAULT_RESOLVING_SCOPES: FrozenSet[DependencyScope] = frozenset(
    {DependencyScope.COMPILE, DependencyScope.RUNTIME}
)


@dataclass(frozen=True)
class ResolvedExtra:
    """What a coordinate gains once a repository has agreed to serve it."""

    actual_version: str
    updated_time: datetime
    source_repository: "Repository"
    dependencies: Tuple["Coordinate", ...] = ()


@dataclass(frozen=True)
class Coordinate:
    """A dependency request.

    Equality and hashing cover group, artifact, extension, classifier and
    version only; scope and resolution details do not take part.
    """

    group_id: str
    artifact_id: str
    version: str
    extension: str = Constants.DEFAULT_EXTENSION
    classifier: str = Constants.DEFAULT_CLASSIFIER
    scope: DependencyScope = field(default=DEFAULT_SCOPE, compare=False)
    resolved: Optional[ResolvedExtra] = field(default=None, compare=False, repr=False)

    @property
    def is_resolved(self) -> bool:
        """True once a repository has agreed to serve this coordinate."""
        return self.resolved is not None

    @property
    def actual_version(self) -> str:
        """Resolved version, e.g. a timestamped snapshot; the declared version until resolved."""
        return self.resolved.actual_version if self.resolved is not None else self.version

    @property
    def updated_time(self) -> datetime:
        """Repository update time; ``UNKNOWN_UPDATE_TIME`` when not backed by metadata."""
        return self.resolved.updated_time if self.resolved is not None else UNKNOWN_UPDATE_TIME

    @property
    def source_repository(self) -> Optional["Repository"]:
        """Repository that served this coordinate, if resolved."""
        return self.resolved.source_repository if self.resolved is not None else None

    @property
    def dependencies(self) -> Tuple["Coordinate", ...]:
        """Direct dependencies declared by the served POM."""
        return self.resolved.dependencies if self.resolved is not None else ()

    @property
    def key(self) -> Tuple[str, str, str, str, str]:
        """Identity tuple (group, artifact, extension, classifier, version)."""
        return (self.group_id, self.artifact_id, self.extension, self.classifier, self.version)

    @property
    def artifact_key(self) -> ArtifactKey:
        """Version-less identity used for reconciliation."""
        return (self.group_id, self.artifact_id, self.classifier, self.extension)

    @property
    def is_snapshot(self) -> bool:
        """True for ``-SNAPSHOT`` versions."""
        return self.version.upper().endswith(Constants.SNAPSHOT_SUFFIX)

    def version_directory(self) -> str:
        """Relative directory of this version in the Maven repository layout."""
        return "/".join((self.group_id.replace(".", "/"), self.artifact_id, self.version)) + "/"

    def file_name(self, extension: Optional[str] = None, actual: bool = False) -> str:
        """File name inside the version directory.

        Args:
            extension: Overrides the coordinate's extension (e.g. "pom").
            actual: Use the resolved actual version instead of the declared one.
        """
        version = self.actual_version if actual else self.version
        name = f"{self.artifact_id}-{version}"
        if self.classifier:
            name = f"{name}-{self.classifier}"
        return f"{name}.{extension or self.extension}"

    def pom_file_name(self, actual: bool = False) -> str:
        """Project descriptor name; one POM serves every classifier of a version."""
        version = self.actual_version if actual else self.version
        return f"{self.artifact_id}-{version}.{Constants.POM_EXTENSION}"

    def unresolved(self) -> "Coordinate":
        """This coordinate without resolution details."""
        if self.resolved is None:
            return self
        return dataclasses.replace(self, resolved=None)

    def with_resolution(self, extra: ResolvedExtra) -> "Coordinate":
        """A copy carrying ``extra`` as its resolution."""
        return dataclasses.replace(self, resolved=extra)

    def __str__(self) -> str:
        return Constants.ID_DELIMITER.join(self.key)


@dataclass(frozen=True)
class ResolvedArtifact:
    """A resolved coordinate whose file has been materialized on disk."""

    coordinate: Coordinate
    file: Path

    def __post_init__(self):
        if not self.coordinate.is_resolved:
            raise ValueError(f"Artifact coordinate {self.coordinate} is not resolved")

    @property
    def group_id(self) -> str:
        return self.coordinate.group_id

    @property
    def artifact_id(self) -> str:
        return self.coordinate.artifact_id

    @property
    def extension(self) -> str:
        return self.coordinate.extension

    @property
    def classifier(self) -> str:
        return self.coordinate.classifier

    @property
    def version(self) -> str:
        return self.coordinate.version

    @property
    def scope(self) -> DependencyScope:
        return self.coordinate.scope

    @property
    def actual_version(self) -> str:
        return self.coordinate.actual_version

    @property
    def updated_time(self) -> datetime:
        return self.coordinate.updated_time

    @property
    def source_repository(self) -> "Repository":
        return self.coordinate.source_repository

    @property
    def repository_name(self) -> str:
        return self.coordinate.source_repository.name

    @property
    def dependencies(self) -> Tuple[Coordinate, ...]:
        return self.coordinate.dependencies

    @property
    def identity(self) -> ArtifactKey:
        return self.coordinate.artifact_key


def make_coordinate(
    group_id: Optional[str],
    artifact_id: Optional[str],
    extension: Optional[str],
    classifier: Optional[str],
    version: Optional[str],
    scope: DependencyScope = DEFAULT_SCOPE,
) -> Coordinate:
    """Create a coordinate, applying defaults for a missing extension or classifier."""
    group_id = (group_id or "").strip()
    artifact_id = (artifact_id or "").strip()
    version = (version or "").strip()
    spec = Constants.ID_DELIMITER.join((group_id, artifact_id, version))
    if not group_id:
        raise InvalidCoordinate(spec, "groupId is blank")
    if not artifact_id:
        raise InvalidCoordinate(spec, "artifactId is blank")
    if not version:
        raise InvalidCoordinate(spec, "version is blank")
    extension = (extension or "").strip() or Constants.DEFAULT_EXTENSION
    classifier = (classifier or "").strip()
    return Coordinate(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        extension=extension,
        classifier=classifier,
        scope=scope,
    )


def parse_coordinate(dependency_id: str, scope: DependencyScope = DEFAULT_SCOPE) -> Coordinate:
    """Parse ``groupId:artifactId[:extension[:classifier]]:version``.

    Raises:
        InvalidCoordinate: for any other number of parts or blank required parts.
    """
    if not isinstance(dependency_id, str) or not dependency_id.strip():
        raise InvalidCoordinate(dependency_id, "dependency id is blank")
    parts = dependency_id.strip().split(Constants.ID_DELIMITER)
    try:
        if len(parts) == 3:
            return make_coordinate(parts[0], parts[1], None, None, parts[2], scope)
        if len(parts) == 4:
            return make_coordinate(parts[0], parts[1], parts[2], None, parts[3], scope)
        if len(parts) == 5:
            return make_coordinate(parts[0], parts[1], parts[2], parts[3], parts[4], scope)
    except InvalidCoordinate as exc:
        raise InvalidCoordinate(dependency_id, exc.reason) from exc
    raise InvalidCoordinate(dependency_id, f"expected 3 to 5 parts, got {len(parts)}")
