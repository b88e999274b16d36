"""Dependency resolution engine.

Resolution walks the repository chain (local repository first, then the
remotes in declaration order) until one repository serves a coordinate's
descriptor, then materializes the artifact into the local repository and
recurses into the scope-filtered dependencies, depth first.

Absence at one repository is never an error: it only moves the walk on.
Callers see ``UnresolvableDependency`` or ``UnresolvableArtifact`` once the
whole chain is exhausted.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from mavenfetch.common.logging_utils import extra_context, is_debug_enabled
from mavenfetch.constants import Constants
from mavenfetch.descriptor import parse_metadata, parse_pom
from mavenfetch.exceptions import (
    DescriptorParseError,
    DownloadFailed,
    UnresolvableArtifact,
    UnresolvableDependency,
)
from mavenfetch.models import (
    UNKNOWN_UPDATE_TIME,
    ArtifactKey,
    Coordinate,
    DependencyScope,
    ResolvedArtifact,
    ResolvedExtra,
)
from mavenfetch.repository import Repository
from mavenfetch.transport import Transport

logger = logging.getLogger(__name__)


def reconcile(artifacts: Iterable[ResolvedArtifact]) -> List[ResolvedArtifact]:
    """Keep one artifact per (group, artifact, classifier, extension).

    The artifact with the most recent ``updated_time`` wins; on a tie the one
    seen first is kept. Output follows first discovery of each identity.
    """
    chosen: Dict[ArtifactKey, ResolvedArtifact] = {}
    for artifact in artifacts:
        current = chosen.get(artifact.identity)
        if current is None or current.updated_time < artifact.updated_time:
            chosen[artifact.identity] = artifact
    return list(chosen.values())


class ResolutionEngine:
    """Resolve coordinates against a local repository and ordered remotes.

    Args:
        local_repository: The cache every artifact is materialized into.
        remote_repositories: Remotes, consulted in this order.
        transport: File transport; a default ``Transport`` when omitted.
    """

    def __init__(
        self,
        local_repository: Repository,
        remote_repositories: Sequence[Repository],
        transport: Optional[Transport] = None,
    ):
        self.local_repository = local_repository
        self.remote_repositories: Tuple[Repository, ...] = tuple(remote_repositories)
        self.transport = transport or Transport()

    @property
    def destination(self):
        """Root of the local repository layout."""
        return self.local_repository.location

    def resolve(self, repository: Repository, coordinate: Coordinate) -> Coordinate:
        """Ask one repository to serve ``coordinate``.

        Returns:
            A resolved coordinate carrying its direct dependencies, or the
            unresolved coordinate when the repository cannot serve it.

        Raises:
            UnresolvableDependency: a descriptor served by the repository is
                malformed.
            NotASnapshot: metadata was served for a non-snapshot version.
        """
        coordinate = coordinate.unresolved()
        actual_version = coordinate.version
        updated_time: datetime = UNKNOWN_UPDATE_TIME

        if repository.should_refresh_metadata and repository.is_remote:
            metadata_file = self._fetch(
                repository, coordinate, Constants.METADATA_FILE_NAME, Constants.METADATA_FILE_NAME
            )
            if metadata_file is not None:
                metadata = self._parse(parse_metadata, metadata_file, coordinate)
                if metadata.last_updated is None:
                    raise UnresolvableDependency(coordinate, "repository metadata has no lastUpdated")
                actual_version = metadata.actual_version
                updated_time = metadata.last_updated

        candidate = coordinate.with_resolution(
            ResolvedExtra(
                actual_version=actual_version,
                updated_time=updated_time,
                source_repository=repository,
            )
        )
        pom_file = self._fetch(
            repository,
            candidate,
            candidate.pom_file_name(actual=True),
            candidate.pom_file_name(actual=False),
        )
        if pom_file is None:
            return coordinate

        descriptor = self._parse(parse_pom, pom_file, coordinate)
        resolved = coordinate.with_resolution(
            ResolvedExtra(
                actual_version=actual_version,
                updated_time=updated_time,
                source_repository=repository,
                dependencies=descriptor.dependencies,
            )
        )
        logger.info(
            "Resolved %s from '%s'",
            resolved,
            repository.name,
            extra=extra_context(
                event="resolve",
                component="engine",
                outcome="resolved",
                repository=repository.name,
                actual_version=actual_version,
            ),
        )
        return resolved

    def resolve_in_chain(self, coordinate: Coordinate) -> Coordinate:
        """Resolve against the local repository, then each remote in order.

        Raises:
            UnresolvableDependency: no repository serves the descriptor.
        """
        if coordinate.is_resolved:
            return coordinate
        for repository in (self.local_repository,) + self.remote_repositories:
            resolved = self.resolve(repository, coordinate)
            if resolved.is_resolved:
                return resolved
        raise UnresolvableDependency(coordinate, "no repository serves its descriptor")

    def resolve_closure(
        self, coordinate: Coordinate, scopes: Iterable[DependencyScope]
    ) -> List[ResolvedArtifact]:
        """Resolve ``coordinate`` and its scope-filtered transitive dependencies.

        The result is the raw depth-first union; duplicates by identity are
        left for ``reconcile``.

        Raises:
            UnresolvableDependency: a descriptor cannot be served by any repository.
            UnresolvableArtifact: an artifact file cannot be served by any repository.
        """
        result: List[ResolvedArtifact] = []
        self._walk(coordinate, frozenset(scopes), set(), result)
        return result

    def _walk(
        self,
        coordinate: Coordinate,
        scopes: frozenset,
        expanded: Set[Tuple[str, str, str, str, str]],
        result: List[ResolvedArtifact],
    ) -> None:
        """Depth-first expansion of one coordinate into ``result``."""
        if coordinate.key in expanded:
            return
        expanded.add(coordinate.key)

        resolved = self.resolve_in_chain(coordinate)
        artifact = self.materialize(resolved)
        result.append(artifact)

        for dependency in artifact.dependencies:
            if dependency.scope not in scopes:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Skipping %s (scope %s)",
                        dependency,
                        dependency.scope.value,
                        extra=extra_context(event="scope_filter", component="engine", outcome="skipped"),
                    )
                continue
            self._walk(dependency, scopes, expanded, result)

    def materialize(self, resolved: Coordinate) -> ResolvedArtifact:
        """Place the artifact file of a resolved coordinate in the local repository.

        Looks in the local repository, then the source repository, then the
        remotes declared after the source repository.

        Raises:
            UnresolvableArtifact: no repository serves the file.
        """
        tried = [self.local_repository]
        if resolved.source_repository.name != self.local_repository.name:
            tried.append(resolved.source_repository)
        for repository in tried:
            artifact = self._download_artifact(repository, resolved)
            if artifact is not None:
                return artifact

        for repository in self._remotes_after(resolved.source_repository):
            candidate = self.resolve(repository, resolved)
            if not candidate.is_resolved:
                continue
            artifact = self._download_artifact(repository, candidate)
            if artifact is not None:
                return artifact

        raise UnresolvableArtifact(resolved)

    def _remotes_after(self, source: Repository) -> List[Repository]:
        """Remotes declared after ``source``; all remotes when it is the local repository."""
        start = 0
        for index, repository in enumerate(self.remote_repositories):
            if repository.name == source.name:
                start = index + 1
                break
        return [r for r in self.remote_repositories[start:] if r.name != source.name]

    def _download_artifact(self, repository: Repository, resolved: Coordinate) -> Optional[ResolvedArtifact]:
        """Fetch the artifact file from ``repository``; None when it lacks the file."""
        path = self._fetch(
            repository,
            resolved,
            resolved.file_name(actual=True),
            resolved.file_name(actual=False),
            min_size=Constants.MIN_ARTIFACT_BYTES,
        )
        if path is None:
            return None
        if repository.name != resolved.source_repository.name:
            resolved = resolved.with_resolution(
                ResolvedExtra(
                    actual_version=resolved.actual_version,
                    updated_time=resolved.updated_time,
                    source_repository=repository,
                    dependencies=resolved.dependencies,
                )
            )
        return ResolvedArtifact(coordinate=resolved, file=path)

    def _fetch(
        self,
        repository: Repository,
        coordinate: Coordinate,
        probe_subpath: str,
        materialize_subpath: str,
        min_size: int = 0,
    ):
        """Fetch one file, treating a failed transfer as absence."""
        try:
            return self.transport.fetch(
                repository,
                coordinate,
                self.destination,
                probe_subpath,
                materialize_subpath,
                min_size=min_size,
            )
        except DownloadFailed as exc:
            logger.warning(
                "Repository '%s' failed to serve %s: %s",
                repository.name,
                probe_subpath,
                exc,
                extra=extra_context(
                    event="download",
                    component="engine",
                    outcome="failed",
                    repository=repository.name,
                ),
            )
            return None

    @staticmethod
    def _parse(parser, path, coordinate: Coordinate):
        """Run a descriptor parser, escalating parse errors as ``UnresolvableDependency``."""
        try:
            return parser(path)
        except DescriptorParseError as exc:
            raise UnresolvableDependency(coordinate, str(exc)) from exc
