"""Project descriptor (POM) parsing.

Only the parts the resolver needs are read: the ``project/properties`` map and
the direct ``project/dependencies/dependency`` list. Profiles, dependency
management, parents and exclusions are ignored.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from mavenfetch.exceptions import DescriptorParseError, InvalidCoordinate, InvalidScope
from mavenfetch.models import DEFAULT_SCOPE, Coordinate, DependencyScope, make_coordinate
from mavenfetch.descriptor.walker import PathMatchingHandler, parse_stream

logger = logging.getLogger(__name__)

PROPERTY_PATTERN = re.compile(r"\$\{([^}]+)\}")

PROJECT = ("project",)
PROPERTIES = ("project", "properties")
PARENT = ("project", "parent")
DEPENDENCY = ("project", "dependencies", "dependency")

_DEPENDENCY_FIELDS = ("groupId", "artifactId", "extension", "type", "classifier", "version", "scope")
_PROJECT_FIELDS = ("groupId", "artifactId", "version")


@dataclass(frozen=True)
class ProjectDescriptor:
    """Properties and direct dependencies declared by one POM."""

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: Tuple[Coordinate, ...] = ()


def interpolate_version(version: str, properties: Mapping[str, str]) -> str:
    """Substitute a version that is exactly one ``${name}`` reference.

    Versions that merely contain a reference are returned unchanged, as are
    references to unknown properties.
    """
    match = PROPERTY_PATTERN.fullmatch(version)
    if match is None:
        return version
    return properties.get(match.group(1), version)


class _PomHandler(PathMatchingHandler):
    """Collect properties, project fields and dependency entries of a POM."""

    def __init__(self) -> None:
        super().__init__()
        self.properties: Dict[str, str] = {}
        self.project: Dict[str, str] = {}
        self.parent: Dict[str, str] = {}
        self.entries: List[Dict[str, str]] = []
        self._entry: Dict[str, str] = {}

    def on_text(self, text: str) -> None:
        name = self.current_name()
        if self.is_parent_matched(PROPERTIES):
            self.properties[name] = text
        elif self.is_parent_matched(DEPENDENCY):
            if name in _DEPENDENCY_FIELDS:
                self._entry[name] = text
        elif self.is_parent_matched(PROJECT):
            if name in _PROJECT_FIELDS:
                self.project[name] = text
        elif self.is_parent_matched(PARENT):
            if name in _PROJECT_FIELDS:
                self.parent[name] = text

    def on_end(self) -> None:
        if self.is_matched(DEPENDENCY):
            self.entries.append(self._entry)
            self._entry = {}


def _builtin_properties(handler: _PomHandler) -> Dict[str, str]:
    """Built-in ``project.*`` and ``pom.*`` properties from the project or its parent."""
    builtins: Dict[str, str] = {}
    for name in _PROJECT_FIELDS:
        value = handler.project.get(name) or handler.parent.get(name)
        if value:
            builtins[f"project.{name}"] = value
            builtins[f"pom.{name}"] = value
    for name in _PROJECT_FIELDS:
        value = handler.parent.get(name)
        if value:
            builtins[f"project.parent.{name}"] = value
    return builtins


def _to_coordinate(entry: Mapping[str, str], properties: Mapping[str, str]) -> Optional[Coordinate]:
    """Turn one dependency entry into a coordinate; None when it is incomplete."""
    scope_name = entry.get("scope")
    try:
        scope = DependencyScope.of(scope_name) if scope_name else DEFAULT_SCOPE
    except InvalidScope as exc:
        raise DescriptorParseError(f"Dependency {entry.get('groupId')}:{entry.get('artifactId')}: {exc}") from exc
    version = entry.get("version")
    if version:
        version = interpolate_version(version, properties)
    try:
        return make_coordinate(
            entry.get("groupId"),
            entry.get("artifactId"),
            entry.get("extension") or entry.get("type"),
            entry.get("classifier"),
            version,
            scope,
        )
    except InvalidCoordinate as exc:
        logger.warning("Skipping incomplete dependency entry: %s", exc)
        return None


def parse_pom(source) -> ProjectDescriptor:
    """Parse a POM from a binary stream, a path or raw bytes.

    Raises:
        DescriptorParseError: on malformed XML or an unknown dependency scope.
    """
    handler = _PomHandler()
    parse_stream(source, handler, "project descriptor")

    properties = _builtin_properties(handler)
    properties.update(handler.properties)

    dependencies = []
    for entry in handler.entries:
        coordinate = _to_coordinate(entry, properties)
        if coordinate is not None:
            dependencies.append(coordinate)

    return ProjectDescriptor(
        group_id=handler.project.get("groupId") or handler.parent.get("groupId"),
        artifact_id=handler.project.get("artifactId"),
        version=handler.project.get("version") or handler.parent.get("version"),
        properties=dict(handler.properties),
        dependencies=tuple(dependencies),
    )
