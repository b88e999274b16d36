"""Parsers for the two XML descriptors the resolver consumes."""

from .metadata import VersioningMetadata, parse_metadata
from .pom import ProjectDescriptor, interpolate_version, parse_pom
from .walker import PathMatchingHandler

__all__ = [
    "PathMatchingHandler",
    "ProjectDescriptor",
    "VersioningMetadata",
    "interpolate_version",
    "parse_metadata",
    "parse_pom",
]
