"""Version-level ``maven-metadata.xml`` parsing for snapshot resolution."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mavenfetch.constants import Constants
from mavenfetch.exceptions import DescriptorParseError, NotASnapshot
from mavenfetch.descriptor.walker import PathMatchingHandler, parse_stream

VERSION = ("metadata", "version")
LAST_UPDATED = ("metadata", "versioning", "lastUpdated")
SNAPSHOT_TIMESTAMP = ("metadata", "versioning", "snapshot", "timestamp")
SNAPSHOT_BUILD_NUMBER = ("metadata", "versioning", "snapshot", "buildNumber")


@dataclass(frozen=True)
class VersioningMetadata:
    """The subset of repository metadata needed to pin a snapshot build."""

    version: Optional[str] = None
    last_updated: Optional[datetime] = None
    snapshot_timestamp: Optional[str] = None
    snapshot_build_number: Optional[str] = None

    @property
    def actual_version(self) -> str:
        """Timestamped version of the snapshot build, e.g. ``1.0-20240101120000-3``.

        Raises:
            NotASnapshot: if the base version is not a snapshot or the
                snapshot timestamp/build number are missing.
        """
        version = self.version or ""
        suffix = Constants.SNAPSHOT_SUFFIX
        if not version.upper().endswith(suffix):
            raise NotASnapshot(self.version)
        if not self.snapshot_timestamp or not self.snapshot_build_number:
            raise NotASnapshot(self.version, "metadata has no snapshot timestamp or build number")
        base = version[: -len(suffix)]
        return f"{base}-{self.snapshot_timestamp}-{self.snapshot_build_number}"


class _MetadataHandler(PathMatchingHandler):
    """Collect the version, snapshot and lastUpdated fields of repository metadata."""

    def __init__(self) -> None:
        super().__init__()
        self.values = {}

    def on_text(self, text: str) -> None:
        for path in (VERSION, LAST_UPDATED, SNAPSHOT_TIMESTAMP, SNAPSHOT_BUILD_NUMBER):
            if self.is_matched(path):
                self.values[path] = text
                return


def parse_last_updated(value: str) -> datetime:
    """Parse a ``yyyyMMddHHmmss`` metadata timestamp."""
    try:
        return datetime.strptime(value, Constants.METADATA_TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise DescriptorParseError(f"Invalid lastUpdated timestamp {value!r}") from exc


def parse_metadata(source) -> VersioningMetadata:
    """Parse ``maven-metadata.xml`` from a binary stream, a path or raw bytes.

    Raises:
        DescriptorParseError: on malformed XML or an unparseable lastUpdated.
    """
    handler = _MetadataHandler()
    parse_stream(source, handler, "repository metadata")
    values = handler.values
    last_updated = values.get(LAST_UPDATED)
    return VersioningMetadata(
        version=values.get(VERSION) or None,
        last_updated=parse_last_updated(last_updated) if last_updated else None,
        snapshot_timestamp=values.get(SNAPSHOT_TIMESTAMP) or None,
        snapshot_build_number=values.get(SNAPSHOT_BUILD_NUMBER) or None,
    )
