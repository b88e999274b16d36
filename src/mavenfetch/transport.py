"""Repository transport: existence probes and verified downloads.

A missing file is not an error here. ``Transport.fetch`` returns ``None`` so
the engine can move on to the next repository; only a file that exists but
cannot be transferred intact raises ``DownloadFailed``.
"""
from __future__ import annotations

import contextlib
import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional, Tuple

import requests

from mavenfetch.common import http_client
from mavenfetch.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from mavenfetch.constants import Constants
from mavenfetch.exceptions import DownloadFailed
from mavenfetch.models import Coordinate
from mavenfetch.repository import Repository, file_url_to_path

logger = logging.getLogger(__name__)


class IncompleteDownload(IOError):
    """The transferred byte stream failed a length or size check."""


def _same_file(source: Path, destination: Path) -> bool:
    """True when both paths name the same location."""
    return os.path.normpath(os.path.abspath(source)) == os.path.normpath(os.path.abspath(destination))


class Transport:
    """Fetch repository files into a local directory.

    Args:
        max_attempts: Transfer attempts before giving up.
        retry_delay: Seconds to wait between attempts.
    """

    def __init__(
        self,
        max_attempts: int = Constants.DOWNLOAD_MAX_ATTEMPTS,
        retry_delay: float = Constants.DOWNLOAD_RETRY_DELAY_SEC,
        chunk_size: int = Constants.DOWNLOAD_CHUNK_SIZE,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.chunk_size = chunk_size

    def fetch(
        self,
        repository: Repository,
        coordinate: Coordinate,
        destination_dir: Path,
        probe_subpath: str,
        materialize_subpath: str,
        min_size: int = 0,
    ) -> Optional[Path]:
        """Copy one file of ``coordinate``'s version directory into ``destination_dir``.

        Args:
            repository: Repository to read from.
            coordinate: Coordinate whose version directory holds the file.
            destination_dir: Root of the Maven layout to write into.
            probe_subpath: File name looked up in the repository.
            materialize_subpath: File name written locally.
            min_size: Smallest plausible size in bytes for the file.

        Returns:
            The destination path, or None when the repository lacks the file.

        Raises:
            DownloadFailed: the file exists but every transfer attempt failed,
                or the destination directory cannot be created.
        """
        parent = coordinate.version_directory()
        location = repository.resolve_location(parent + probe_subpath)
        destination = (Path(destination_dir) / parent / materialize_subpath).absolute()

        if not self.exists(location):
            if is_debug_enabled(logger):
                logger.debug(
                    "Not found in repository",
                    extra=extra_context(
                        event="probe",
                        component="transport",
                        outcome="absent",
                        repository=repository.name,
                        target=safe_url(location),
                    ),
                )
            return None

        if self._scheme(location) == "file" and _same_file(file_url_to_path(location), destination):
            return destination

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DownloadFailed(location, exc) from exc
        logger.info("Downloading '%s'...", safe_url(location))
        self._download(location, destination, min_size)
        return destination

    def exists(self, location: str) -> bool:
        """Probe a location; only HTTP 200 counts for remote URLs.

        Raises:
            DownloadFailed: the probe itself could not be completed.
        """
        scheme = self._scheme(location)
        if scheme == "file":
            return file_url_to_path(location).is_file()
        if scheme in ("http", "https"):
            try:
                return http_client.probe(location) == 200
            except requests.RequestException as exc:
                raise DownloadFailed(location, exc) from exc
        raise DownloadFailed(location, ValueError(f"unsupported scheme {scheme!r}"))

    def _download(self, location: str, destination: Path, min_size: int) -> None:
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.max_attempts + 1):
            partial = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.part")
            try:
                with Timer() as t:
                    written, expected = self._transfer(location, partial)
                if expected is not None and written != expected:
                    raise IncompleteDownload(
                        f"Download incomplete: expected {expected} bytes, got {written} bytes"
                    )
                if written < min_size:
                    raise IncompleteDownload(
                        f"Downloaded file too small to be valid ({written} bytes)"
                    )
                os.replace(partial, destination)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Download complete",
                        extra=extra_context(
                            event="download",
                            component="transport",
                            outcome="success",
                            attempt=attempt,
                            duration_ms=t.duration_ms(),
                            target=safe_url(location),
                        ),
                    )
                return
            except (OSError, requests.RequestException) as exc:
                last_error = exc
                if attempt < self.max_attempts:
                    logger.warning(
                        "Download failed (attempt %d/%d): %s. Retrying...",
                        attempt,
                        self.max_attempts,
                        exc,
                        extra=extra_context(
                            event="download",
                            component="transport",
                            outcome="retry",
                            attempt=attempt,
                            target=safe_url(location),
                        ),
                    )
                    if self.retry_delay:
                        time.sleep(self.retry_delay)
            finally:
                with contextlib.suppress(FileNotFoundError):
                    partial.unlink()
        logger.error("Giving up on '%s' after %d attempts", safe_url(location), self.max_attempts)
        raise DownloadFailed(location, last_error)

    def _transfer(self, location: str, target: Path) -> Tuple[int, Optional[int]]:
        """Stream ``location`` into ``target``; return (bytes written, expected length)."""
        if self._scheme(location) == "file":
            with open(file_url_to_path(location), "rb") as source, open(target, "wb") as output:
                return self._copy(iter(lambda: source.read(self.chunk_size), b""), output), None

        response = http_client.open_stream(location)
        try:
            if response.status_code != 200:
                raise IncompleteDownload(f"HTTP {response.status_code}")
            expected = http_client.content_length(response)
            with open(target, "wb") as output:
                written = self._copy(response.iter_content(chunk_size=self.chunk_size), output)
            return written, expected
        finally:
            response.close()

    @staticmethod
    def _copy(chunks, output) -> int:
        """Write every non-empty chunk to ``output``; return the byte count."""
        written = 0
        for chunk in chunks:
            if not chunk:
                continue
            output.write(chunk)
            written += len(chunk)
        output.flush()
        return written

    @staticmethod
    def _scheme(location: str) -> str:
        """Lower-cased URL scheme of ``location``."""
        return location.split(":", 1)[0].lower()
