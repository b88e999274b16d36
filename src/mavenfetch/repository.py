"""Repository descriptors: one local cache plus ordered remote mirrors."""
from __future__ import annotations

import logging
import urllib.parse
import urllib.request
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

from mavenfetch.constants import Constants
from mavenfetch.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class RepositoryPolicy(Enum):
    """Update policies recognized on a repository."""

    ALWAYS_UPDATE = "always-update"
    NEVER_UPDATE = "never-update"

    @classmethod
    def parse(cls, token: str) -> Optional["RepositoryPolicy"]:
        """Map a policy token to a policy; unknown tokens yield None.

        Both the wire form ("always-update") and the enum name
        ("ALWAYS_UPDATE") are accepted.
        """
        normalized = token.strip().lower().replace("_", "-")
        for policy in cls:
            if policy.value == normalized:
                return policy
        return None


def parse_policies(value: Union[None, str, Iterable]) -> FrozenSet[RepositoryPolicy]:
    """Parse a comma-separated string or an iterable of tokens into a policy set."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        tokens = value.split(",")
    else:
        tokens = list(value)
    policies = set()
    for token in tokens:
        if isinstance(token, RepositoryPolicy):
            policies.add(token)
            continue
        token = str(token).strip()
        if not token:
            continue
        policy = RepositoryPolicy.parse(token)
        if policy is None:
            logger.debug("Ignoring unknown repository policy %r", token)
            continue
        policies.add(policy)
    return frozenset(policies)


class RepositoryKind(Enum):
    """Whether a repository is the local cache or a remote mirror."""

    LOCAL = "local"
    REMOTE = "remote"


def file_url_to_path(url: str) -> Path:
    """Convert a ``file`` URL into a filesystem path."""
    parsed = urllib.parse.urlparse(url)
    return Path(urllib.request.url2pathname(parsed.path))


def join_location(base_url: str, subpath: str) -> str:
    """Append a repository-relative path to a base URL.

    The base path always gains a trailing slash so that the last segment of
    the base URL is kept; query and fragment are preserved.
    """
    parsed = urllib.parse.urlparse(base_url)
    path = parsed.path.replace("\\", "/")
    if not path.endswith("/"):
        path += "/"
    return urllib.parse.urlunparse(parsed._replace(path=path + subpath.lstrip("/")))


@dataclass(frozen=True)
class Repository:
    """A named repository and its policies.

    ``name`` must be unique within one resolver: fallback iteration locates
    the repository that served a coordinate by name.
    """

    name: str
    url: str
    policies: FrozenSet[RepositoryPolicy] = frozenset()
    kind: RepositoryKind = RepositoryKind.REMOTE

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ConfigurationError("Repository name must not be blank")
        scheme = self.scheme
        if scheme not in Constants.SUPPORTED_SCHEMES:
            raise ConfigurationError(
                f"Repository '{self.name}' has unsupported URL scheme {scheme!r}: {self.url}"
            )
        if self.kind is RepositoryKind.LOCAL and scheme != "file":
            raise ConfigurationError(f"Local repository '{self.name}' must use a file URL: {self.url}")

    @classmethod
    def local(
        cls,
        name: str = Constants.DEFAULT_LOCAL_REPOSITORY_NAME,
        path: Union[str, Path] = Constants.DEFAULT_LOCAL_REPOSITORY_DIR,
        policies: Union[None, str, Iterable] = None,
    ) -> "Repository":
        """Create the local repository, creating its directory if needed."""
        directory = Path(path).expanduser().resolve()
        directory.mkdir(parents=True, exist_ok=True)
        return cls(
            name=name,
            url=directory.as_uri(),
            policies=parse_policies(policies),
            kind=RepositoryKind.LOCAL,
        )

    @classmethod
    def remote(cls, name: str, url: str, policies: Union[None, str, Iterable] = None) -> "Repository":
        return cls(name=name, url=url, policies=parse_policies(policies), kind=RepositoryKind.REMOTE)

    @property
    def scheme(self) -> str:
        return urllib.parse.urlparse(self.url).scheme.lower()

    @property
    def is_local(self) -> bool:
        return self.kind is RepositoryKind.LOCAL

    @property
    def is_remote(self) -> bool:
        return self.kind is RepositoryKind.REMOTE

    @property
    def location(self) -> Path:
        """Filesystem directory of a ``file`` repository."""
        if self.scheme != "file":
            raise ConfigurationError(f"Repository '{self.name}' is not a file repository: {self.url}")
        return file_url_to_path(self.url)

    @property
    def should_refresh_metadata(self) -> bool:
        return (
            RepositoryPolicy.ALWAYS_UPDATE in self.policies
            and RepositoryPolicy.NEVER_UPDATE not in self.policies
        )

    def resolve_location(self, subpath: str) -> str:
        return join_location(self.url, subpath)

    def __str__(self) -> str:
        return f"{self.name} ({self.url})"
