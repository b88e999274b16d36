"""Resolver configuration loading.

Two formats are accepted. YAML (or JSON, which YAML parses too)::

    local:
      name: local
      path: ./repository
    remote:
      - name: central
        url: https://repo1.maven.org/maven2/
        policies: [always-update]

and the XML layout::

    <resolver>
      <local><name>local</name><url>file:///var/cache/m2</url></local>
      <remote>
        <repository>
          <name>central</name>
          <url>https://repo1.maven.org/maven2/</url>
          <policies>always-update</policies>
        </repository>
      </remote>
    </resolver>

Relative local paths are resolved against the configuration file's directory.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from mavenfetch.constants import Constants
from mavenfetch.descriptor.walker import PathMatchingHandler, parse_stream
from mavenfetch.exceptions import ConfigurationError, DescriptorParseError
from mavenfetch.repository import Repository, file_url_to_path

logger = logging.getLogger(__name__)

XML_LOCAL = ("resolver", "local")
XML_REMOTE = ("resolver", "remote", "repository")
_REPOSITORY_FIELDS = ("name", "url", "path", "policies")


@dataclass
class ResolverConfiguration:
    """Repositories a resolver works with."""

    local_repository: Repository
    remote_repositories: List[Repository] = field(default_factory=list)

    def __post_init__(self):
        seen = {self.local_repository.name}
        for repository in self.remote_repositories:
            if repository.name in seen:
                raise ConfigurationError(f"Duplicate repository name '{repository.name}'")
            seen.add(repository.name)


def _local_directory(entry: Mapping[str, Any], base_dir: Path) -> Path:
    url = entry.get("url")
    path = entry.get("path")
    if url:
        url = str(url)
        if not url.lower().startswith("file:"):
            raise ConfigurationError(f"Local repository URL must use the file scheme: {url}")
        directory = file_url_to_path(url)
    elif path:
        directory = Path(str(path)).expanduser()
    else:
        directory = Path(Constants.DEFAULT_LOCAL_REPOSITORY_DIR)
    if not directory.is_absolute():
        directory = base_dir / directory
    return directory


def _build_local(entry: Optional[Mapping[str, Any]], base_dir: Path) -> Repository:
    entry = entry or {}
    if not isinstance(entry, Mapping):
        raise ConfigurationError("'local' must be a mapping")
    return Repository.local(
        name=str(entry.get("name") or Constants.DEFAULT_LOCAL_REPOSITORY_NAME),
        path=_local_directory(entry, base_dir),
        policies=entry.get("policies"),
    )


def _build_remote(entry: Any, index: int) -> Repository:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Remote repository #{index + 1} must be a mapping")
    name = entry.get("name")
    url = entry.get("url")
    if not name or not url:
        raise ConfigurationError(f"Remote repository #{index + 1} needs both 'name' and 'url'")
    return Repository.remote(str(name), str(url), entry.get("policies"))


def config_from_mapping(data: Optional[Mapping[str, Any]], base_dir: Path = Path(".")) -> ResolverConfiguration:
    """Build a configuration from already-parsed YAML/JSON data."""
    data = data or {}
    if not isinstance(data, Mapping):
        raise ConfigurationError("Resolver configuration must be a mapping")
    remotes = data.get("remote", data.get("remotes")) or []
    if not isinstance(remotes, list):
        raise ConfigurationError("'remote' must be a list of repositories")
    return ResolverConfiguration(
        local_repository=_build_local(data.get("local"), base_dir),
        remote_repositories=[_build_remote(entry, i) for i, entry in enumerate(remotes)],
    )


class _XmlConfigHandler(PathMatchingHandler):

    def __init__(self) -> None:
        super().__init__()
        self.local: Dict[str, str] = {}
        self.remotes: List[Dict[str, str]] = []
        self._remote: Dict[str, str] = {}

    def on_text(self, text: str) -> None:
        name = self.current_name()
        if name not in _REPOSITORY_FIELDS:
            return
        if self.is_parent_matched(XML_LOCAL):
            self.local[name] = text
        elif self.is_parent_matched(XML_REMOTE):
            self._remote[name] = text

    def on_end(self) -> None:
        if self.is_matched(XML_REMOTE):
            self.remotes.append(self._remote)
            self._remote = {}


def parse_xml_config(source, base_dir: Path = Path(".")) -> ResolverConfiguration:
    """Parse the ``<resolver>`` XML configuration layout."""
    handler = _XmlConfigHandler()
    try:
        parse_stream(source, handler, "resolver configuration")
    except DescriptorParseError as exc:
        raise ConfigurationError(str(exc)) from exc
    return config_from_mapping({"local": handler.local, "remote": handler.remotes}, base_dir)


def load_config(path: Path) -> ResolverConfiguration:
    """Load a resolver configuration file (``.xml``, ``.yml``, ``.yaml`` or ``.json``).

    Raises:
        ConfigurationError: the file is missing, unreadable or invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")
    base_dir = path.resolve().parent
    logger.debug("Loading resolver configuration from %s", path)
    if path.suffix.lower() == ".xml":
        return parse_xml_config(path, base_dir)
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc
    return config_from_mapping(data, base_dir)
