"""Shared fixtures: a local repository and file-backed remote repositories."""
from __future__ import annotations

import pytest

from mavenfetch.repository import Repository
from mavenfetch.transport import Transport


@pytest.fixture
def local_repo(tmp_path):
    """Provide an empty local repository."""
    return Repository.local("local", tmp_path / "local")


@pytest.fixture
def remote_root(tmp_path):
    """Provide the directory backing the central repository."""
    root = tmp_path / "central"
    root.mkdir()
    return root


@pytest.fixture
def central(remote_root):
    """Provide a file-backed remote repository named central."""
    return Repository.remote("central", remote_root.as_uri())


@pytest.fixture
def fast_transport():
    """Provide a transport that retries without delay."""
    return Transport(retry_delay=0)
