"""Tests for the repository transport."""
from unittest.mock import MagicMock, patch

import pytest
import requests

from mavenfetch.exceptions import DownloadFailed
from mavenfetch.models import Coordinate
from mavenfetch.repository import Repository
from mavenfetch.transport import Transport

from repo_builder import write_jar

COORD = Coordinate("org.example", "lib", "1.0")
JAR = "lib-1.0.jar"


def _response(status=200, body=b"", content_length=None):
    """Build a mocked streaming response."""
    response = MagicMock()
    response.status_code = status
    response.headers = {} if content_length is None else {"Content-Length": str(content_length)}
    response.iter_content.return_value = [body[i:i + 64] for i in range(0, len(body), 64)]
    return response


@pytest.fixture
def http_repo():
    """Provide an HTTP remote repository."""
    return Repository.remote("mirror", "https://repo.example.org/maven2")


class TestFileTransport:
    """Test fetching from file repositories."""

    def test_absent_file_returns_none(self, central, local_repo, fast_transport):
        """Test that an absent file returns None."""
        result = fast_transport.fetch(central, COORD, local_repo.location, JAR, JAR)
        assert result is None

    def test_copies_into_maven_layout(self, central, remote_root, local_repo, fast_transport):
        """Test copies into maven layout."""
        write_jar(remote_root, "org.example", "lib", "1.0", size=300)
        result = fast_transport.fetch(central, COORD, local_repo.location, JAR, JAR, min_size=100)
        assert result == local_repo.location / "org/example/lib/1.0" / JAR
        assert result.read_bytes() == b"x" * 300

    def test_lookup_and_local_names_differ(self, central, remote_root, local_repo, fast_transport):
        """Test separate lookup and local file names."""
        coordinate = Coordinate("org.example", "lib", "1.0-SNAPSHOT")
        write_jar(remote_root, "org.example", "lib", "1.0-SNAPSHOT", file_version="1.0-20240101120000-3")
        result = fast_transport.fetch(
            central, coordinate, local_repo.location, "lib-1.0-20240101120000-3.jar", "lib-1.0-SNAPSHOT.jar"
        )
        assert result.name == "lib-1.0-SNAPSHOT.jar"
        assert result.exists()

    def test_same_file_is_not_copied(self, local_repo, fast_transport):
        """Test same file is not copied."""
        existing = write_jar(local_repo.location, "org.example", "lib", "1.0")
        with patch.object(Transport, "_download", side_effect=AssertionError("copied")):
            result = fast_transport.fetch(local_repo, COORD, local_repo.location, JAR, JAR)
        assert result == existing

    def test_too_small_file_fails_after_retries(self, central, remote_root, local_repo, fast_transport):
        """Test too small file fails after retries."""
        write_jar(remote_root, "org.example", "lib", "1.0", size=10)
        with pytest.raises(DownloadFailed):
            fast_transport.fetch(central, COORD, local_repo.location, JAR, JAR, min_size=100)
        version_dir = local_repo.location / "org/example/lib/1.0"
        assert list(version_dir.iterdir()) == []

    def test_blocked_destination_directory(self, central, remote_root, local_repo, fast_transport):
        """Test that an uncreatable destination directory is a download failure."""
        write_jar(remote_root, "org.example", "lib", "1.0")
        (local_repo.location / "org" / "example").mkdir(parents=True)
        (local_repo.location / "org" / "example" / "lib").write_bytes(b"not a directory")
        with pytest.raises(DownloadFailed) as exc_info:
            fast_transport.fetch(central, COORD, local_repo.location, JAR, JAR)
        assert isinstance(exc_info.value.cause, OSError)


class TestHttpTransport:
    """Test fetching over HTTP with mocked requests."""

    @patch("mavenfetch.common.http_client.requests.head")
    def test_not_found_is_absent(self, mock_head, http_repo, local_repo, fast_transport):
        """Test not found is absent."""
        mock_head.return_value = _response(status=404)
        assert fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR) is None
        mock_head.assert_called_once()
        assert mock_head.call_args[0][0] == "https://repo.example.org/maven2/org/example/lib/1.0/lib-1.0.jar"

    @patch("mavenfetch.common.http_client.requests.head")
    def test_redirect_status_is_not_existence(self, mock_head, http_repo, local_repo, fast_transport):
        """Test redirect status is not existence."""
        mock_head.return_value = _response(status=302)
        assert fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR) is None

    @patch("mavenfetch.common.http_client.requests.get")
    @patch("mavenfetch.common.http_client.requests.head")
    def test_downloads_body(self, mock_head, mock_get, http_repo, local_repo, fast_transport):
        """Test a streamed HTTP download."""
        body = b"b" * 500
        mock_head.return_value = _response(status=200)
        mock_get.return_value = _response(status=200, body=body, content_length=len(body))

        result = fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR, min_size=100)

        assert result.read_bytes() == body
        mock_get.assert_called_once()
        assert mock_get.call_args.kwargs["stream"] is True
        mock_get.return_value.close.assert_called_once()

    @patch("mavenfetch.common.http_client.requests.get")
    @patch("mavenfetch.common.http_client.requests.head")
    def test_short_body_retries_then_fails(self, mock_head, mock_get, http_repo, local_repo, fast_transport):
        """Test short body retries then fails."""
        mock_head.return_value = _response(status=200)
        mock_get.side_effect = lambda *a, **k: _response(status=200, body=b"c" * 200, content_length=400)

        with pytest.raises(DownloadFailed) as exc_info:
            fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR, min_size=100)

        assert mock_get.call_count == 5
        assert "lib-1.0.jar" in exc_info.value.location
        assert exc_info.value.cause is not None
        destination = local_repo.location / "org/example/lib/1.0" / JAR
        assert not destination.exists()
        assert list(destination.parent.iterdir()) == []

    @patch("mavenfetch.common.http_client.requests.get")
    @patch("mavenfetch.common.http_client.requests.head")
    def test_recovers_after_transient_failure(self, mock_head, mock_get, http_repo, local_repo, fast_transport):
        """Test recovers after transient failure."""
        body = b"d" * 256
        mock_head.return_value = _response(status=200)
        mock_get.side_effect = [
            requests.ConnectionError("reset"),
            _response(status=200, body=body[:100], content_length=len(body)),
            _response(status=200, body=body, content_length=len(body)),
        ]

        result = fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR, min_size=100)

        assert result.read_bytes() == body
        assert mock_get.call_count == 3

    @patch("mavenfetch.common.http_client.requests.get")
    @patch("mavenfetch.common.http_client.requests.head")
    def test_missing_content_length_is_accepted(self, mock_head, mock_get, http_repo, local_repo, fast_transport):
        """Test missing content length is accepted."""
        mock_head.return_value = _response(status=200)
        mock_get.return_value = _response(status=200, body=b"e" * 150)
        result = fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR, min_size=100)
        assert result.stat().st_size == 150

    @patch("mavenfetch.common.http_client.requests.head")
    def test_head_connection_error_is_download_failure(self, mock_head, http_repo, local_repo, fast_transport):
        """Test that a HEAD connection error is a download failure."""
        mock_head.side_effect = requests.ConnectionError("refused")
        with pytest.raises(DownloadFailed):
            fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR)

    @patch("mavenfetch.common.http_client.requests.get")
    @patch("mavenfetch.common.http_client.requests.head")
    def test_head_not_allowed_falls_back_to_get(self, mock_head, mock_get, http_repo, local_repo, fast_transport):
        """Test the GET fallback when HEAD is not allowed."""
        mock_head.return_value = _response(status=405)
        mock_get.return_value = _response(status=404)
        assert fast_transport.fetch(http_repo, COORD, local_repo.location, JAR, JAR) is None
        mock_get.assert_called_once()


def test_transport_rejects_zero_attempts():
    """Test transport rejects zero attempts."""
    with pytest.raises(ValueError):
        Transport(max_attempts=0)
