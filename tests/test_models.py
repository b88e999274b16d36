"""Tests for coordinate parsing, scopes and artifact value types."""
from datetime import datetime
from pathlib import Path

import pytest

from mavenfetch.exceptions import InvalidCoordinate, InvalidScope
from mavenfetch.models import (
    DEFAULT_RESOLVING_SCOPES,
    Coordinate,
    DependencyScope,
    ResolvedArtifact,
    ResolvedExtra,
    UNKNOWN_UPDATE_TIME,
    parse_coordinate,
)
from mavenfetch.repository import Repository


class TestDependencyScope:
    """Test dependency scope lookup."""

    def test_of_known_names(self):
        """Test scope lookup by wire name."""
        assert DependencyScope.of("compile") is DependencyScope.COMPILE
        assert DependencyScope.of("test") is DependencyScope.TEST
        assert DependencyScope.of(" runtime ") is DependencyScope.RUNTIME

    @pytest.mark.parametrize("name", ["import", "COMPILE", "", None])
    def test_of_unknown_name_raises(self, name):
        """Test that unknown or blank scope names are rejected."""
        with pytest.raises(InvalidScope):
            DependencyScope.of(name)

    def test_default_resolving_scopes(self):
        """Test default resolving scopes."""
        assert DEFAULT_RESOLVING_SCOPES == {DependencyScope.COMPILE, DependencyScope.RUNTIME}


class TestParseCoordinate:
    """Test dependency id parsing."""

    def test_three_parts(self):
        """Test a group:artifact:version id."""
        c = parse_coordinate("org.example:lib:1.0")
        assert (c.group_id, c.artifact_id, c.extension, c.classifier, c.version) == (
            "org.example", "lib", "jar", "", "1.0"
        )
        assert c.scope is DependencyScope.COMPILE

    def test_four_parts_sets_extension(self):
        """Test four parts sets extension."""
        c = parse_coordinate("org.example:lib:pom:1.0")
        assert c.extension == "pom"
        assert c.classifier == ""

    def test_five_parts_sets_classifier(self):
        """Test five parts sets classifier."""
        c = parse_coordinate("org.example:lib:jar:sources:1.0", DependencyScope.TEST)
        assert c.classifier == "sources"
        assert c.scope is DependencyScope.TEST

    @pytest.mark.parametrize("spec", ["org.example:lib", "a:b:c:d:e:f", "", "org.example::1.0", ":lib:1.0"])
    def test_invalid_specs(self, spec):
        """Test malformed dependency ids."""
        with pytest.raises(InvalidCoordinate):
            parse_coordinate(spec)

    def test_invalid_coordinate_is_value_error(self):
        """Test invalid coordinate is value error."""
        with pytest.raises(ValueError):
            parse_coordinate("nope")


class TestCoordinate:
    """Test coordinate identity and layout."""

    def test_equality_ignores_scope_and_resolution(self, tmp_path):
        """Test equality ignores scope and resolution."""
        repo = Repository.local("local", tmp_path)
        a = Coordinate("g", "a", "1.0", scope=DependencyScope.COMPILE)
        b = Coordinate("g", "a", "1.0", scope=DependencyScope.TEST)
        c = a.with_resolution(ResolvedExtra("1.0", UNKNOWN_UPDATE_TIME, repo))
        assert a == b == c
        assert len({a, b, c}) == 1

    def test_equality_includes_classifier_and_extension(self):
        """Test equality includes classifier and extension."""
        assert Coordinate("g", "a", "1.0") != Coordinate("g", "a", "1.0", classifier="sources")
        assert Coordinate("g", "a", "1.0") != Coordinate("g", "a", "1.0", extension="pom")

    def test_unresolved_capability(self, tmp_path):
        """Test the resolved capability of a coordinate."""
        repo = Repository.local("local", tmp_path)
        plain = Coordinate("g", "a", "1.0-SNAPSHOT")
        assert not plain.is_resolved
        assert plain.actual_version == "1.0-SNAPSHOT"
        assert plain.dependencies == ()
        assert plain.is_snapshot
        assert not Coordinate("g", "a", "1.0").is_snapshot

        resolved = plain.with_resolution(
            ResolvedExtra("1.0-20240101120000-3", datetime(2024, 1, 1), repo, (Coordinate("x", "y", "2"),))
        )
        assert resolved.is_resolved
        assert resolved.actual_version == "1.0-20240101120000-3"
        assert resolved.source_repository is repo
        assert resolved.unresolved().is_resolved is False
        assert plain.is_resolved is False

    def test_layout_paths(self, tmp_path):
        """Test Maven layout directory and file names."""
        repo = Repository.local("local", tmp_path)
        c = Coordinate("org.example.sub", "lib", "1.0-SNAPSHOT", classifier="tests").with_resolution(
            ResolvedExtra("1.0-20240101120000-3", UNKNOWN_UPDATE_TIME, repo)
        )
        assert c.version_directory() == "org/example/sub/lib/1.0-SNAPSHOT/"
        assert c.file_name() == "lib-1.0-SNAPSHOT-tests.jar"
        assert c.pom_file_name(actual=True) == "lib-1.0-20240101120000-3.pom"
        assert c.pom_file_name() == "lib-1.0-SNAPSHOT.pom"

    def test_str_is_full_id(self):
        """Test the string form of a coordinate."""
        assert str(Coordinate("g", "a", "1.0")) == "g:a:jar::1.0"


class TestResolvedArtifact:
    """Test the resolved artifact value type."""

    def test_requires_resolved_coordinate(self, tmp_path):
        """Test requires resolved coordinate."""
        with pytest.raises(ValueError):
            ResolvedArtifact(Coordinate("g", "a", "1.0"), tmp_path / "a.jar")

    def test_exposes_coordinate_fields(self, tmp_path):
        """Test exposes coordinate fields."""
        repo = Repository.remote("central", "https://repo.example.org/maven2")
        coordinate = Coordinate("g", "a", "1.0", classifier="cls").with_resolution(
            ResolvedExtra("1.0", datetime(2024, 5, 1), repo)
        )
        artifact = ResolvedArtifact(coordinate, Path(tmp_path / "a.jar"))
        assert artifact.identity == ("g", "a", "cls", "jar")
        assert artifact.repository_name == "central"
        assert artifact.updated_time == datetime(2024, 5, 1)
