"""Tests for core/teams.py."""

import io

import pytest

from clairreporter.core.errors import ParseError
from clairreporter.core.teams import TeamDirectory
from clairreporter.schemas.team import TeamEntry


def test_lookup_found(write_json):
    directory = TeamDirectory.load(
        write_json("teams.json", [{"repo": "api", "team": "Platform", "assignee": "alice"}])
    )
    assert directory.lookup("api") == ("Platform", "alice", True)
    assert "api" in directory
    assert len(directory) == 1


def test_lookup_missing_returns_empty_strings():
    directory = TeamDirectory([TeamEntry(repo="api", team="Platform", assignee="alice")])
    assert directory.lookup("web") == ("", "", False)
    assert "web" not in directory


def test_duplicate_repo_last_write_wins():
    directory = TeamDirectory.from_stream(
        io.StringIO(
            '[{"repo": "api", "team": "Platform", "assignee": "alice"},'
            ' {"repo": "api", "team": "Payments", "assignee": "bob"}]'
        )
    )
    assert directory.lookup("api") == ("Payments", "bob", True)
    assert len(directory) == 1


def test_empty_directory():
    directory = TeamDirectory.from_stream(io.StringIO("[]"))
    assert len(directory) == 0
    assert directory.lookup("api") == ("", "", False)


@pytest.mark.parametrize(
    "payload",
    ["", "{}", '[{"team": "Platform"}]', '{"repo": "api"}', "[1, 2]"],
)
def test_malformed_directory_raises(payload):
    with pytest.raises(ParseError):
        TeamDirectory.from_stream(io.StringIO(payload))


def test_missing_file_raises(tmp_path):
    with pytest.raises(ParseError, match="cannot open"):
        TeamDirectory.load(tmp_path / "teams.json")
