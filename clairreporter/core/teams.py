"""Team directory: short repository key -> owning team and assignee."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import IO

from pydantic import TypeAdapter, ValidationError

from clairreporter.core.errors import ParseError
from clairreporter.core.logging import get_logger
from clairreporter.schemas.team import TeamEntry

logger = get_logger(__name__)

_ENTRIES = TypeAdapter(list[TeamEntry])


class TeamDirectory:
    """Immutable lookup table built once at startup.

    Usage:
        directory = TeamDirectory.load("teams.json")
        team, assignee, found = directory.lookup("api")
    """

    def __init__(self, entries: Iterable[TeamEntry] = ()) -> None:
        # Later rows win for a repeated repo
        self._entries: dict[str, TeamEntry] = {e.repo: e for e in entries}

    @classmethod
    def from_stream(cls, stream: IO[bytes] | IO[str]) -> "TeamDirectory":
        try:
            data = stream.read()
        except OSError as exc:
            raise ParseError(f"cannot read team directory: {exc}") from exc
        try:
            entries = _ENTRIES.validate_json(data)
        except ValidationError as exc:
            raise ParseError(f"cannot deserialize team directory: {exc}") from exc

        directory = cls(entries)
        if len(directory) != len(entries):
            logger.warning(
                "Duplicate repositories in team directory; last entry wins",
                rows=len(entries),
                unique=len(directory),
            )
        return directory

    @classmethod
    def load(cls, path: str | Path) -> "TeamDirectory":
        try:
            with open(path, "rb") as fh:
                directory = cls.from_stream(fh)
        except OSError as exc:
            raise ParseError(f"cannot open team directory {str(path)!r}: {exc}") from exc
        logger.debug("Loaded team directory", path=str(path), repos=len(directory))
        return directory

    def lookup(self, repo: str) -> tuple[str, str, bool]:
        entry = self._entries.get(repo)
        if entry is None:
            return "", "", False
        return entry.team, entry.assignee, True

    def __contains__(self, repo: object) -> bool:
        return repo in self._entries

    def __len__(self) -> int:
        return len(self._entries)
