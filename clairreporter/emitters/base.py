"""Base emitter contract — every ticket sink must implement this interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

import click

from clairreporter.core.config import Settings
from clairreporter.schemas.finding import Finding


class EmissionState(str, Enum):
    SKIPPED = "skipped"     # an open issue already tracks the finding
    DONE = "done"           # issue created (and assigned when an assignee is known)


@dataclass
class EmissionResult:
    state: EmissionState
    issue_key: str | None = None


@dataclass
class EmitterMetadata:
    name: str               # Unique slug (e.g. "jira"), used by --emitters
    display_name: str
    version: str
    description: str


class BaseEmitter(ABC):
    """Abstract base class for all emitters.

    Subclass this, set the ``metadata`` class variable and implement the
    abstract methods. The registry will auto-discover any concrete subclass
    found in ``clairreporter/emitters/*.py``; the CLI adds the options returned
    by :meth:`cli_options` to its own and passes the parsed values to
    :meth:`from_options`.
    """

    metadata: ClassVar[EmitterMetadata]

    @classmethod
    @abstractmethod
    def cli_options(cls) -> list[click.Option]:
        """Flags this emitter contributes to the command line."""
        ...

    @classmethod
    @abstractmethod
    def from_options(cls, options: Mapping[str, Any], settings: Settings) -> "BaseEmitter":
        """Build a ready-to-use emitter from parsed CLI values.

        Raises:
            ConfigError: the options are incomplete or rejected by the sink.
        """
        ...

    @abstractmethod
    def emit(self, finding: Finding) -> EmissionResult:
        """Turn one finding into a ticket unless an open one already exists.

        Raises:
            RenderError, DedupError, EmitError: the emission was abandoned.
        """
        ...

    def close(self) -> None:
        """Release long-lived resources (HTTP clients)."""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Concrete subclasses must declare metadata
        if not getattr(cls, "__abstractmethods__", None):
            if not hasattr(cls, "metadata"):
                raise TypeError(
                    f"Emitter {cls.__name__} must define a 'metadata' class variable."
                )
