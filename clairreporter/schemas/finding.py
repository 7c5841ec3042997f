"""The unit of work handed to emitters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Finding:
    repo: str               # Short repository key
    package: str
    description: str        # Serialized vulnerability list, one JSON object per line
    dev_team: str = ""
    assignee: str = ""

    def template_values(self) -> dict[str, str]:
        """Attributes exposed to field templates as ``failure.<Name>``."""
        return {
            "Repo": self.repo,
            "Package": self.package,
            "Description": self.description,
            "DevTeam": self.dev_team,
            "Assignee": self.assignee,
        }
