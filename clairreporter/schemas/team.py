"""Schemas for the team directory."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TeamEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    repo: str               # Short repository key (no namespace)
    team: str = ""
    assignee: str = ""      # Tracker user name
