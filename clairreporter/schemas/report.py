"""Schemas for the klar / Clair scanner report."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clairreporter.core.errors import ParseError


class Vulnerability(BaseModel):
    """One CVE-like record reported against a package."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    image_tag: str = ""
    version: str = ""
    severity: str = ""          # Clair severity name (Low / Medium / High / ...)
    fixed_by: str = ""
    link: str = ""


class ScanReport(BaseModel):
    """One scanner run for one repository."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    repository: str = Field(default="", alias="repo")
    findings: dict[str, list[Vulnerability]] = Field(
        default_factory=dict, alias="vulnerabilities"
    )

    @field_validator("repository", mode="before")
    @classmethod
    def _null_repository(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("findings", mode="before")
    @classmethod
    def _null_findings(cls, value: object) -> object:
        # klar writes `null` both for the map and for a package without records
        if value is None:
            return {}
        if isinstance(value, dict):
            return {pkg: vulns or [] for pkg, vulns in value.items()}
        return value

    @property
    def short_repo(self) -> str:
        """Repository name with its namespace (everything up to the first ``/``) removed."""
        _, sep, name = self.repository.partition("/")
        if not sep:
            raise ParseError(
                f"report repository {self.repository!r} has no namespace; expected '<namespace>/<name>'"
            )
        return name
