"""Jira emitter: files one issue per finding unless an open duplicate exists."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import click

from clairreporter.core.config import Settings
from clairreporter.core.errors import ConfigError, DedupError, EmitError
from clairreporter.core.logging import get_logger
from clairreporter.core.templates import FieldTemplateSet
from clairreporter.emitters.base import (
    BaseEmitter,
    EmissionResult,
    EmissionState,
    EmitterMetadata,
)
from clairreporter.jira.client import JiraAPIError, JiraClient
from clairreporter.jira.meta import MetaIssueType, MetaProject, project_from_create_meta
from clairreporter.jira.query import open_duplicate_jql
from clairreporter.schemas.finding import Finding

logger = get_logger(__name__)

DEFAULT_FIELDS = (
    "Project|CD;"
    "Issue Type|Story;"
    "Summary|Container Security Vulnerability: container name:{{ .failure.Repo }}, "
    "package name:{{ .failure.Package }};"
    "Description|{{ .failure.Description }};"
    "Component/s|Platform Security;"
    "Dev Team|{{ .failure.DevTeam }};"
    "Assignee|{{ .failure.Assignee }};"
    "Priority|P2;"
    "Severity|Sev-2;"
    "Vulnerability Report By|Clair;"
    "Labels|security_infrastructure"
)
DEFAULT_CLOSED_STATUS = "Closed"


class JiraEmitter(BaseEmitter):
    metadata = EmitterMetadata(
        name="jira",
        display_name="Jira",
        version="1.0.0",
        description=(
            "Creates a Jira issue per vulnerable package and assigns it to the owning "
            "team's assignee. Skips findings that already have an issue which is not closed."
        ),
    )

    def __init__(
        self,
        client: JiraClient,
        fields: FieldTemplateSet,
        closed_status: str = DEFAULT_CLOSED_STATUS,
    ) -> None:
        self.client = client
        self.fields = fields
        self.closed_status = closed_status
        self.project = self._load_project(fields["Project"])
        self.issue_type = self._load_issue_type(self.project, fields["Issue Type"])
        self.issue_type.check_complete_and_available(fields)
        logger.info(
            "Jira emitter ready",
            project=self.project.key,
            issue_type=self.issue_type.name,
            fields=len(fields),
        )

    # ── Construction ──────────────────────────────────────────────────────────

    @classmethod
    def cli_options(cls) -> list[click.Option]:
        return [
            click.Option(
                ["--JIRA_URL", "jira_url"],
                envvar="JIRA_URL",
                required=True,
                help="Jira instance url",
            ),
            click.Option(
                ["--JIRA_USERNAME", "jira_username"],
                envvar="JIRA_USERNAME",
                required=True,
                help="Jira user to authenticate as",
            ),
            click.Option(
                ["--JIRA_TOKEN", "jira_token"],
                envvar="JIRA_TOKEN",
                required=True,
                help="Jira API token of the user",
            ),
            click.Option(
                ["--JIRA_FIELDS", "jira_fields"],
                envvar="JIRA_FIELDS",
                default=DEFAULT_FIELDS,
                help=(
                    "Jira fields in 'key|value;...' format. Values are templates; must "
                    "contain 'Project', 'Issue Type' and 'Summary'"
                ),
            ),
            click.Option(
                ["--JIRA_ISSUE_CLOSED_STATUS", "jira_closed_status"],
                envvar="JIRA_ISSUE_CLOSED_STATUS",
                default=DEFAULT_CLOSED_STATUS,
                show_default=True,
                help="Status of a Jira issue when it is considered closed",
            ),
        ]

    @classmethod
    def from_options(cls, options: Mapping[str, Any], settings: Settings) -> "JiraEmitter":
        flags = {
            "jira_url": "--JIRA_URL",
            "jira_username": "--JIRA_USERNAME",
            "jira_token": "--JIRA_TOKEN",
            "jira_fields": "--JIRA_FIELDS",
            "jira_closed_status": "--JIRA_ISSUE_CLOSED_STATUS",
        }
        empty = [flag for name, flag in flags.items() if not options.get(name)]
        if empty:
            raise ConfigError(f"all Jira options are necessary; empty: {', '.join(empty)}")

        fields = FieldTemplateSet.parse(options["jira_fields"])
        client = JiraClient(
            options["jira_url"],
            options["jira_username"],
            options["jira_token"],
            timeout=settings.http_timeout,
            error_body_limit=settings.error_body_limit,
        )
        try:
            return cls(client, fields, options["jira_closed_status"])
        except Exception:
            client.close()
            raise

    def _load_project(self, key: str) -> MetaProject:
        try:
            meta = self.client.get_create_meta(key)
        except JiraAPIError as exc:
            raise ConfigError(f"failed to get create meta: {exc}") from exc
        project = project_from_create_meta(meta, key)
        if project is None:
            raise ConfigError(f"could not find project with key {key!r}")
        return project

    @staticmethod
    def _load_issue_type(project: MetaProject, name: str) -> MetaIssueType:
        issue_type = project.issue_type(name)
        if issue_type is None:
            raise ConfigError(
                f"could not find issue type {name!r}, available are {project.issue_type_names()}"
            )
        return issue_type

    # ── Emission ──────────────────────────────────────────────────────────────

    def emit(self, finding: Finding) -> EmissionResult:
        rendered = self.fields.render(finding)

        existing = self._find_open_duplicate(rendered)
        if existing is not None:
            logger.info("Open issue already exists; skipping", issue=existing)
            return EmissionResult(EmissionState.SKIPPED, existing)

        created = self._create(rendered)
        key = str(created.get("key") or created.get("id") or "")
        logger.info("Created issue", issue=key)

        if not finding.assignee:
            logger.warning("Finding has no assignee; issue left unassigned", issue=key)
            return EmissionResult(EmissionState.DONE, key)

        self._assign(created, key, finding.assignee)
        logger.info("Assigned issue", issue=key, assignee=finding.assignee)
        return EmissionResult(EmissionState.DONE, key)

    def _find_open_duplicate(self, rendered: Mapping[str, str]) -> str | None:
        jql = open_duplicate_jql(rendered["Summary"], rendered["Project"], self.closed_status)
        try:
            issues = self.client.search(jql)
        except JiraAPIError as exc:
            raise DedupError(str(exc)) from exc
        if not issues:
            return None
        return str(issues[0].get("key") or issues[0].get("id") or "?")

    def _create(self, rendered: Mapping[str, str]) -> dict[str, Any]:
        try:
            payload = self.issue_type.build_fields(self.project, rendered)
        except ValueError as exc:
            raise EmitError("build", f"could not initialize issue: {exc}") from exc
        try:
            return self.client.create_issue(payload)
        except JiraAPIError as exc:
            raise EmitError("create", str(exc)) from exc

    def _assign(self, created: Mapping[str, Any], key: str, assignee: str) -> None:
        try:
            user = self.client.get_user(assignee)
        except JiraAPIError as exc:
            raise EmitError("user", str(exc), issue_key=key) from exc
        try:
            self.client.update_assignee(str(created.get("id") or key), user)
        except JiraAPIError as exc:
            raise EmitError("assign", str(exc), issue_key=key) from exc

    def close(self) -> None:
        self.client.close()
