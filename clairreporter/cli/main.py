"""clair-reporter CLI entry point — `clair-reporter` command."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import click
from rich.markup import escape

from clairreporter.cli.output import console, summary_table
from clairreporter.core.config import Settings, get_settings
from clairreporter.core.driver import UnmappedRepoPolicy, report_findings, resolve_owner
from clairreporter.core.errors import ReporterError
from clairreporter.core.loader import load_report_file
from clairreporter.core.registry import EmitterRegistry
from clairreporter.core.teams import TeamDirectory
from clairreporter.emitters.base import BaseEmitter

registry = EmitterRegistry()
registry.discover()


def build_emitters(
    selected: Mapping[str, type[BaseEmitter]],
    options: Mapping[str, Any],
    settings: Settings,
) -> dict[str, BaseEmitter]:
    emitters: dict[str, BaseEmitter] = {}
    try:
        for name, emitter_cls in selected.items():
            emitters[name] = emitter_cls.from_options(options, settings)
    except Exception:
        close_emitters(emitters)
        raise
    return emitters


def close_emitters(emitters: Mapping[str, BaseEmitter]) -> None:
    for emitter in emitters.values():
        emitter.close()


@click.command("clair-reporter")
@click.version_option(package_name="clair-reporter")
@click.option("--file-path", required=True, help="Path to the JSON report from klar")
@click.option("--team-path", required=True, help="Path to the JSON team directory")
@click.option(
    "--emitters",
    "emitter_names",
    default="jira",
    show_default=True,
    help="Comma-separated list of emitter names",
)
@click.option(
    "--unmapped-policy",
    type=click.Choice(["emit", "skip", "fail"]),
    default=None,
    help="What to do when the repository has no team mapping [default: UNMAPPED_POLICY or emit]",
)
@click.option("--default-team", default="", help="Team used for unmapped repositories (emit policy)")
@click.option(
    "--default-assignee", default="", help="Assignee used for unmapped repositories (emit policy)"
)
@click.option(
    "--strict/--no-strict",
    default=False,
    show_default=True,
    help="Exit with status 2 when any finding failed to be emitted",
)
def cli(
    file_path: str,
    team_path: str,
    emitter_names: str,
    unmapped_policy: str | None,
    default_team: str,
    default_assignee: str,
    strict: bool,
    **emitter_options: Any,
) -> None:
    """Report klar / Clair vulnerability findings as tracker tickets.

    \b
    Example:
      clair-reporter --file-path report.json --team-path teams.json \\
          --JIRA_URL https://jira.example.com --JIRA_USERNAME bot --JIRA_TOKEN ...
    """
    if not file_path:
        raise click.UsageError(
            "You must specify a path to the JSON file, pass --file-path <path to json file>"
        )
    if not team_path:
        raise click.UsageError(
            "You must specify a path to the team file, pass --team-path <path to json file>"
        )

    settings = get_settings()
    policy = UnmappedRepoPolicy(
        action=unmapped_policy or settings.unmapped_policy,
        default_team=default_team,
        default_assignee=default_assignee,
    )
    names = [n.strip() for n in emitter_names.split(",") if n.strip()]

    try:
        selected = registry.select(names)
        report = load_report_file(file_path)
        repo = report.short_repo
        directory = TeamDirectory.load(team_path)
        if policy.action == "fail":
            resolve_owner(repo, directory, policy)
        emitters = build_emitters(selected, emitter_options, settings)
    except ReporterError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise SystemExit(1)

    try:
        summary = report_findings(report, directory, emitters, policy)
    except ReporterError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise SystemExit(1)
    finally:
        close_emitters(emitters)

    console.print(summary_table(summary))
    if strict and summary.failed:
        console.print(f"[red]{summary.failed} emission(s) failed[/red]")
        raise SystemExit(2)


# Emitter-owned flags
for _emitter_cls in registry.all().values():
    cli.params.extend(_emitter_cls.cli_options())


if __name__ == "__main__":
    cli()
