"""Report driver: turns a scan report into findings and fans them out to emitters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx
import structlog

from clairreporter.core.config import UnmappedPolicy
from clairreporter.core.errors import ConfigError, ReporterError
from clairreporter.core.loader import describe_vulnerabilities
from clairreporter.core.logging import get_logger
from clairreporter.core.teams import TeamDirectory
from clairreporter.emitters.base import BaseEmitter, EmissionState
from clairreporter.schemas.finding import Finding
from clairreporter.schemas.report import ScanReport

logger = get_logger(__name__)


@dataclass
class EmitterStats:
    attempted: int = 0
    created: int = 0
    duplicates: int = 0
    failed: int = 0


@dataclass
class RunSummary:
    """Outcome counters of one report run."""
    repo: str
    packages: int = 0
    skipped_unmapped: int = 0
    emitters: dict[str, EmitterStats] = field(default_factory=dict)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.emitters.values())

    @property
    def created(self) -> int:
        return sum(s.created for s in self.emitters.values())


@dataclass
class UnmappedRepoPolicy:
    """What to do with a repository missing from the team directory.

    ``emit`` files the tickets with ``default_team`` / ``default_assignee``
    (empty unless configured), ``skip`` files nothing and ``fail`` stops the
    run before any emission.
    """
    action: UnmappedPolicy = "emit"
    default_team: str = ""
    default_assignee: str = ""


def resolve_owner(
    repo: str, directory: TeamDirectory, policy: UnmappedRepoPolicy
) -> tuple[str, str] | None:
    """Return ``(team, assignee)`` for *repo*, or ``None`` when its findings are skipped.

    Raises:
        ConfigError: *repo* is unmapped and the policy is ``fail``.
    """
    team, assignee, found = directory.lookup(repo)
    if found:
        return team, assignee
    if policy.action == "fail":
        raise ConfigError(f"repository {repo!r} has no entry in the team directory")
    if policy.action == "skip":
        logger.warning("Repository has no team mapping; skipping its findings", repo=repo)
        return None
    logger.warning(
        "Repository has no team mapping; emitting with defaults",
        repo=repo,
        team=policy.default_team,
        assignee=policy.default_assignee,
    )
    return policy.default_team, policy.default_assignee


def report_findings(
    report: ScanReport,
    directory: TeamDirectory,
    emitters: Mapping[str, BaseEmitter],
    policy: UnmappedRepoPolicy | None = None,
) -> RunSummary:
    """Emit one finding per vulnerable package to every emitter.

    Per-finding failures are logged and counted, never raised. Startup-class
    errors (``ParseError`` for a repository without namespace, ``ConfigError``
    under the ``fail`` policy) are raised before anything is emitted.
    """
    policy = policy or UnmappedRepoPolicy()
    repo = report.short_repo
    summary = RunSummary(
        repo=repo,
        packages=len(report.findings),
        emitters={name: EmitterStats() for name in emitters},
    )

    owner = resolve_owner(repo, directory, policy)
    if owner is None:
        summary.skipped_unmapped = summary.packages
        return summary
    team, assignee = owner

    for package, vulns in report.findings.items():
        if not vulns:
            logger.debug("Package has no vulnerabilities; nothing to report", package=package)
            continue

        finding = Finding(
            repo=repo,
            package=package,
            description=describe_vulnerabilities(vulns),
            dev_team=team,
            assignee=assignee,
        )
        for name, emitter in emitters.items():
            stats = summary.emitters[name]
            stats.attempted += 1
            with structlog.contextvars.bound_contextvars(
                emitter=name, repo=repo, package=package
            ):
                try:
                    result = emitter.emit(finding)
                except (ReporterError, httpx.HTTPError) as exc:
                    stats.failed += 1
                    logger.error("Emission failed", error=str(exc))
                    continue
                except Exception as exc:
                    stats.failed += 1
                    logger.error(
                        "Emitter crashed", emitter=name, error=str(exc), exc_info=True
                    )
                    continue

            if result.state is EmissionState.SKIPPED:
                stats.duplicates += 1
            else:
                stats.created += 1

    logger.info(
        "Report processed",
        repo=repo,
        packages=summary.packages,
        created=summary.created,
        failed=summary.failed,
    )
    return summary
