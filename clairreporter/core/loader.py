"""Scanner report loading and vulnerability serialization."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import IO

from pydantic import ValidationError

from clairreporter.core.errors import ParseError
from clairreporter.core.logging import get_logger
from clairreporter.schemas.report import ScanReport, Vulnerability

logger = get_logger(__name__)


def load_report(stream: IO[bytes] | IO[str]) -> ScanReport:
    """Parse a klar JSON report from an open stream."""
    try:
        data = stream.read()
    except OSError as exc:
        raise ParseError(f"cannot read report: {exc}") from exc

    try:
        report = ScanReport.model_validate_json(data)
    except ValidationError as exc:
        raise ParseError(f"cannot deserialize report: {exc}") from exc

    logger.debug(
        "Loaded scan report",
        repository=report.repository,
        packages=len(report.findings),
    )
    return report


def load_report_file(path: str | Path) -> ScanReport:
    try:
        with open(path, "rb") as fh:
            return load_report(fh)
    except OSError as exc:
        raise ParseError(f"cannot open report file {str(path)!r}: {exc}") from exc


def describe_vulnerabilities(vulns: Iterable[Vulnerability]) -> str:
    """Serialize vulnerabilities as compact JSON objects, one per line, in input order."""
    return "\n".join(
        json.dumps(v.model_dump(), separators=(",", ":"), ensure_ascii=False)
        for v in vulns
    )
