"""Thin synchronous Jira REST v2 client built on httpx."""

from __future__ import annotations

import re
from typing import Any

import httpx

from clairreporter.core.logging import get_logger

logger = get_logger(__name__)

API_PREFIX = "/rest/api/2"

_CREDENTIAL_RE = re.compile(r"\b(Basic|Bearer)\s+[A-Za-z0-9._~+/=-]{16,}", re.IGNORECASE)
_REDACTED = "[redacted]"


class JiraAPIError(Exception):
    """A Jira call returned a non-success status or could not be sent."""

    def __init__(self, operation: str, status_code: int | None, body: str) -> None:
        detail = f"HTTP {status_code}" if status_code is not None else "no response"
        super().__init__(f"{operation}: {detail}. Detailed information: {body or '<empty body>'}")
        self.operation = operation
        self.status_code = status_code
        self.body = body


class JiraClient:
    """Jira REST client with basic auth.

    Usage:
        with JiraClient("https://jira.example.com", "bot", "token") as client:
            meta = client.get_create_meta("CD")
    """

    def __init__(
        self,
        url: str,
        username: str,
        token: str,
        *,
        timeout: float = 30.0,
        error_body_limit: int = 500,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token = token
        self._error_body_limit = error_body_limit
        self._http = httpx.Client(
            base_url=url.rstrip("/"),
            auth=(username, token),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    # ── Endpoints ─────────────────────────────────────────────────────────────

    def get_create_meta(self, project_key: str) -> dict[str, Any]:
        return self._request(
            "get create meta",
            "GET",
            f"{API_PREFIX}/issue/createmeta",
            params={
                "projectKeys": project_key,
                "expand": "projects.issuetypes.fields",
            },
        )

    def search(self, jql: str, *, max_results: int = 1) -> list[dict[str, Any]]:
        data = self._request(
            "search issues",
            "GET",
            f"{API_PREFIX}/search",
            params={"jql": jql, "maxResults": max_results, "fields": "summary,status"},
        )
        return list(data.get("issues") or [])

    def create_issue(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Create an issue; returns ``{"id", "key", "self"}``."""
        return self._request(
            "could not create issue", "POST", f"{API_PREFIX}/issue", json={"fields": fields}
        )

    def get_user(self, username: str) -> dict[str, Any]:
        return self._request(
            "get user", "GET", f"{API_PREFIX}/user", params={"username": username}
        )

    def update_assignee(self, issue_id: str, user: dict[str, Any]) -> None:
        payload = {k: user[k] for k in ("name", "accountId") if user.get(k)}
        self._request(
            "update assignee", "PUT", f"{API_PREFIX}/issue/{issue_id}/assignee", json=payload
        )

    # ── Plumbing ──────────────────────────────────────────────────────────────

    def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        try:
            r = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise JiraAPIError(operation, None, self._safe_body(str(exc))) from exc

        if r.is_error:
            raise JiraAPIError(operation, r.status_code, self._safe_body(r.text))

        logger.debug("Jira call", operation=operation, status=r.status_code)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as exc:
            raise JiraAPIError(
                operation, r.status_code, f"invalid JSON: {self._safe_body(r.text)}"
            ) from exc

    def _safe_body(self, body: str) -> str:
        """Bound a response body and strip anything resembling our credentials."""
        if self._token:
            body = body.replace(self._token, _REDACTED)
        body = _CREDENTIAL_RE.sub(lambda m: f"{m.group(1)} {_REDACTED}", body)
        limit = self._error_body_limit
        if len(body) > limit:
            body = body[:limit] + f"... [{len(body) - limit} more characters]"
        return body

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
