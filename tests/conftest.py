"""pytest fixtures shared across all tests."""

from __future__ import annotations

import copy
import json
from typing import Any

import httpx
import pytest

from clairreporter.core.templates import FieldTemplateSet
from clairreporter.emitters.jira import DEFAULT_FIELDS, JiraEmitter
from clairreporter.jira.client import JiraClient

JIRA_URL = "https://jira.test"
JIRA_TOKEN = "s3cr3t-token"

CREATE_META: dict[str, Any] = {
    "projects": [
        {
            "id": "10000",
            "key": "CD",
            "name": "Container Defense",
            "issuetypes": [
                {
                    "id": "10001",
                    "name": "Story",
                    "fields": {
                        "project": {"name": "Project", "required": True, "schema": {"type": "project"}},
                        "issuetype": {"name": "Issue Type", "required": True, "schema": {"type": "issuetype"}},
                        "summary": {"name": "Summary", "required": True, "schema": {"type": "string"}},
                        "description": {"name": "Description", "required": False, "schema": {"type": "string"}},
                        "assignee": {"name": "Assignee", "required": False, "schema": {"type": "user"}},
                        "priority": {"name": "Priority", "required": False, "schema": {"type": "priority"}},
                        "labels": {
                            "name": "Labels",
                            "required": False,
                            "schema": {"type": "array", "items": "string"},
                        },
                        "components": {
                            "name": "Component/s",
                            "required": False,
                            "schema": {"type": "array", "items": "component"},
                        },
                        "customfield_10100": {"name": "Dev Team", "required": False, "schema": {"type": "option"}},
                        "customfield_10200": {"name": "Severity", "required": False, "schema": {"type": "option"}},
                        "customfield_10300": {
                            "name": "Vulnerability Report By",
                            "required": False,
                            "schema": {"type": "string"},
                        },
                    },
                },
                {
                    "id": "10004",
                    "name": "Bug",
                    "fields": {
                        "project": {"name": "Project", "required": True, "schema": {"type": "project"}},
                        "issuetype": {"name": "Issue Type", "required": True, "schema": {"type": "issuetype"}},
                        "summary": {"name": "Summary", "required": True, "schema": {"type": "string"}},
                        "environment": {"name": "Environment", "required": True, "schema": {"type": "string"}},
                    },
                },
            ],
        }
    ]
}

S1_REPORT: dict[str, Any] = {
    "repo": "acme/api",
    "vulnerabilities": {
        "openssl": [
            {
                "image_tag": "1.0",
                "version": "1.1.1",
                "severity": "High",
                "fixed_by": "1.1.1n",
                "link": "https://x/CVE-1",
            }
        ]
    },
}

S1_TEAMS: list[dict[str, str]] = [{"repo": "api", "team": "Platform", "assignee": "alice"}]


class FakeJira:
    """In-memory Jira REST endpoint served through ``httpx.MockTransport``.

    ``failures`` queues canned responses per operation (``createmeta``,
    ``search``, ``create``, ``user``, ``assign``); a queued response is
    returned instead of the normal one, once.
    """

    def __init__(self) -> None:
        self.create_meta: dict[str, Any] = copy.deepcopy(CREATE_META)
        self.search_hits: list[dict[str, Any]] = []
        self.failures: dict[str, list[httpx.Response]] = {}
        self.calls: list[str] = []
        self.searches: list[str] = []
        self.created: list[dict[str, Any]] = []
        self.assigned: list[tuple[str, dict[str, Any]]] = []
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def fail(self, operation: str, status_code: int = 500, body: str = "boom") -> None:
        self.failures.setdefault(operation, []).append(httpx.Response(status_code, text=body))

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/issue/createmeta"):
            op = "createmeta"
        elif path.endswith("/search"):
            op = "search"
        elif path.endswith("/issue") and request.method == "POST":
            op = "create"
        elif path.endswith("/user"):
            op = "user"
        elif path.endswith("/assignee") and request.method == "PUT":
            op = "assign"
        else:
            return httpx.Response(404, json={"errorMessages": [f"no route {path}"]})

        self.calls.append(op)
        self.requests.append(request)
        queued = self.failures.get(op)
        if queued:
            return queued.pop(0)

        if op == "createmeta":
            return httpx.Response(200, json=self.create_meta)
        if op == "search":
            self.searches.append(request.url.params["jql"])
            return httpx.Response(200, json={"issues": self.search_hits, "total": len(self.search_hits)})
        if op == "create":
            self.created.append(json.loads(request.content)["fields"])
            n = len(self.created)
            return httpx.Response(
                201, json={"id": str(20000 + n), "key": f"CD-{n}", "self": f"{JIRA_URL}/rest/api/2/issue/{20000 + n}"}
            )
        if op == "user":
            name = request.url.params["username"]
            return httpx.Response(200, json={"name": name, "key": name, "displayName": name.title()})
        issue_id = path.rstrip("/").split("/")[-2]
        self.assigned.append((issue_id, json.loads(request.content)))
        return httpx.Response(204)


@pytest.fixture
def fake_jira() -> FakeJira:
    return FakeJira()


@pytest.fixture
def jira_client(fake_jira):
    client = JiraClient(JIRA_URL, "bot", JIRA_TOKEN, transport=fake_jira.transport)
    yield client
    client.close()


@pytest.fixture
def fields() -> FieldTemplateSet:
    return FieldTemplateSet.parse(DEFAULT_FIELDS)


@pytest.fixture
def emitter(jira_client, fields) -> JiraEmitter:
    return JiraEmitter(jira_client, fields, "Closed")


@pytest.fixture
def write_json(tmp_path):
    """Write *data* as JSON under tmp_path and return the file path."""
    def _write(name: str, data: Any) -> str:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write
