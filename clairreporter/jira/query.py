"""JQL construction for the duplicate search."""

from __future__ import annotations


def jql_string(value: str) -> str:
    """Quote *value* as a JQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def phrase(value: str) -> str:
    """Wrap *value* in quotes so the text search matches it as an exact phrase.

    The text-search parser escapes quotes and backslashes the same way JQL does.
    """
    return jql_string(value)


def open_duplicate_jql(summary: str, project: str, closed_status: str) -> str:
    """Issues of *project* with *summary* as a phrase whose status is not *closed_status*."""
    return (
        f"summary ~ {jql_string(phrase(summary))}"
        f" AND project = {jql_string(project)}"
        f" AND status != {jql_string(closed_status)}"
    )
