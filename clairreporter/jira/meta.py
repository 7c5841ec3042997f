"""Create-meta model: which issue types a project offers and which fields they take."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from clairreporter.core.errors import ConfigError

# schema types whose value is passed through as the rendered string
_PLAIN_TYPES = {"string", "date", "datetime", "any"}


@dataclass
class MetaIssueType:
    id: str
    name: str
    fields: dict[str, dict[str, Any]] = field(default_factory=dict)
    """Jira field key (``summary``, ``customfield_10010``) -> field meta."""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "MetaIssueType":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            fields=dict(data.get("fields") or {}),
        )

    def all_fields(self) -> dict[str, str]:
        """Display name -> Jira field key."""
        return {str(meta.get("name") or key): key for key, meta in self.fields.items()}

    def mandatory_fields(self) -> dict[str, str]:
        return {
            str(meta.get("name") or key): key
            for key, meta in self.fields.items()
            if meta.get("required")
        }

    def check_complete_and_available(self, names: Iterable[str]) -> None:
        """Every required field is configured and every configured field exists."""
        names = set(names)
        mandatory = self.mandatory_fields()
        missing = sorted(n for n in mandatory if n not in names)
        if missing:
            raise ConfigError(
                f"required field(s) {missing} not found in the field configuration. "
                f"Required are: {sorted(mandatory)}"
            )
        available = self.all_fields()
        unknown = sorted(n for n in names if n not in available)
        if unknown:
            raise ConfigError(
                f"field(s) {unknown} are not available for issue type {self.name!r}. "
                f"Available are: {sorted(available)}"
            )

    def build_fields(self, project: "MetaProject", rendered: Mapping[str, str]) -> dict[str, Any]:
        """Shape rendered values into a ``fields`` payload according to each field's schema.

        Blank values of optional fields are left out. Raises ``ValueError`` for a
        field that is unknown or whose schema type is not supported.
        """
        available = self.all_fields()
        payload: dict[str, Any] = {}
        for name, value in rendered.items():
            key = available.get(name)
            if key is None:
                raise ValueError(f"key {name!r} is not found in the list of fields")
            meta = self.fields[key]
            if not value.strip() and not meta.get("required"):
                continue
            payload[key] = self._field_value(project, name, meta, value)
        return payload

    def _field_value(
        self, project: "MetaProject", name: str, meta: Mapping[str, Any], value: str
    ) -> Any:
        schema = meta.get("schema") or {}
        value_type = schema.get("type")

        if value_type in _PLAIN_TYPES:
            return value
        if value_type == "number":
            try:
                number = float(value)
            except ValueError:
                raise ValueError(f"field {name!r} expects a number, got {value!r}") from None
            # JSON has no inf / nan
            if not math.isfinite(number):
                raise ValueError(f"field {name!r} expects a finite number, got {value!r}")
            return number
        if value_type == "project":
            return {"id": project.id} if project.id else {"key": project.key}
        if value_type == "issuetype":
            return {"id": self.id} if self.id else {"name": value}
        if value_type == "priority":
            return {"name": value}
        if value_type == "user":
            return {"name": value}
        if value_type == "option":
            return {"value": value}
        if value_type == "array":
            items = schema.get("items")
            if items == "component":
                return [{"name": value}]
            if items == "option":
                return [{"value": value}]
            return [value]
        raise ValueError(f"unknown field type {value_type!r} encountered for {name!r}")


@dataclass
class MetaProject:
    id: str
    key: str
    name: str
    issue_types: list[MetaIssueType] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "MetaProject":
        return cls(
            id=str(data.get("id") or ""),
            key=str(data.get("key") or ""),
            name=str(data.get("name") or ""),
            issue_types=[MetaIssueType.from_json(it) for it in data.get("issuetypes") or []],
        )

    def issue_type(self, name: str) -> MetaIssueType | None:
        for it in self.issue_types:
            if it.name == name:
                return it
        return None

    def issue_type_names(self) -> list[str]:
        return [it.name for it in self.issue_types]


def project_from_create_meta(data: Mapping[str, Any], key: str) -> MetaProject | None:
    """Pick the project with *key* out of a ``createmeta`` response."""
    for project in data.get("projects") or []:
        if project.get("key") == key:
            return MetaProject.from_json(project)
    return None
