"""Field template configuration and ``{{ placeholder }}`` rendering.

The configuration is a single string of ``key|value`` directives separated by
``;``, e.g.::

    Project|CD;Issue Type|Story;Summary|package name:{{ .failure.Package }}

Every value is a template. Placeholders resolve a dotted path against the
bindings ``failure`` (the current :class:`Finding`) and ``nl`` (a newline);
the leading ``.`` of Go template syntax is optional, and the ``{{- `` / `` -}}``
trim markers drop the whitespace next to the placeholder. Actions such as
``if`` or pipelines are not supported.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from typing import Any

from clairreporter.core.errors import ConfigError, RenderError
from clairreporter.schemas.finding import Finding

PLACEHOLDER_RE = re.compile(
    r"(?:\s*\{\{-\s+|\{\{\s*)"
    r"\.?([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)"
    r"(?:\s+-\}\}\s*|\s*\}\})"
)

MANDATORY_FIELDS = ("Project", "Issue Type", "Summary")

DIRECTIVE_SEP = ";"
KEY_VALUE_SEP = "|"


class _Missing(LookupError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key


def _get_nested_value(data: dict[str, Any], dotted_key: str) -> Any:
    """Resolve a dot-separated key path against a nested dict."""
    cur: Any = data
    for part in dotted_key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            raise _Missing(dotted_key)
    return cur


def render_template(template: str, values: dict[str, Any]) -> str:
    """Replace ``{{ key }}`` placeholders in *template* with values from *values*.

    Raises ``LookupError`` when a placeholder does not resolve.
    """
    def repl(match: re.Match[str]) -> str:
        v = _get_nested_value(values, match.group(1))
        if isinstance(v, (dict, list)):
            return json.dumps(v)
        return "" if v is None else str(v)

    return PLACEHOLDER_RE.sub(repl, template)


def template_bindings(finding: Finding) -> dict[str, Any]:
    return {"nl": "\n", "failure": finding.template_values()}


def _check_syntax(field: str, template: str) -> None:
    literal = PLACEHOLDER_RE.sub("", template)
    if "{{" in literal:
        raise ConfigError(f"template for field {field!r} has a malformed placeholder: {template!r}")


class FieldTemplateSet(Mapping[str, str]):
    """Tracker field name -> template string."""

    def __init__(self, templates: Mapping[str, str]) -> None:
        missing = [name for name in MANDATORY_FIELDS if name not in templates]
        if missing:
            raise ConfigError(
                f"field configuration must contain {', '.join(MANDATORY_FIELDS)}; "
                f"missing: {', '.join(missing)}"
            )
        for field, template in templates.items():
            _check_syntax(field, template)
        self._templates = dict(templates)

    @classmethod
    def parse(cls, raw: str) -> "FieldTemplateSet":
        """Parse ``key|value;key|value;...`` (duplicate keys: last one wins)."""
        templates: dict[str, str] = {}
        for directive in raw.split(DIRECTIVE_SEP):
            key, sep, value = directive.partition(KEY_VALUE_SEP)
            if not sep:
                raise ConfigError(
                    f"invalid field configuration: expected 'key|value', not {directive!r}"
                )
            templates[key] = value
        return cls(templates)

    def serialize(self) -> str:
        return DIRECTIVE_SEP.join(
            f"{key}{KEY_VALUE_SEP}{value}" for key, value in self._templates.items()
        )

    def render(self, finding: Finding) -> dict[str, str]:
        """Evaluate every template against *finding*."""
        values = template_bindings(finding)
        rendered: dict[str, str] = {}
        for field, template in self._templates.items():
            try:
                rendered[field] = render_template(template, values)
            except _Missing as exc:
                raise RenderError(field, f"no value for {{{{ {exc.key} }}}}") from exc
        return rendered

    def __getitem__(self, key: str) -> str:
        return self._templates[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __repr__(self) -> str:
        return f"FieldTemplateSet({self._templates!r})"
