"""Build a `PromptContext` from config defaults and CLI assignments."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from promptstack.lib.domain import PromptContext


class ContextAssignmentError(ValueError):
    """A flag or variable assignment could not be applied."""


def parse_assignments(assignments: Sequence[str]) -> dict[str, str]:
    """Parse CLI variables passed as `KEY=VALUE`."""

    parsed: dict[str, str] = {}
    for assignment in assignments:
        key, separator, value = assignment.partition("=")
        normalized_key = key.strip()
        if not separator or not normalized_key:
            raise ContextAssignmentError(
                "Invalid variable assignment. Expected KEY=VALUE, "
                f"got '{assignment}'."
            )
        parsed[normalized_key] = value
    return parsed


def resolve_variable_values(
    variables: Mapping[str, str],
    *,
    base_dir: Path | None = None,
) -> dict[str, str]:
    """Resolve `@path` values to file contents; everything else stays literal."""

    root = (base_dir or Path.cwd()).resolve()
    resolved: dict[str, str] = {}
    for key, raw_value in variables.items():
        if not raw_value.startswith("@"):
            resolved[key] = raw_value
            continue

        expanded = Path(raw_value[1:]).expanduser()
        path = (expanded if expanded.is_absolute() else root / expanded).resolve()
        if not path.is_file():
            raise ContextAssignmentError(f"Variable '{key}' points to missing file: {path}")
        resolved[key] = path.read_text(encoding="utf-8")
    return resolved


def build_context(
    *,
    base_flags: Mapping[str, bool] | None = None,
    base_vars: Mapping[str, Any] | None = None,
    enable: Sequence[str] = (),
    disable: Sequence[str] = (),
    assignments: Sequence[str] = (),
    base_dir: Path | None = None,
) -> PromptContext:
    """Layer CLI flags and variables over configured defaults."""

    conflicting = sorted(set(enable) & set(disable))
    if conflicting:
        raise ContextAssignmentError(
            f"Flags cannot be both enabled and disabled: {', '.join(conflicting)}"
        )

    flags: dict[str, bool] = dict(base_flags or {})
    for name in enable:
        flags[name] = True
    for name in disable:
        flags[name] = False

    variables: dict[str, Any] = dict(base_vars or {})
    variables.update(resolve_variable_values(parse_assignments(assignments), base_dir=base_dir))
    return PromptContext(flags=flags, vars=variables)
