"""Helpers for exercising sections in isolation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from promptstack.lib.domain import PromptContext, Section


def mock_context(
    *,
    flags: Mapping[str, bool] | None = None,
    vars: Mapping[str, Any] | None = None,
) -> PromptContext:
    """Create a context with empty defaults for anything not overridden."""

    return PromptContext(flags=dict(flags or {}), vars=dict(vars or {}))


def render_section(
    section: Section,
    *,
    flags: Mapping[str, bool] | None = None,
    vars: Mapping[str, Any] | None = None,
) -> str | None:
    """Render one section against a mock context; `None` when its guard rejects it."""

    ctx = mock_context(flags=flags, vars=vars)
    if section.when is not None and not section.when(ctx):
        return None
    return section.render(ctx)
