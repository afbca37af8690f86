"""Section factory for render functions that may opt out with `None`."""

from __future__ import annotations

from collections.abc import Callable

from promptstack.lib.domain import Guard, PromptContext, Section


def section(
    section_id: str,
    render: Callable[[PromptContext], str | None],
    *,
    when: Guard | None = None,
    priority: float = 0,
) -> Section:
    """Create a section. Return a string to include, `None` to exclude.

    Example::

        prod = section(
            "prod",
            lambda ctx: f"## Prod\\n\\n{ctx.vars['prod']}" if ctx.vars.get("prod") else None,
        )
    """

    def _render(ctx: PromptContext) -> str:
        rendered = render(ctx)
        return "" if rendered is None else rendered

    return Section(id=section_id, render=_render, when=when, priority=priority)
