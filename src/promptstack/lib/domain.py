"""Core prompt-tree domain types."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, cast

if TYPE_CHECKING:
    from promptstack.lib.formatting import FormatContext


class PromptFormat(StrEnum):
    TEXT = "text"
    XML = "xml"


def _empty_flags() -> Mapping[str, bool]:
    return cast("Mapping[str, bool]", {})


def _empty_vars() -> Mapping[str, Any]:
    return cast("Mapping[str, Any]", {})


@dataclass(frozen=True, slots=True)
class PromptContext:
    """Read-only input handed to every guard and render call of one pass."""

    flags: Mapping[str, bool] = field(default_factory=_empty_flags)
    vars: Mapping[str, Any] = field(default_factory=_empty_vars)

    def with_flags(self, **flags: bool) -> PromptContext:
        return replace(self, flags={**self.flags, **flags})

    def with_vars(self, **values: Any) -> PromptContext:
        return replace(self, vars={**self.vars, **values})


type Guard = Callable[[PromptContext], bool]
type Renderer = Callable[[PromptContext], str]


class HasId(Protocol):
    @property
    def id(self) -> str: ...


@dataclass(frozen=True, slots=True)
class Section:
    """Atomic content unit.

    `when` excludes the section without calling `render`. An empty render
    also excludes it; both outcomes are reported as excluded.
    """

    id: str
    render: Renderer
    when: Guard | None = None
    priority: float = 0

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("Section id must not be empty.")


@dataclass(slots=True)
class Group:
    """Named container; transparent in text output, tag-wrapped in xml."""

    id: str
    children: list[Node] = field(default_factory=list)


@dataclass(slots=True)
class OneOf:
    """Unaddressable set of candidates; the first one that renders wins."""

    candidates: list[Section] = field(default_factory=list)


type Node = Section | Group | OneOf


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Rendered prompt plus per-section inclusion metadata."""

    prompt: str
    included: tuple[str, ...] = ()
    excluded: tuple[str, ...] = ()

    def format_text(self, ctx: FormatContext | None = None) -> str:
        if ctx is not None and ctx.quiet:
            return self.prompt
        lines = [
            f"included: {', '.join(self.included) or '-'}",
            f"excluded: {', '.join(self.excluded) or '-'}",
        ]
        if self.prompt:
            lines.extend(("", self.prompt))
        return "\n".join(lines)
