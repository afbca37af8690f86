"""Text-output protocol shared by result types and the CLI emitter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class FormatContext:
    """Knobs for `format_text()`; -1 is quiet, 0 normal, 1 verbose."""

    verbosity: int = 0

    @property
    def quiet(self) -> bool:
        return self.verbosity < 0


@runtime_checkable
class TextFormattable(Protocol):
    def format_text(self, ctx: FormatContext | None = None) -> str: ...
