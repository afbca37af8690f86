"""Core promptstack library exports."""

from promptstack.lib.domain import (
    Group,
    OneOf,
    PromptContext,
    PromptFormat,
    RenderResult,
    Section,
)

__all__ = ["Group", "OneOf", "PromptContext", "PromptFormat", "RenderResult", "Section"]
