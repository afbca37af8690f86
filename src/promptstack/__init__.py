"""Declarative builder for composing LLM system prompts from sections."""

from promptstack.lib.domain import (
    Group,
    OneOf,
    PromptContext,
    PromptFormat,
    RenderResult,
    Section,
)
from promptstack.lib.prompt.builder import PromptBuilder
from promptstack.lib.prompt.render import UnknownFormatError
from promptstack.lib.prompt.section import section

__version__ = "0.1.0"

__all__ = [
    "Group",
    "OneOf",
    "PromptBuilder",
    "PromptContext",
    "PromptFormat",
    "RenderResult",
    "Section",
    "UnknownFormatError",
    "__version__",
    "section",
]
