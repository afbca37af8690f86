"""Prompt composition engine."""

from promptstack.lib.prompt.builder import PromptBuilder
from promptstack.lib.prompt.context import (
    ContextAssignmentError,
    build_context,
    parse_assignments,
    resolve_variable_values,
)
from promptstack.lib.prompt.loader import BuilderTargetError, load_builder
from promptstack.lib.prompt.render import UnknownFormatError, render_tree, resolve_format
from promptstack.lib.prompt.section import section
from promptstack.lib.prompt.testing import mock_context, render_section

__all__ = [
    "BuilderTargetError",
    "ContextAssignmentError",
    "PromptBuilder",
    "UnknownFormatError",
    "build_context",
    "load_builder",
    "mock_context",
    "parse_assignments",
    "render_section",
    "render_tree",
    "resolve_format",
    "resolve_variable_values",
    "section",
]
