"""Single-pass rendering of a prompt tree into text or tag-wrapped output."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import assert_never

import structlog

from promptstack.lib.domain import (
    Group,
    Node,
    OneOf,
    PromptContext,
    PromptFormat,
    RenderResult,
    Section,
)

logger = structlog.get_logger(__name__)

SEPARATOR = "\n\n"


class UnknownFormatError(ValueError):
    """Render was asked for a format outside `PromptFormat`."""


@dataclass(frozen=True, slots=True)
class _Formatter:
    section: Callable[[str, str], str]
    group: Callable[[str, Sequence[str]], list[str]]


def _text_section(section_id: str, content: str) -> str:
    _ = section_id
    return content


def _text_group(group_id: str, fragments: Sequence[str]) -> list[str]:
    _ = group_id
    return list(fragments)


def _xml_section(section_id: str, content: str) -> str:
    return f"<{section_id}>\n{content}\n</{section_id}>"


def _xml_group(group_id: str, fragments: Sequence[str]) -> list[str]:
    return [f"<{group_id}>\n{SEPARATOR.join(fragments)}\n</{group_id}>"]


_FORMATTERS: dict[PromptFormat, _Formatter] = {
    PromptFormat.TEXT: _Formatter(section=_text_section, group=_text_group),
    PromptFormat.XML: _Formatter(section=_xml_section, group=_xml_group),
}

_UNHANDLED_FORMATS = sorted(set(PromptFormat) - set(_FORMATTERS))
if _UNHANDLED_FORMATS:
    raise RuntimeError(f"No renderer registered for prompt formats: {_UNHANDLED_FORMATS}")


def resolve_format(value: PromptFormat | str) -> PromptFormat:
    """Coerce a format selector, failing loudly on anything unknown."""

    if isinstance(value, PromptFormat):
        return value
    if isinstance(value, str):
        try:
            return PromptFormat(value)
        except ValueError:
            pass
    expected = ", ".join(member.value for member in PromptFormat)
    raise UnknownFormatError(f"Unknown prompt format {value!r}; expected one of: {expected}.")


def _weight(node: Node) -> float:
    match node:
        case Section():
            return node.priority
        case Group() | OneOf():
            return 0
        case _:
            assert_never(node)


@dataclass(slots=True)
class _RenderPass:
    context: PromptContext
    formatter: _Formatter
    included: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)

    def render_nodes(self, nodes: Sequence[Node]) -> list[str]:
        # Evaluate in tree order so metadata follows ids(); only output is reordered.
        weighted = [(_weight(node), self.render_node(node)) for node in nodes]
        weighted.sort(key=lambda item: item[0])
        return [fragment for _, fragments in weighted for fragment in fragments]

    def render_node(self, node: Node) -> list[str]:
        match node:
            case Section():
                content = self._evaluate(node)
                if content is None:
                    return []
                return [self.formatter.section(node.id, content)]
            case Group():
                children = self.render_nodes(node.children)
                if not children:
                    return []
                return self.formatter.group(node.id, children)
            case OneOf():
                return self._select(node)
            case _:
                assert_never(node)

    def _evaluate(self, section: Section) -> str | None:
        if section.when is not None and not section.when(self.context):
            self.excluded.append(section.id)
            return None
        content = section.render(self.context)
        if not content:
            self.excluded.append(section.id)
            return None
        self.included.append(section.id)
        return content

    def _select(self, one_of: OneOf) -> list[str]:
        selected: list[str] = []
        for candidate in one_of.candidates:
            if selected:
                # Losing candidates are never evaluated once a winner exists.
                self.excluded.append(candidate.id)
                continue
            content = self._evaluate(candidate)
            if content is not None:
                selected.append(self.formatter.section(candidate.id, content))
        return selected


def render_tree(
    nodes: Sequence[Node],
    context: PromptContext,
    format: PromptFormat | str = PromptFormat.TEXT,
) -> RenderResult:
    """Render top-level nodes in one pass and collect inclusion metadata.

    Fragments are joined with a blank line and the result is trimmed. Guard
    and render exceptions propagate; nothing partial is returned.
    """

    prompt_format = resolve_format(format)
    render_pass = _RenderPass(context=context, formatter=_FORMATTERS[prompt_format])
    fragments = render_pass.render_nodes(nodes)
    result = RenderResult(
        prompt=SEPARATOR.join(fragments).strip(),
        included=tuple(render_pass.included),
        excluded=tuple(render_pass.excluded),
    )
    logger.debug(
        "prompt rendered",
        format=prompt_format.value,
        included=len(result.included),
        excluded=len(result.excluded),
        chars=len(result.prompt),
    )
    return result
