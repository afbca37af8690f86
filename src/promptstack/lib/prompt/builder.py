"""Declarative, composable prompt builder."""

from __future__ import annotations

from collections.abc import Callable
from typing import Self, assert_never

from promptstack.lib.domain import (
    Group,
    HasId,
    Node,
    OneOf,
    PromptContext,
    PromptFormat,
    RenderResult,
    Section,
)
from promptstack.lib.prompt.render import render_tree


def _resolve_id(ref: str | HasId) -> str:
    return ref if isinstance(ref, str) else ref.id


def _replace_in_place(nodes: list[Node], replacement: Section | Group) -> bool:
    """Swap the addressable node carrying `replacement.id`, searching groups."""

    for index, node in enumerate(nodes):
        match node:
            case Section() | Group() if node.id == replacement.id:
                nodes[index] = replacement
                return True
            case Group():
                if _replace_in_place(node.children, replacement):
                    return True
            case Section() | OneOf():
                continue
            case _:
                assert_never(node)
    return False


def _remove_matching(nodes: list[Node], node_id: str) -> None:
    kept: list[Node] = []
    for node in nodes:
        match node:
            case Section():
                if node.id == node_id:
                    continue
            case Group():
                if node.id == node_id:
                    continue
                had_children = bool(node.children)
                _remove_matching(node.children, node_id)
                if had_children and not node.children:
                    continue
            case OneOf():
                remaining = [candidate for candidate in node.candidates if candidate.id != node_id]
                if not remaining and node.candidates:
                    continue
                node.candidates = remaining
            case _:
                assert_never(node)
        kept.append(node)
    nodes[:] = kept


def _contains(nodes: list[Node], node_id: str) -> bool:
    for node in nodes:
        match node:
            case Section():
                if node.id == node_id:
                    return True
            case Group():
                if node.id == node_id or _contains(node.children, node_id):
                    return True
            case OneOf():
                if any(candidate.id == node_id for candidate in node.candidates):
                    return True
            case _:
                assert_never(node)
    return False


def _collect_ids(nodes: list[Node], into: list[str]) -> None:
    for node in nodes:
        match node:
            case Section():
                into.append(node.id)
            case Group():
                into.append(node.id)
                _collect_ids(node.children, into)
            case OneOf():
                into.extend(candidate.id for candidate in node.candidates)
            case _:
                assert_never(node)


def _clone(node: Node) -> Node:
    match node:
        case Section():
            # Sections are frozen; sharing them between trees is safe.
            return node
        case Group():
            return Group(id=node.id, children=[_clone(child) for child in node.children])
        case OneOf():
            return OneOf(candidates=list(node.candidates))
        case _:
            assert_never(node)


class PromptBuilder:
    """Compose a prompt from sections, named groups and one-of sets.

    Sections are independently testable pure functions of a `PromptContext`.
    The builder owns the tree; rendering walks it once per call.

    Example::

        prompt = (
            PromptBuilder()
            .add(identity)
            .add(rules)
            .group("tools", lambda b: b.add(web_search))
            .add_one_of(has_tasks, no_tasks)
            .render(ctx, "xml")
        )
    """

    __slots__ = ("_nodes",)

    def __init__(self) -> None:
        self._nodes: list[Node] = []

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    def add(self, section: Section) -> Self:
        """Add a section, replacing any node with the same id where it stands.

        Calling `add` repeatedly with the same section is idempotent.
        """

        if not _replace_in_place(self._nodes, section):
            self._nodes.append(section)
        return self

    def add_one_of(self, *candidates: Section) -> Self:
        """Append a set whose first rendering candidate is the only one included."""

        self._nodes.append(OneOf(candidates=list(candidates)))
        return self

    def group(self, group_id: str, configure: Callable[[PromptBuilder], object]) -> Self:
        """Build a named group from a fresh child builder populated by `configure`."""

        if not group_id.strip():
            raise ValueError("Group id must not be empty.")
        child = PromptBuilder()
        configure(child)
        grouped = Group(id=group_id, children=list(child._nodes))
        if not _replace_in_place(self._nodes, grouped):
            self._nodes.append(grouped)
        return self

    def remove(self, ref: str | HasId) -> Self:
        """Remove every node with this id at any depth; unknown ids are ignored.

        Groups and one-of sets left empty by the removal are dropped as well.
        """

        _remove_matching(self._nodes, _resolve_id(ref))
        return self

    def has(self, ref: str | HasId) -> bool:
        return _contains(self._nodes, _resolve_id(ref))

    def ids(self) -> list[str]:
        """Return every id in depth-first insertion order (groups before children)."""

        collected: list[str] = []
        _collect_ids(self._nodes, collected)
        return collected

    def fork(self) -> PromptBuilder:
        """Return a structurally independent copy for building variants."""

        forked = PromptBuilder()
        forked._nodes = [_clone(node) for node in self._nodes]
        return forked

    def render(
        self,
        context: PromptContext,
        format: PromptFormat | str = PromptFormat.TEXT,
    ) -> str:
        return render_tree(self._nodes, context, format).prompt

    def render_with_metadata(
        self,
        context: PromptContext,
        format: PromptFormat | str = PromptFormat.TEXT,
    ) -> RenderResult:
        """Render and report which sections were included or excluded."""

        return render_tree(self._nodes, context, format)
