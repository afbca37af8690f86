"""Builder mutation API: add, one-of, group, remove, has, ids, fork."""

from __future__ import annotations

import pytest

from promptstack import Group, OneOf, PromptBuilder, Section
from promptstack.lib.prompt import mock_context

ctx = mock_context()


def _section(section_id: str, content: str, *, priority: float = 0) -> Section:
    return Section(id=section_id, render=lambda _ctx: content, priority=priority)


def test_add_renders_section() -> None:
    assert PromptBuilder().add(_section("a", "Hello")).render(ctx) == "Hello"


def test_add_replaces_same_id_in_place() -> None:
    builder = (
        PromptBuilder()
        .add(_section("a", "v1"))
        .add(_section("b", "other"))
        .add(_section("a", "v2"))
    )

    assert builder.ids() == ["a", "b"]
    assert builder.render(ctx) == "v2\n\nother"


def test_add_is_idempotent() -> None:
    a = _section("a", "first")
    b = _section("b", "second")
    once = PromptBuilder().add(a).add(b)
    twice = PromptBuilder().add(a).add(b).add(a)

    assert twice.ids() == once.ids() == ["a", "b"]
    assert twice.render(ctx) == once.render(ctx)
    assert twice.nodes == once.nodes


def test_add_replaces_section_nested_in_group() -> None:
    builder = (
        PromptBuilder()
        .group("tools", lambda b: b.add(_section("bash", "old bash")).add(_section("git", "Git")))
        .add(_section("bash", "new bash"))
    )

    assert builder.ids() == ["tools", "bash", "git"]
    assert builder.render(ctx) == "new bash\n\nGit"


def test_add_does_not_replace_one_of_candidates() -> None:
    builder = (
        PromptBuilder()
        .add_one_of(_section("x", "candidate"))
        .add(_section("x", "top level"))
    )

    assert builder.ids() == ["x", "x"]
    assert isinstance(builder.nodes[0], OneOf)
    assert isinstance(builder.nodes[1], Section)


def test_group_with_same_id_replaces_in_place() -> None:
    builder = (
        PromptBuilder()
        .add(_section("intro", "Intro"))
        .group("tools", lambda b: b.add(_section("bash", "Bash")))
        .add(_section("outro", "Outro"))
        .group("tools", lambda b: b.add(_section("git", "Git")))
    )

    assert builder.ids() == ["intro", "tools", "git", "outro"]


def test_group_rejects_empty_id() -> None:
    with pytest.raises(ValueError, match="Group id"):
        PromptBuilder().group("  ", lambda b: b)


def test_nested_groups_have_no_depth_limit() -> None:
    builder = PromptBuilder().group(
        "outer",
        lambda outer: outer.group(
            "middle",
            lambda middle: middle.group("inner", lambda inner: inner.add(_section("leaf", "Leaf"))),
        ),
    )

    assert builder.ids() == ["outer", "middle", "inner", "leaf"]
    assert builder.has("leaf")


def test_add_one_of_always_appends() -> None:
    builder = (
        PromptBuilder()
        .add_one_of(_section("a", "A"), _section("b", "B"))
        .add_one_of(_section("a", "A"), _section("b", "B"))
    )

    assert len(builder.nodes) == 2
    assert builder.ids() == ["a", "b", "a", "b"]


def test_remove_by_id_and_by_section() -> None:
    b = _section("b", "Remove")
    builder = PromptBuilder().add(_section("a", "Keep")).add(b).add(_section("c", "Also"))

    builder.remove("c").remove(b)

    assert builder.ids() == ["a"]
    assert builder.render(ctx) == "Keep"


def test_remove_missing_id_is_noop() -> None:
    builder = PromptBuilder().add(_section("a", "Keep")).remove("nonexistent")

    assert builder.ids() == ["a"]


def test_remove_group_drops_descendants() -> None:
    builder = (
        PromptBuilder()
        .add(_section("a", "A"))
        .group("tools", lambda b: b.add(_section("bash", "Bash")).add(_section("git", "Git")))
        .remove("tools")
    )

    assert builder.ids() == ["a"]
    assert not builder.has("bash")


def test_remove_searches_groups_and_candidates() -> None:
    builder = (
        PromptBuilder()
        .group("tools", lambda b: b.add(_section("bash", "Bash")).add(_section("git", "Git")))
        .add_one_of(_section("x", "X"), _section("y", "Y"))
        .remove("git")
        .remove("x")
    )

    assert builder.ids() == ["tools", "bash", "y"]


def test_remove_last_candidate_prunes_one_of() -> None:
    builder = PromptBuilder().add(_section("a", "A")).add_one_of(_section("only", "Only"))

    builder.remove("only")

    assert builder.ids() == ["a"]
    assert len(builder.nodes) == 1


def test_remove_prunes_groups_it_empties() -> None:
    builder = (
        PromptBuilder()
        .add(_section("a", "A"))
        .group("outer", lambda b: b.group("inner", lambda inner: inner.add(_section("x", "X"))))
        .group("tools", lambda b: b.add(_section("bash", "Bash")).add(_section("git", "Git")))
    )

    builder.remove("x").remove("bash")

    assert builder.ids() == ["a", "tools", "git"]
    assert not builder.has("outer")


def test_remove_keeps_group_created_empty() -> None:
    builder = PromptBuilder().group("empty", lambda b: None)

    builder.remove("missing")

    assert builder.ids() == ["empty"]
    assert builder.render(ctx) == ""


def test_group_owns_children_after_configure() -> None:
    held: list[PromptBuilder] = []
    builder = PromptBuilder().group("g", lambda b: held.append(b.add(_section("x", "X"))))

    held[0].add(_section("y", "Y"))
    held[0].remove("x")

    assert builder.ids() == ["g", "x"]
    assert builder.render(ctx) == "X"


def test_has_by_string_and_object() -> None:
    a = _section("a", "test")
    builder = (
        PromptBuilder()
        .add(a)
        .group("g", lambda b: b.add(_section("nested", "N")))
        .add_one_of(_section("alt", "Alt"))
    )

    assert builder.has("a")
    assert builder.has(a)
    assert builder.has("g")
    assert builder.has("nested")
    assert builder.has("alt")
    assert not builder.has("missing")
    assert not PromptBuilder().has("a")


def test_ids_are_depth_first_insertion_order() -> None:
    builder = (
        PromptBuilder()
        .add(_section("c", "", priority=0))
        .add(_section("a", "", priority=1))
        .group(
            "g",
            lambda b: b.add(_section("g1", "")).add_one_of(_section("o1", ""), _section("o2", "")),
        )
        .add(_section("b", "", priority=2))
    )

    assert builder.ids() == ["c", "a", "g", "g1", "o1", "o2", "b"]


def test_fork_add_leaves_original_untouched() -> None:
    base = PromptBuilder().add(_section("a", "shared"))
    variant = base.fork().add(_section("b", "extra"))

    assert not base.has("b")
    assert variant.has("b")


def test_fork_remove_leaves_original_untouched() -> None:
    base = (
        PromptBuilder()
        .add(_section("a", "A"))
        .group("tools", lambda b: b.add(_section("bash", "Bash")))
        .add_one_of(_section("x", "X"), _section("y", "Y"))
    )

    variant = base.fork().remove("bash").remove("x").remove("a")

    assert base.ids() == ["a", "tools", "bash", "x", "y"]
    assert variant.ids() == ["y"]


def test_fork_replace_does_not_leak_into_original() -> None:
    base = PromptBuilder().group("tools", lambda b: b.add(_section("bash", "original")))
    variant = base.fork().add(_section("bash", "modified"))

    assert base.render(ctx) == "original"
    assert variant.render(ctx) == "modified"


def test_fork_copies_containers_and_shares_sections() -> None:
    bash = _section("bash", "Bash")
    base = PromptBuilder().group("tools", lambda b: b.add(bash)).add_one_of(_section("x", "X"))

    forked = base.fork()

    base_group, base_one_of = base.nodes
    forked_group, forked_one_of = forked.nodes
    assert isinstance(base_group, Group) and isinstance(forked_group, Group)
    assert isinstance(base_one_of, OneOf) and isinstance(forked_one_of, OneOf)
    assert forked_group is not base_group
    assert forked_group.children is not base_group.children
    assert forked_one_of.candidates is not base_one_of.candidates
    assert forked_group.children[0] is bash


def test_fork_preserves_ids() -> None:
    builder = (
        PromptBuilder()
        .add(_section("a", "A"))
        .group("g", lambda b: b.add(_section("b", "B")))
        .add_one_of(_section("c", "C"), _section("d", "D"))
    )

    assert builder.fork().ids() == builder.ids()


def test_section_rejects_empty_id() -> None:
    with pytest.raises(ValueError, match="Section id"):
        _section("", "content")
