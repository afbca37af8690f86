"""Cyclopts CLI entry point for promptstack."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from promptstack import __version__
from promptstack.cli.output import OutputConfig
from promptstack.cli.output import emit as emit_output
from promptstack.lib.config import load_config, resolve_repo_root
from promptstack.lib.prompt import build_context, load_builder

if TYPE_CHECKING:
    from collections.abc import Sequence

    from promptstack.lib.config import PromptstackConfig
    from promptstack.lib.prompt import PromptBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Top-level options that apply to all commands."""

    output: OutputConfig
    verbosity: int = 0


_GLOBAL_OPTIONS: ContextVar[GlobalOptions | None] = ContextVar("_GLOBAL_OPTIONS", default=None)


def get_global_options() -> GlobalOptions:
    """Return parsed global options for current command."""

    default = GlobalOptions(output=OutputConfig(format="text"))
    return _GLOBAL_OPTIONS.get() or default


def emit(payload: object) -> None:
    """Write command output using current output format settings."""

    emit_output(payload, get_global_options().output)


def _extract_global_options(argv: Sequence[str]) -> tuple[list[str], GlobalOptions]:
    json_mode = False
    verbosity = 0
    cleaned: list[str] = []
    for arg in argv:
        if arg == "--json":
            json_mode = True
            continue
        if arg == "--no-json":
            json_mode = False
            continue
        if arg in {"--verbose", "-v"}:
            verbosity += 1
            continue
        cleaned.append(arg)

    return cleaned, GlobalOptions(
        output=OutputConfig(format="json" if json_mode else "text"),
        verbosity=verbosity,
    )


app = App(
    name="promptstack",
    help="Compose LLM system prompts from sections.",
    version=__version__,
    help_formatter="plain",
)
config_app = App(name="config", help="Repository config commands", help_formatter="plain")
app.command(config_app, name="config")


def _resolve_builder(target: str | None, config: PromptstackConfig) -> PromptBuilder:
    resolved_target = target.strip() if target is not None and target.strip() else None
    resolved_target = resolved_target or config.default_target
    if resolved_target is None:
        raise ValueError(
            "No builder target given. Pass MODULE:ATTR or set default_target "
            "in .promptstack/config.toml."
        )
    return load_builder(resolved_target, base_dir=Path.cwd())


@app.command(name="render")
def render(
    target: Annotated[
        str | None,
        Parameter(help="Builder to render, as module:attr or path.py:attr."),
    ] = None,
    *,
    flag: Annotated[
        tuple[str, ...],
        Parameter(
            name="--flag",
            help="Set a context flag to true (repeatable).",
            negative_iterable=(),
        ),
    ] = (),
    unset_flag: Annotated[
        tuple[str, ...],
        Parameter(
            name="--unset-flag",
            help="Set a context flag to false (repeatable).",
            negative_iterable=(),
        ),
    ] = (),
    var: Annotated[
        tuple[str, ...],
        Parameter(
            name="--var",
            help="Context variable as KEY=VALUE; KEY=@path reads a file (repeatable).",
            negative_iterable=(),
        ),
    ] = (),
    prompt_format: Annotated[
        str | None,
        Parameter(name="--format", help="Prompt format: text or xml."),
    ] = None,
    meta: Annotated[
        bool,
        Parameter(name="--meta", help="Also report included and excluded sections.", negative=()),
    ] = False,
) -> None:
    """Render a builder against a context assembled from config and flags."""

    config = load_config(resolve_repo_root())
    builder = _resolve_builder(target, config)
    context = build_context(
        base_flags=config.flags,
        base_vars=config.vars,
        enable=flag,
        disable=unset_flag,
        assignments=var,
        base_dir=Path.cwd(),
    )
    selected_format = prompt_format or config.default_format
    if meta or get_global_options().output.format == "json":
        emit(builder.render_with_metadata(context, selected_format))
        return
    emit(builder.render(context, selected_format))


@app.command(name="ids")
def ids(
    target: Annotated[
        str | None,
        Parameter(help="Builder to inspect, as module:attr or path.py:attr."),
    ] = None,
) -> None:
    """List section and group ids in depth-first order."""

    config = load_config(resolve_repo_root())
    emit(_resolve_builder(target, config).ids())


@config_app.command(name="show")
def config_show() -> None:
    """Show the resolved configuration."""

    emit(load_config(resolve_repo_root()))


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `promptstack` and `python -m promptstack`."""

    from promptstack.lib.logging import configure_logging

    args = list(sys.argv[1:] if argv is None else argv)
    cleaned_args, options = _extract_global_options(args)

    # Configure logging early so structlog output goes to stderr, not stdout.
    configure_logging(json_mode=options.output.format == "json", verbosity=options.verbosity)

    token = _GLOBAL_OPTIONS.set(options)
    try:
        try:
            app(cleaned_args)
        except (KeyError, ValueError, FileNotFoundError, OSError) as exc:
            logger.debug("command failed", exc_info=True)
            print(f"error: {exc}", file=sys.stderr)
            raise SystemExit(1) from None
    finally:
        _GLOBAL_OPTIONS.reset(token)
