"""Resolve `module:attr` or `file.py:attr` targets to a `PromptBuilder`."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import structlog

from promptstack.lib.prompt.builder import PromptBuilder

logger = structlog.get_logger(__name__)


class BuilderTargetError(ValueError):
    """A builder target could not be resolved."""


def _split_target(target: str) -> tuple[str, str]:
    location, separator, attribute = target.strip().rpartition(":")
    if not separator or not location or not attribute:
        raise BuilderTargetError(
            f"Invalid builder target '{target}'. Expected 'module:attr' or 'path.py:attr'."
        )
    return location, attribute


def _load_file_module(path: Path) -> ModuleType:
    if not path.is_file():
        raise BuilderTargetError(f"Builder module file not found: {path}")
    fingerprint = hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:16]
    module_name = f"_promptstack_target_{path.stem}_{fingerprint}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise BuilderTargetError(f"Cannot import builder module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def _load_module(location: str, base_dir: Path) -> ModuleType:
    if location.endswith(".py"):
        candidate = Path(location).expanduser()
        path = candidate if candidate.is_absolute() else base_dir / candidate
        return _load_file_module(path.resolve())
    # Console scripts do not put the working directory on sys.path.
    search_path = str(base_dir)
    added = search_path not in sys.path
    if added:
        sys.path.insert(0, search_path)
    try:
        return importlib.import_module(location)
    except ModuleNotFoundError as exc:
        raise BuilderTargetError(f"Builder module '{location}' not found: {exc}") from exc
    finally:
        if added:
            sys.path.remove(search_path)


def load_builder(target: str, *, base_dir: Path | None = None) -> PromptBuilder:
    """Load the builder named by `target`.

    The attribute may be a `PromptBuilder` or a zero-argument callable that
    returns one.
    """

    location, attribute = _split_target(target)
    root = (base_dir or Path.cwd()).resolve()
    module = _load_module(location, root)

    try:
        value = getattr(module, attribute)
    except AttributeError as exc:
        raise BuilderTargetError(f"Module '{location}' has no attribute '{attribute}'") from exc

    if not isinstance(value, PromptBuilder) and callable(value):
        value = value()
    if not isinstance(value, PromptBuilder):
        raise BuilderTargetError(
            f"Target '{target}' resolved to {type(value).__name__}, expected PromptBuilder."
        )

    logger.debug("builder loaded", target=target, nodes=len(value.nodes))
    return value
