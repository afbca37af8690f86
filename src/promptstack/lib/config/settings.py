"""Repository-level config loader for CLI renders."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from promptstack.lib.domain import PromptFormat

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = ".promptstack"
CONFIG_FILENAME = "config.toml"


def _empty_flags() -> Mapping[str, bool]:
    return cast("Mapping[str, bool]", {})


def _empty_vars() -> Mapping[str, Any]:
    return cast("Mapping[str, Any]", {})


@dataclass(frozen=True, slots=True)
class PromptstackConfig:
    """Resolved configuration for the promptstack CLI."""

    default_format: PromptFormat = PromptFormat.TEXT
    default_target: str | None = None
    flags: Mapping[str, bool] = field(default_factory=_empty_flags)
    vars: Mapping[str, Any] = field(default_factory=_empty_vars)


_ENV_OVERRIDE_MAP: dict[str, str] = {
    "PROMPTSTACK_DEFAULT_FORMAT": "default_format",
    "PROMPTSTACK_DEFAULT_TARGET": "default_target",
}


def config_path(repo_root: Path) -> Path:
    return repo_root / CONFIG_DIRNAME / CONFIG_FILENAME


def _coerce_format(*, raw_value: object, source: str) -> PromptFormat:
    if not isinstance(raw_value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    normalized = raw_value.strip().lower()
    try:
        return PromptFormat(normalized)
    except ValueError as error:
        raise ValueError(
            f"Invalid value for '{source}': expected one of "
            f"{sorted(member.value for member in PromptFormat)}, got {raw_value!r}."
        ) from error


def _coerce_target(*, raw_value: object, source: str) -> str:
    if not isinstance(raw_value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    normalized = raw_value.strip()
    if not normalized:
        raise ValueError(f"Invalid value for '{source}': expected non-empty string.")
    return normalized


def _coerce_flags(*, raw_value: object, source: str) -> dict[str, bool]:
    if not isinstance(raw_value, dict):
        raise ValueError(f"Invalid value for '{source}': expected table.")

    parsed: dict[str, bool] = {}
    for key, value in cast("dict[str, object]", raw_value).items():
        if not isinstance(value, bool):
            raise ValueError(
                f"Invalid value for '{source}.{key}': expected bool, got "
                f"{type(value).__name__} ({value!r})."
            )
        parsed[key] = value
    return parsed


def _coerce_vars(*, raw_value: object, source: str) -> dict[str, Any]:
    if not isinstance(raw_value, dict):
        raise ValueError(f"Invalid value for '{source}': expected table.")
    return dict(cast("dict[str, Any]", raw_value))


def _apply_toml_payload(values: dict[str, object], payload: dict[str, object]) -> None:
    for key, raw_value in payload.items():
        if key == "default_format":
            values["default_format"] = _coerce_format(raw_value=raw_value, source=key)
        elif key == "default_target":
            values["default_target"] = _coerce_target(raw_value=raw_value, source=key)
        elif key == "flags":
            values["flags"] = _coerce_flags(raw_value=raw_value, source=key)
        elif key == "vars":
            values["vars"] = _coerce_vars(raw_value=raw_value, source=key)
        else:
            logger.warning("Ignoring unknown promptstack config key '%s'.", key)


def _apply_env_overrides(values: dict[str, object]) -> None:
    for env_name, field_name in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        if field_name == "default_format":
            values[field_name] = _coerce_format(raw_value=raw_value, source=env_name)
        else:
            values[field_name] = _coerce_target(raw_value=raw_value, source=env_name)


def load_config(repo_root: Path) -> PromptstackConfig:
    """Load `.promptstack/config.toml` and apply environment overrides."""

    defaults = PromptstackConfig()
    values: dict[str, object] = {
        "default_format": defaults.default_format,
        "default_target": defaults.default_target,
        "flags": dict(defaults.flags),
        "vars": dict(defaults.vars),
    }
    path = config_path(repo_root)
    if path.is_file():
        payload = cast("dict[str, object]", tomllib.loads(path.read_text(encoding="utf-8")))
        _apply_toml_payload(values, payload)

    _apply_env_overrides(values)
    return PromptstackConfig(
        default_format=cast("PromptFormat", values["default_format"]),
        default_target=cast("str | None", values["default_target"]),
        flags=cast("dict[str, bool]", values["flags"]),
        vars=cast("dict[str, Any]", values["vars"]),
    )
