"""CLI output formatting utilities."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal, cast

from promptstack.lib.formatting import FormatContext, TextFormattable
from promptstack.lib.serialization import to_jsonable

OutputFormat = Literal["text", "json"]
type JSONScalar = str | int | float | bool | None
type JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_DEFAULT_FORMAT_CTX = FormatContext()


@dataclass(frozen=True, slots=True)
class OutputConfig:
    format: OutputFormat


def _to_json_value(value: Any) -> JSONValue:
    return cast("JSONValue", to_jsonable(value))


def emit(value: Any, config: OutputConfig) -> None:
    """Emit one payload according to the configured output mode."""

    if config.format == "json":
        print(json.dumps(_to_json_value(value), sort_keys=True))
        return
    if isinstance(value, str):
        print(value)
        return
    if isinstance(value, TextFormattable):
        print(value.format_text(_DEFAULT_FORMAT_CTX))
        return
    if isinstance(value, Sequence):
        for item in cast("Sequence[object]", value):
            print(item)
        return
    print(json.dumps(_to_json_value(value), sort_keys=True, indent=2))
