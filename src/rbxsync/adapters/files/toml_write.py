"""Small deterministic TOML writer.

Reading uses ``tomllib``. Writing only covers what rbxsync emits: tables,
strings, integers, floats, booleans, datetimes and flat arrays. ``None``
values are omitted and comments are not preserved.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

_BARE_KEY = re.compile(r"[A-Za-z0-9_-]+")


def toml_key(key: str) -> str:
    if not isinstance(key, str):
        raise TypeError("toml_key: keys must be strings")
    return key if _BARE_KEY.fullmatch(key) else toml_basic_string(key)


def toml_basic_string(value: str) -> str:
    """Quote as a TOML basic string; JSON escaping is a valid subset."""

    return json.dumps(value, ensure_ascii=False)


def toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, str):
        return toml_basic_string(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list | tuple):
        return "[" + ", ".join(toml_value(item) for item in value) + "]"
    raise TypeError(f"toml_value: unsupported type: {type(value).__name__}")


def _is_leaf_table(table: Mapping[str, Any]) -> bool:
    return not any(isinstance(value, Mapping) for value in table.values())


def _write_table(lines: list[str], path: tuple[str, ...], table: Mapping[str, Any]) -> None:
    scalars = [
        (key, value)
        for key, value in table.items()
        if value is not None and not isinstance(value, Mapping)
    ]
    if path and (scalars or _is_leaf_table(table)):
        if lines:
            lines.append("")
        lines.append("[" + ".".join(toml_key(part) for part in path) + "]")
    lines.extend(f"{toml_key(key)} = {toml_value(value)}" for key, value in scalars)

    for key, value in table.items():
        if isinstance(value, Mapping):
            _write_table(lines, (*path, key), value)


def dumps(document: Mapping[str, Any], *, header: str | None = None) -> str:
    """Render ``document`` in insertion order, tables after their scalars."""

    lines: list[str] = []
    _write_table(lines, (), document)
    text = "\n".join(lines) + "\n"
    if header:
        comment = "".join(f"# {line}\n" if line else "#\n" for line in header.splitlines())
        text = comment + "\n" + text
    return text
