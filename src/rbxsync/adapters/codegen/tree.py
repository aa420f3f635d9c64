"""Shared helpers for the codegen emitters."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from rbxsync.domain.model import CodegenStyle

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rbxsync.domain.codegen import CodegenEntry

type CodegenTree = dict[str, CodegenTree | int]

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

HEADER_TEXT = "This file is auto-generated by rbxsync. Do not edit manually."


def is_identifier(key: str, reserved: frozenset[str]) -> bool:
    return _IDENTIFIER.fullmatch(key) is not None and key not in reserved


def quote(key: str) -> str:
    escaped = key.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_tree(entries: Iterable[CodegenEntry], style: CodegenStyle) -> CodegenTree:
    """Arrange mapped entries as the table structure to emit.

    Flat style keeps one top-level key per entry; nested style turns every path
    segment into a table level. Path collisions were rejected by the mapper.
    """

    tree: CodegenTree = {}
    for entry in entries:
        if style is CodegenStyle.FLAT:
            tree[entry.dotted] = entry.value
            continue
        node = tree
        for segment in entry.path[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ValueError(f"codegen path {entry.dotted!r} nests under a value")
            node = child
        node[entry.path[-1]] = entry.value
    return tree
