"""Luau module emitter."""

from __future__ import annotations

from .tree import HEADER_TEXT, CodegenTree, is_identifier, quote

LUAU_RESERVED = frozenset(
    {
        "and", "break", "continue", "do", "else", "elseif", "end", "export", "false", "for",
        "function", "if", "in", "local", "nil", "not", "or", "repeat", "return", "then",
        "true", "type", "until", "while",
    }
)  # fmt: skip


def format_luau_key(key: str) -> str:
    return key if is_identifier(key, LUAU_RESERVED) else f"[{quote(key)}]"


def _render(lines: list[str], tree: CodegenTree, depth: int) -> None:
    indent = "\t" * depth
    for key in sorted(tree):
        value = tree[key]
        if isinstance(value, dict):
            lines.append(f"{indent}{format_luau_key(key)} = {{")
            _render(lines, value, depth + 1)
            lines.append(f"{indent}}},")
        else:
            lines.append(f"{indent}{format_luau_key(key)} = {value},")


def render_luau(tree: CodegenTree, *, module_name: str) -> str:
    lines = [f"-- {HEADER_TEXT}", "", f"local {module_name} = {{"]
    _render(lines, tree, 1)
    lines.extend(["}", "", f"return {module_name}", ""])
    return "\n".join(lines)
