"""TypeScript declaration emitter for roblox-ts projects."""

from __future__ import annotations

from .tree import HEADER_TEXT, CodegenTree, is_identifier, quote

TS_RESERVED = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger", "default",
        "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
        "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
        "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
    }
)  # fmt: skip


def format_ts_key(key: str) -> str:
    return key if is_identifier(key, TS_RESERVED) else quote(key)


def _render(lines: list[str], tree: CodegenTree, depth: int) -> None:
    indent = "\t" * depth
    for key in sorted(tree):
        value = tree[key]
        if isinstance(value, dict):
            lines.append(f"{indent}{format_ts_key(key)}: {{")
            _render(lines, value, depth + 1)
            lines.append(f"{indent}}};")
        else:
            lines.append(f"{indent}{format_ts_key(key)}: number;")


def render_typescript(tree: CodegenTree, *, module_name: str) -> str:
    lines = [f"// {HEADER_TEXT}", "", f"declare const {module_name}: {{"]
    _render(lines, tree, 1)
    lines.extend(["};", "", f"export = {module_name};", ""])
    return "\n".join(lines)
