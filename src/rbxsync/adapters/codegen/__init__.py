"""Write generated Luau and TypeScript id modules."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .luau import format_luau_key, render_luau
from .tree import build_tree
from .typescript import format_ts_key, render_typescript

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rbxsync.domain.codegen import CodegenEntry
    from rbxsync.domain.model import CodegenConfig

log = getLogger(__name__)


def typescript_path(output: Path) -> Path:
    """``Ids.luau`` -> ``Ids.d.ts``."""

    return output.with_name(f"{output.stem}.d.ts")


def write_codegen(
    entries: Sequence[CodegenEntry],
    codegen: CodegenConfig,
    *,
    output: Path,
) -> list[Path]:
    """Render ``entries`` and write the Luau module, plus typings when enabled."""

    tree = build_tree(entries, codegen.style)
    module_name = output.stem or "Assets"
    written = [output]
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_luau(tree, module_name=module_name), encoding="utf-8")
    if codegen.typescript:
        ts_output = typescript_path(output)
        ts_output.write_text(render_typescript(tree, module_name=module_name), encoding="utf-8")
        written.append(ts_output)
    log.info("Wrote %d codegen entries to %s", len(entries), ", ".join(map(str, written)))
    return written


__all__ = [
    "build_tree",
    "format_luau_key",
    "format_ts_key",
    "render_luau",
    "render_typescript",
    "typescript_path",
    "write_codegen",
]
