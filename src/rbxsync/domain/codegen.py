"""Map synced resources to codegen output paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rbxsync.domain.errors import ValidationError
from rbxsync.domain.model import CodegenStyle

if TYPE_CHECKING:
    from rbxsync.domain.model import Lockfile, ProjectConfig, ResourceSpec


@dataclass(slots=True, frozen=True, order=True)
class CodegenEntry:
    path: tuple[str, ...]
    value: int
    source: str

    @property
    def dotted(self) -> str:
        return ".".join(self.path)


def split_path(dotted: str, *, source: str) -> tuple[str, ...]:
    segments = tuple(dotted.split("."))
    if not dotted or any(not segment for segment in segments):
        raise ValidationError(f"invalid codegen path {dotted!r}", key=source, field="path")
    return segments


def _spec_path(config: ProjectConfig, spec: ResourceSpec) -> tuple[str, ...]:
    type_default = config.codegen.paths.get(spec.resource_type)
    base = spec.path or type_default or spec.resource_type.value
    return (*split_path(base, source=str(spec.resource_key)), spec.key)


def _extra_entries(config: ProjectConfig) -> list[CodegenEntry]:
    entries: list[CodegenEntry] = []
    for dotted, value in config.codegen.extra.items():
        source = f"extra '{dotted}'"
        path = split_path(dotted, source=source)
        entries.append(CodegenEntry(path=path, value=value, source=source))
    return entries


def map_codegen_paths(config: ProjectConfig, lockfile: Lockfile) -> list[CodegenEntry]:
    """Resolve every declared, synced resource and every extra to an output path.

    Per-item ``path`` wins over the ``[codegen.paths]`` default for its type,
    which wins over the type name; the resource key is always appended.
    """

    entries: list[CodegenEntry] = []
    for spec in config.specs():
        entry = lockfile.get(spec.resource_key)
        if entry is None:
            continue
        entries.append(
            CodegenEntry(
                path=_spec_path(config, spec), value=entry.id, source=str(spec.resource_key)
            )
        )
    entries.extend(_extra_entries(config))
    entries.sort()
    _check_collisions(entries, style=config.codegen.style)
    return entries


def check_codegen_paths(config: ProjectConfig) -> None:
    """Validate the paths every declared resource will have once it is synced."""

    entries = [
        CodegenEntry(path=_spec_path(config, spec), value=0, source=str(spec.resource_key))
        for spec in config.specs()
    ]
    entries.extend(_extra_entries(config))
    entries.sort()
    _check_collisions(entries, style=config.codegen.style)


def _check_collisions(entries: list[CodegenEntry], *, style: CodegenStyle) -> None:
    seen: dict[tuple[str, ...], CodegenEntry] = {}
    for entry in entries:
        previous = seen.get(entry.path)
        if previous is not None:
            raise ValidationError(
                f"codegen path {entry.dotted!r} is also produced by {previous.source}",
                key=entry.source,
                field="path",
            )
        seen[entry.path] = entry

    if style is not CodegenStyle.NESTED:
        return
    for entry in entries:
        for depth in range(1, len(entry.path)):
            prefix = seen.get(entry.path[:depth])
            if prefix is not None:
                raise ValidationError(
                    f"codegen path {entry.dotted!r} nests under value {prefix.dotted!r} "
                    f"from {prefix.source}",
                    key=entry.source,
                    field="path",
                )
