"""Project configuration model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rbxsync.domain.errors import ValidationError

from .enums import CodegenStyle, CreatorType, ResourceType
from .resources import RESOURCE_ORDER, ResourceKey, ResourceSpec, validate_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(slots=True, frozen=True, kw_only=True)
class Creator:
    type: CreatorType = CreatorType.USER
    id: int = 0

    @property
    def payment_source_type(self) -> int:
        return 2 if self.type is CreatorType.GROUP else 1


@dataclass(slots=True, frozen=True, kw_only=True)
class Experience:
    universe_id: int
    creator: Creator = field(default_factory=Creator)


@dataclass(slots=True, frozen=True, kw_only=True)
class CodegenConfig:
    output: str | None = None
    typescript: bool = False
    style: CodegenStyle = CodegenStyle.FLAT
    paths: dict[ResourceType, str] = field(default_factory=dict)
    extra: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True, frozen=True, kw_only=True)
class IconsConfig:
    bleed: bool = True
    dir: Path = Path("icons")


@dataclass(slots=True, kw_only=True)
class ProjectConfig:
    """Everything declared in the project config file."""

    experience: Experience
    codegen: CodegenConfig = field(default_factory=CodegenConfig)
    icons: IconsConfig = field(default_factory=IconsConfig)
    resources: dict[ResourceType, dict[str, ResourceSpec]] = field(
        default_factory=lambda: {resource_type: {} for resource_type in RESOURCE_ORDER}
    )

    def get(self, key: ResourceKey) -> ResourceSpec | None:
        return self.resources.get(key.resource_type, {}).get(key.key)

    def put(self, spec: ResourceSpec) -> None:
        self.resources.setdefault(spec.resource_type, {})[spec.key] = spec

    def specs(self, types: Iterable[ResourceType] | None = None) -> Iterator[ResourceSpec]:
        wanted = set(types) if types is not None else set(RESOURCE_ORDER)
        for resource_type in RESOURCE_ORDER:
            if resource_type not in wanted:
                continue
            bucket = self.resources.get(resource_type, {})
            for key in sorted(bucket):
                yield bucket[key]

    def rename(self, resource_type: ResourceType, old_key: str, new_key: str) -> ResourceSpec:
        """Move ``old_key`` to ``new_key`` keeping the display name stable."""

        validate_key(new_key)
        bucket = self.resources.setdefault(resource_type, {})
        if old_key not in bucket:
            raise ValidationError(f"no {resource_type.label} named {old_key!r}", key=old_key)
        if new_key in bucket:
            raise ValidationError(f"{resource_type.label} {new_key!r} already exists", key=new_key)
        renamed = bucket.pop(old_key).renamed(new_key)
        bucket[new_key] = renamed
        return renamed
