"""Project config file storage."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pydantic

from rbxsync.domain.errors import ValidationError
from rbxsync.domain.model import (
    RESOURCE_ORDER,
    SPEC_TYPES,
    CodegenConfig,
    Creator,
    Experience,
    IconsConfig,
    ProjectConfig,
    ResourceType,
    fields_for,
)

from .schema import ConfigDocument
from .toml_write import dumps

if TYPE_CHECKING:
    from rbxsync.config import ProjectPaths
    from rbxsync.domain.model import ResourceSpec

log = getLogger(__name__)

CONFIG_HEADER = "rbxsync configuration"
_SECTIONS = frozenset(member.value for member in ResourceType)


def _validation_error(exc: pydantic.ValidationError) -> ValidationError:
    first = exc.errors()[0]
    location = [str(part) for part in first["loc"]]
    if len(location) > 1 and location[0] in _SECTIONS:
        key = f"{location[0]}.{location[1]}"
        field = ".".join(location[2:]) or None
    else:
        key = None
        field = ".".join(location) or None
    return ValidationError(first["msg"], key=key, field=field)


def config_from_document(document: ConfigDocument) -> ProjectConfig:
    experience = Experience(
        universe_id=document.experience.universe_id,
        creator=Creator(type=document.experience.creator.type, id=document.experience.creator.id),
    )
    paths = {
        resource_type: value
        for resource_type in RESOURCE_ORDER
        if (value := getattr(document.codegen.paths, resource_type.value)) is not None
    }
    config = ProjectConfig(
        experience=experience,
        codegen=CodegenConfig(
            output=document.codegen.output,
            typescript=document.codegen.typescript,
            style=document.codegen.style,
            paths=paths,
            extra=dict(document.codegen.extra),
        ),
        icons=IconsConfig(bleed=document.icons.bleed, dir=Path(document.icons.dir)),
    )
    for resource_type in RESOURCE_ORDER:
        spec_type = SPEC_TYPES[resource_type]
        for key, item in getattr(document, resource_type.value).items():
            config.put(spec_type(key=key, **item.model_dump()))
    return config


def _spec_table(spec: ResourceSpec) -> dict[str, Any]:
    table: dict[str, Any] = {}
    for field in fields_for(spec.resource_type):
        value = getattr(spec, field.name)
        if value is None or (field.default is not None and value == field.default):
            continue
        table[field.name] = value
    return table


def config_to_document(config: ProjectConfig) -> dict[str, Any]:
    creator = config.experience.creator
    document: dict[str, Any] = {
        "experience": {
            "universe_id": config.experience.universe_id,
            "creator": {"type": creator.type.value, "id": creator.id},
        },
    }
    codegen = config.codegen
    if codegen.output or codegen.paths or codegen.extra:
        section: dict[str, Any] = {
            "output": codegen.output,
            "typescript": codegen.typescript,
            "style": codegen.style.value,
        }
        if codegen.paths:
            section["paths"] = {
                resource_type.value: codegen.paths[resource_type]
                for resource_type in RESOURCE_ORDER
                if resource_type in codegen.paths
            }
        if codegen.extra:
            section["extra"] = dict(sorted(codegen.extra.items()))
        document["codegen"] = section
    document["icons"] = {"bleed": config.icons.bleed, "dir": config.icons.dir.as_posix()}
    for resource_type in RESOURCE_ORDER:
        specs = list(config.specs((resource_type,)))
        if specs:
            document[resource_type.value] = {spec.key: _spec_table(spec) for spec in specs}
    return document


def parse_config(text: str) -> ProjectConfig:
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ValidationError(f"invalid TOML: {exc}") from exc
    try:
        document = ConfigDocument.model_validate(raw)
    except pydantic.ValidationError as exc:
        raise _validation_error(exc) from exc
    return config_from_document(document)


def validate_icon_paths(config: ProjectConfig, paths: ProjectPaths) -> None:
    for spec in config.specs():
        if spec.icon is not None and not paths.resolve(spec.icon).is_file():
            raise ValidationError(
                f"icon file not found: {paths.resolve(spec.icon)}",
                key=f"{spec.resource_type.value}.{spec.key}",
                field="icon",
            )


@dataclass(slots=True)
class TomlConfigStore:
    """Read and write the project config file."""

    paths: ProjectPaths
    validate_icons: bool = True

    def exists(self) -> bool:
        return self.paths.config_path.is_file()

    def load(self) -> ProjectConfig:
        path = self.paths.config_path
        if not path.is_file():
            raise ValidationError(f"config file not found: {path} (run `rbxsync init`)")
        config = parse_config(path.read_text(encoding="utf-8"))
        if self.validate_icons:
            validate_icon_paths(config, self.paths)
        log.debug("Loaded config %s", path)
        return config

    def save(self, config: ProjectConfig) -> None:
        self.write_text(dumps(config_to_document(config), header=CONFIG_HEADER))

    def write_text(self, text: str) -> None:
        path = self.paths.config_path
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)
        log.debug("Wrote config %s", path)
