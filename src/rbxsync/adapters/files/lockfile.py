"""Lockfile storage and its unit of work."""

from __future__ import annotations

import tomllib
from logging import getLogger
from typing import TYPE_CHECKING, Any

import pydantic

from rbxsync.domain.errors import ConsistencyError
from rbxsync.domain.model import (
    LOCKFILE_VERSION,
    RESOURCE_ORDER,
    LockEntry,
    Lockfile,
    ResourceKey,
    remote_field_names,
)

from .schema import LockEntryDocument, LockfileDocument
from .toml_write import dumps

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

log = getLogger(__name__)

LOCKFILE_HEADER = "This file is generated by rbxsync. Manual edits are tolerated."


def _entry_from_document(names: tuple[str, ...], item: LockEntryDocument) -> LockEntry:
    values = item.model_dump()
    return LockEntry(
        id=item.id,
        fields={name: values[name] for name in names if values[name] is not None},
        icon_hash=item.icon_hash,
        icon_asset_id=item.icon_asset_id,
        synced_at=item.synced_at,
    )


def parse_lockfile(text: str) -> Lockfile:
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConsistencyError(f"lockfile is not valid TOML: {exc}") from exc
    try:
        document = LockfileDocument.model_validate(raw)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ConsistencyError(f"lockfile entry {location}: {first['msg']}") from exc
    if document.version > LOCKFILE_VERSION:
        raise ConsistencyError(
            f"lockfile version {document.version} is newer than supported ({LOCKFILE_VERSION})"
        )

    lockfile = Lockfile(version=LOCKFILE_VERSION, universe_id=document.universe_id)
    for resource_type in RESOURCE_ORDER:
        names = remote_field_names(resource_type)
        for key, item in getattr(document, resource_type.value).items():
            lockfile.put(ResourceKey(resource_type, key), _entry_from_document(names, item))
    return lockfile


def lockfile_to_document(lockfile: Lockfile) -> dict[str, Any]:
    document: dict[str, Any] = {"version": lockfile.version, "universe_id": lockfile.universe_id}
    for resource_type in RESOURCE_ORDER:
        section: dict[str, Any] = {}
        for key in lockfile.keys(resource_type):
            entry = lockfile.get(key)
            if entry is None:
                continue
            table: dict[str, Any] = {"id": entry.id}
            table.update(
                (name, entry.fields[name])
                for name in remote_field_names(resource_type)
                if name in entry.fields
            )
            table["icon_asset_id"] = entry.icon_asset_id
            table["icon_hash"] = entry.icon_hash
            table["synced_at"] = entry.synced_at
            section[key.key] = table
        if section:
            document[resource_type.value] = section
    return document


def load_lockfile(path: Path) -> Lockfile:
    """Load ``path``; a missing file is an empty lockfile."""

    if not path.is_file():
        return Lockfile()
    return parse_lockfile(path.read_text(encoding="utf-8"))


def save_lockfile(path: Path, lockfile: Lockfile) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    text = dumps(lockfile_to_document(lockfile), header=LOCKFILE_HEADER)
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


class TomlLockfileUnitOfWork:
    """Lockfile unit of work writing through to disk on every commit."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lockfile: Lockfile | None = None

    @property
    def lockfile(self) -> Lockfile:
        if self._lockfile is None:
            raise RuntimeError("Lockfile unit of work used outside of its context")
        return self._lockfile

    def __enter__(self) -> TomlLockfileUnitOfWork:
        self._lockfile = load_lockfile(self.path)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self.rollback()
        self._lockfile = None
        return False

    def commit(self) -> None:
        save_lockfile(self.path, self.lockfile)
        log.debug("Committed lockfile %s (%d entries)", self.path, len(self.lockfile))

    def rollback(self) -> None:
        """Discard uncommitted in-memory changes by reloading the last committed state."""

        self._lockfile = load_lockfile(self.path)
