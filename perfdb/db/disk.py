from __future__ import annotations

import logging
import pathlib
from typing import Dict
from typing import Optional
from typing import Union

from perfdb import commands
from perfdb.components import Config
from perfdb.components import Context
from perfdb.db.components import DatabaseAccessor
from perfdb.db.components import DatabasePart
from perfdb.db.components import PartType
from perfdb.exceptions import DirectoryCreationFailure
from perfdb.exceptions import InvalidPartType
from perfdb.exceptions import PartTypeMismatch
from perfdb.utils.imports import full_class_name

log = logging.getLogger(__name__)


class DiskDatabaseAccessor(DatabaseAccessor):
    """Database emulated with plain directories and files.

    Each part type gets its own directory under `path`, directories and part
    objects are created lazily, on first access, and there is at most one
    part object per type.

    One accessor is meant to be used by one job at a time, concurrent writers
    to the same `path` must be serialized by the caller.
    """

    def __init__(
        self,
        context: Context,
        path: Union[str, pathlib.Path],
        journal: logging.Logger = None,
    ):
        self.context = context
        self.path = pathlib.Path(path)
        # Shared by all parts of this database.
        self.log = journal or log
        self._parts: Dict[PartType, DatabasePart] = {}

    def __repr__(self):
        return (
            f'<{self.__class__.__module__}.{self.__class__.__name__}'
            f'(path={str(self.path)!r}) at 0x{id(self):02x}>'
        )

    @property
    def config(self) -> Config:
        return self.context.get('config')

    def get_part(self, type_: Union[PartType, str]) -> Optional[DatabasePart]:
        return self._get_part(type_, open_=False)

    def get_and_open_part(self, type_: Union[PartType, str]) -> Optional[DatabasePart]:
        return self._get_part(type_, open_=True)

    def set_part(
        self,
        type_: Union[PartType, str],
        part: DatabasePart,
        *,
        strict: bool = False,
    ) -> None:
        type_ = self._get_part_type(type_)
        if type_ is None:
            return
        expected = self.config.parts[type_]
        if isinstance(part, expected):
            self._parts[type_] = part
        elif strict:
            raise PartTypeMismatch(
                part=type_.value,
                given=full_class_name(part),
                expected=full_class_name(expected),
            )
        else:
            self.log.warning(
                "Ignoring %s given as %s database part of %s, expected %s.",
                full_class_name(part), type_.value, self.path,
                full_class_name(expected),
            )

    def get_part_path(self, type_: PartType) -> pathlib.Path:
        return self.path / self.config.dirnames[type_]

    def close_all(self) -> bool:
        """Close all open parts, return False if any of them failed to close."""
        closed = True
        for part in self._parts.values():
            if part.is_open():
                closed = part.close() and closed
        return closed

    def _get_part_type(self, type_: Union[PartType, str]) -> Optional[PartType]:
        if isinstance(type_, PartType):
            return type_
        if isinstance(type_, str):
            try:
                return PartType(type_)
            except ValueError:
                pass
        self.log.warning("%s", InvalidPartType(part=type_, root=self.path))
        return None

    def _get_part(self, type_: Union[PartType, str], open_: bool) -> Optional[DatabasePart]:
        type_ = self._get_part_type(type_)
        if type_ is None:
            return None

        path = self.get_part_path(type_)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = DirectoryCreationFailure(part=type_.value, path=path, root=self.path, error=e)
            self.log.error("%s", error)
            return None

        part = self._parts.get(type_)
        if part is None:
            Part = self.config.parts[type_]
            part = Part(self, path, self.log)
            commands.load(self.context, part, self.config.rc)
            self._parts[type_] = part

        if open_ and not part.is_open():
            part.open()
        return part
