from __future__ import annotations

import enum
import logging
import pathlib
from typing import Optional
from typing import Union

from perfdb import commands
from perfdb.exceptions import PartNotOpen

log = logging.getLogger(__name__)


class PartType(enum.Enum):
    """Sections of a performance database, each is stored separately."""

    # Time series of measurements, one directory per report element.
    TREE = 'tree'

    # User defined views, grouping datasets from different tree nodes.
    VIEWS = 'views'

    # Dates hidden from display, per tree node.
    FILTERS = 'filters'


class DatabasePart:
    """A single, independently opened and closed section of a database.

    A part owns one directory for its whole lifetime. Reading or writing data
    is only allowed while the part is open, otherwise `PartNotOpen` is
    raised.

    Subclasses implement `load_state` and `save_state`, which are called by
    `open` and `close`.
    """

    type: PartType

    def __init__(
        self,
        parent: Optional[DatabaseAccessor],
        path: Union[str, pathlib.Path],
        log: logging.Logger = None,
    ):
        self._parent = parent
        self._path = pathlib.Path(path)
        self._open = False
        self.log = log or logging.getLogger(type(self).__module__)

    def __repr__(self):
        return (
            f'<{self.__class__.__module__}.{self.__class__.__name__}'
            f'(path={str(self._path)!r}, open={self._open}) at 0x{id(self):02x}>'
        )

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def open(self) -> bool:
        if self._open:
            return True
        try:
            self._path.mkdir(parents=True, exist_ok=True)
            self.load_state()
        except (OSError, ValueError, KeyError, TypeError, AttributeError):
            # Unreadable or malformed state file.
            self.log.exception(
                "Can't open %s database part at %s.",
                self.type.value, self._path,
            )
            return False
        self._open = True
        self.log.debug("Opened %s database part at %s.", self.type.value, self._path)
        return True

    def close(self) -> bool:
        if not self._open:
            return True
        try:
            self.save_state()
        except OSError:
            self.log.exception(
                "Can't close %s database part at %s.",
                self.type.value, self._path,
            )
            return False
        self._open = False
        self.log.debug("Closed %s database part at %s.", self.type.value, self._path)
        return True

    def is_open(self) -> bool:
        return self._open

    def get_parent_database(self) -> Optional[DatabaseAccessor]:
        return self._parent

    def check_open(self):
        if not self._open:
            raise PartNotOpen(self)

    def load_state(self):
        raise NotImplementedError

    def save_state(self):
        raise NotImplementedError


class DatabaseAccessor:
    """Gives access to parts of a database.

    Storage used for parts is invisible to the callers, they only see
    `DatabasePart` objects.
    """

    def get_part(self, type_: PartType) -> Optional[DatabasePart]:
        raise NotImplementedError

    def get_and_open_part(self, type_: PartType) -> Optional[DatabasePart]:
        raise NotImplementedError

    def set_part(self, type_: PartType, part: DatabasePart) -> None:
        raise NotImplementedError


@commands.get_error_context.register(DatabasePart)
def get_error_context(part: DatabasePart):
    return {
        'part': 'this.type.value',
        'path': 'this.path',
    }
