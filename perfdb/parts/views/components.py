from __future__ import annotations

import dataclasses
import enum
import uuid
from typing import List
from typing import Optional
from typing import Tuple

from perfdb.db.components import DatabasePart
from perfdb.db.components import PartType
from perfdb.exceptions import ViewAlreadyExists
from perfdb.utils.files import read_json
from perfdb.utils.files import write_json

STATE_FILE = 'view_state.json'


class DatasetType(enum.Enum):
    DATA = 'DATA'
    AVERAGE = 'AVERAGE'
    STD_DEV = 'STD_DEV'


@dataclasses.dataclass(frozen=True, order=True)
class ViewDataset:
    path: str
    type: DatasetType = DatasetType.DATA


@dataclasses.dataclass(frozen=True)
class View:
    """Named group of datasets, possibly from different tree nodes.

    Views are immutable, to change a view, replace it with a new one.
    """

    name: str
    datasets: Tuple[ViewDataset, ...] = ()
    uuid: uuid.UUID = dataclasses.field(default_factory=uuid.uuid4)

    def __eq__(self, other):
        if not isinstance(other, View):
            return NotImplemented
        return self.uuid == other.uuid

    def __hash__(self):
        return hash(self.uuid)

    def same_content(self, other: View) -> bool:
        return self.name == other.name and self.datasets == other.datasets

    @classmethod
    def load(cls, data: dict) -> View:
        return cls(
            name=data['name'],
            datasets=tuple(
                ViewDataset(d['path'], DatasetType(d['type']))
                for d in data.get('datasets', [])
            ),
            uuid=uuid.UUID(data['uuid']),
        )

    def dump(self) -> dict:
        return {
            'uuid': str(self.uuid),
            'name': self.name,
            'datasets': [
                {'path': d.path, 'type': d.type.value}
                for d in self.datasets
            ],
        }


class DiskViews(DatabasePart):
    """User defined views, stored in a single JSON file.

    Views have no hierarchy, view names must be unique.
    """

    type = PartType.VIEWS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._views: List[View] = []

    @property
    def state_file(self):
        return self.path / STATE_FILE

    def load_state(self):
        data = read_json(self.state_file, default=[])
        self._views = [View.load(v) for v in data]

    def save_state(self):
        write_json(self.state_file, [v.dump() for v in self._views])

    def get_all_views(self) -> List[View]:
        self.check_open()
        return list(self._views)

    def get_view(self, uuid_: uuid.UUID) -> Optional[View]:
        self.check_open()
        for view in self._views:
            if view.uuid == uuid_:
                return view
        return None

    def find_view(self, name: str) -> Optional[View]:
        self.check_open()
        for view in self._views:
            if view.name == name:
                return view
        return None

    def add_view(self, view: View) -> None:
        if self.find_view(view.name) is not None:
            raise ViewAlreadyExists(self, name=view.name)
        self._views.append(view)

    def replace_view(self, uuid_: uuid.UUID, view: View) -> None:
        original = self.get_view(uuid_)
        existing = self.find_view(view.name)
        if existing is not None and existing != original:
            raise ViewAlreadyExists(self, name=view.name)
        if original is not None:
            self.delete_view(original)
        self.add_view(view)

    def delete_view(self, view: View) -> bool:
        self.check_open()
        try:
            self._views.remove(view)
        except ValueError:
            return False
        return True
