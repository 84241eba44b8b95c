from __future__ import annotations

import dataclasses
from typing import Dict
from typing import List
from typing import Optional

from perfdb.db.components import DatabasePart
from perfdb.db.components import PartType
from perfdb.utils.files import read_json
from perfdb.utils.files import write_json

STATE_FILE = 'tree_filter_state.json'


@dataclasses.dataclass
class FilterData:
    """Report dates hidden from display for a tree node at `path`."""

    path: str
    filtered_dates: List[str] = dataclasses.field(default_factory=list)


class DiskFilters(DatabasePart):
    type = PartType.FILTERS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._filters: Dict[str, FilterData] = {}

    @property
    def state_file(self):
        return self.path / STATE_FILE

    def load_state(self):
        data = read_json(self.state_file, default=[])
        self._filters = {
            f['path']: FilterData(f['path'], list(f.get('filtered_dates', [])))
            for f in data
        }

    def save_state(self):
        write_json(self.state_file, [
            dataclasses.asdict(f)
            for f in self._filters.values()
        ])

    def get_filter_data(self) -> List[FilterData]:
        self.check_open()
        return list(self._filters.values())

    def get_filter_data_by_path(self, path: str, exact_match: bool = True) -> Optional[FilterData]:
        """Find filter data by node path.

        If `exact_match` is False, first filter data whose path ends with
        given `path` is returned.
        """
        self.check_open()
        if exact_match:
            return self._filters.get(path)
        if not path.strip():
            return None
        for data in self._filters.values():
            if data.path.endswith(path):
                return data
        return None

    def filter_dates(self, path: str, *dates: str) -> FilterData:
        self.check_open()
        data = self._filters.setdefault(path, FilterData(path))
        for date in dates:
            if date not in data.filtered_dates:
                data.filtered_dates.append(date)
        return data

    def unfilter_dates(self, path: str, *dates: str) -> Optional[FilterData]:
        self.check_open()
        data = self._filters.get(path)
        if data is None:
            return None
        data.filtered_dates = [d for d in data.filtered_dates if d not in dates]
        if not data.filtered_dates:
            del self._filters[path]
        return data
