from __future__ import annotations

import dataclasses
import hashlib
import json
import re
import statistics
import urllib.parse
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Set

from perfdb.db.components import DatabasePart
from perfdb.db.components import PartType
from perfdb.reports.components import Element
from perfdb.reports.components import ElementCategory
from perfdb.utils.files import read_json
from perfdb.utils.files import write_json

RECORD_FILE = 'record.json'
STATE_FILE = 'tree_state.json'

ROOT_PATH = ''
SEPARATOR = '/'

# Names that can't be used as node directory names.
RESERVED_NAMES = {'.', '..', RECORD_FILE, STATE_FILE}


@dataclasses.dataclass
class MomentTuple:
    value: float
    # Rolling average and standard deviation, calculated when tree is closed.
    average: Optional[float] = None
    std: Optional[float] = None


@dataclasses.dataclass
class NodeData:
    units: str = ''
    moments: Dict[str, MomentTuple] = dataclasses.field(default_factory=dict)
    metadata: Dict[str, str] = dataclasses.field(default_factory=dict)

    @classmethod
    def load(cls, data: dict) -> NodeData:
        return cls(
            units=data.get('units', ''),
            moments={
                k: MomentTuple(**v)
                for k, v in data.get('moments', {}).items()
            },
            metadata=dict(data.get('metadata', {})),
        )


@dataclasses.dataclass
class OneLevelTree:
    """Measurements of a single report element over time.

    `nodes` maps report dates to measurements taken on that date.
    """

    name: str
    path: str
    category: str
    nodes: Dict[str, NodeData] = dataclasses.field(default_factory=dict)

    @classmethod
    def load(cls, data: dict) -> OneLevelTree:
        return cls(
            name=data['name'],
            path=data['path'],
            category=data['category'],
            nodes={
                date: NodeData.load(node)
                for date, node in data.get('nodes', {}).items()
            },
        )

    def dump(self) -> dict:
        data = dataclasses.asdict(self)
        data['nodes'] = dict(sorted(data['nodes'].items()))
        return data

    def is_empty(self, measurable: str = None) -> bool:
        """Check if there are no measurements (of `measurable`, if given)."""
        for node in self.nodes.values():
            if not measurable:
                if node.moments:
                    return False
            elif measurable in node.moments:
                return False
        return True


def quote_name(name: str) -> str:
    """Turn element name into a single, safe path segment."""
    segment = urllib.parse.quote(name, safe=' ')
    if segment in RESERVED_NAMES:
        segment = segment.replace('.', '%2E')
    return segment


def join_path(*segments: str) -> str:
    return SEPARATOR.join(s for s in segments if s)


def report_digest(report: Element) -> str:
    data = json.dumps(report.dump(), sort_keys=True)
    return hashlib.md5(data.encode('utf-8')).hexdigest()


class DiskTree(DatabasePart):
    """Time series of report measurements stored as a directory tree.

    Each named report element gets a directory, nested the same way as
    elements are nested in reports, with a `record.json` file holding all
    measurements of that element, by report date.
    """

    type = PartType.TREE

    rolling_range: int = 30
    default_units: str = ''

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._cache: Dict[str, OneLevelTree] = {}
        self._altered: Set[str] = set()
        self._digests: Set[str] = set()
        self.min_date: Optional[str] = None
        self.max_date: Optional[str] = None

    @property
    def state_file(self):
        return self.path / STATE_FILE

    def load_state(self):
        state = read_json(self.state_file, default={})
        self._digests = set(state.get('reports', []))
        self.min_date = None
        self.max_date = None

    def save_state(self):
        self._recalculate(self._altered)
        write_json(self.state_file, {
            'reports': sorted(self._digests),
        })
        self._altered.clear()
        self._cache.clear()

    def add_report(self, report: Element) -> bool:
        """Add all measurements of a report to the tree.

        Returns False if the same report was already added before.
        """
        self.check_open()
        if report.category is not ElementCategory.report:
            raise ValueError(f"Expected a performance report, got {report!r}.")

        digest = report_digest(report)
        if digest in self._digests:
            self.log.info(
                "Performance report %r (date: %r) is already in %s, skipping.",
                report.name, report.date, self.path,
            )
            return False

        date = report.date
        if self.min_date is None or date < self.min_date:
            self.min_date = date
        if self.max_date is None or date > self.max_date:
            self.max_date = date

        self._add_node(ROOT_PATH, report, date)
        for child in report.children:
            self._add_element(child, date, ROOT_PATH)

        self._digests.add(digest)
        return True

    def get_node_at(self, path: str) -> Optional[OneLevelTree]:
        self.check_open()
        return self._read(path.strip(SEPARATOR))

    def get_root_node(self) -> Optional[OneLevelTree]:
        return self.get_node_at(ROOT_PATH)

    def get_parent_at(self, path: str) -> Optional[OneLevelTree]:
        path = path.strip(SEPARATOR)
        if path == ROOT_PATH:
            return None
        return self.get_node_at(path.rpartition(SEPARATOR)[0])

    def get_children_at(
        self,
        path: str,
        prefer_descendants: bool = False,
        measurable: str = '',
    ) -> List[OneLevelTree]:
        """Return child nodes of a node at `path`.

        With `prefer_descendants`, children without data for `measurable`
        are replaced with their own children, recursively.
        """
        self.check_open()
        path = path.strip(SEPARATOR)
        result = []
        for child_path in self._child_paths(path):
            child = self._read(child_path)
            if child is None:
                continue
            if not prefer_descendants or not child.is_empty(measurable):
                result.append(child)
            else:
                result.extend(self.get_children_at(child_path, True, measurable))
        return result

    def search(
        self,
        pattern: str,
        start: str = ROOT_PATH,
        recursive: bool = True,
        include_empty: bool = False,
    ) -> List[OneLevelTree]:
        """Find nodes whose name or path fully matches a regular expression."""
        regex = re.compile(pattern)
        found = []
        for child in self.get_children_at(start):
            matches = regex.fullmatch(child.path) or regex.fullmatch(child.name)
            if matches and (include_empty or not child.is_empty()):
                found.append(child)
            if recursive:
                found.extend(self.search(pattern, child.path, True, include_empty))
        return found

    def iter_nodes(self, path: str = ROOT_PATH) -> Iterator[OneLevelTree]:
        self.check_open()
        node = self._read(path)
        if node is not None:
            yield node
        for child_path in self._child_paths(path):
            yield from self.iter_nodes(child_path)

    def _child_paths(self, path: str) -> List[str]:
        directory = self._node_dir(path)
        if not directory.is_dir():
            return []
        return [
            join_path(path, child.name)
            for child in sorted(directory.iterdir())
            if child.is_dir()
        ]

    def _add_element(self, element: Element, date: str, parent: str):
        if element.category is ElementCategory.metadata:
            return
        if not element.name:
            self.log.warning(
                "A %s element at date %r under %r has no name, skipping it.",
                element.category.value, date, parent or SEPARATOR,
            )
            return
        path = join_path(parent, quote_name(element.name))
        self._add_node(path, element, date)
        for child in element.children:
            self._add_element(child, date, path)

    def _add_node(self, path: str, element: Element, date: str):
        tree = self._read(path)
        if tree is None:
            tree = OneLevelTree(
                name=element.name,
                path=path,
                category=element.category.value,
            )
        tree.nodes[date] = NodeData(
            units=element.units or self.default_units,
            moments={k: MomentTuple(v) for k, v in element.attributes.items()},
            metadata=element.get_metadata(),
        )
        self._write(tree)
        self._altered.add(path)

    def _node_dir(self, path: str):
        if path == ROOT_PATH:
            return self.path
        return self.path.joinpath(*path.split(SEPARATOR))

    def _read(self, path: str) -> Optional[OneLevelTree]:
        if path in self._cache:
            return self._cache[path]
        data = read_json(self._node_dir(path) / RECORD_FILE)
        if data is None:
            return None
        tree = OneLevelTree.load(data)
        self._cache[path] = tree
        return tree

    def _write(self, tree: OneLevelTree):
        self._cache[tree.path] = tree
        write_json(self._node_dir(tree.path) / RECORD_FILE, tree.dump())

    def _recalculate(self, paths: Set[str]):
        if self.min_date is None or self.max_date is None:
            return
        for path in sorted(paths):
            tree = self._read(path)
            if tree is None:
                continue
            dates = sorted(tree.nodes)
            for i, date in enumerate(dates):
                if not self.min_date <= date <= self.max_date:
                    continue
                node = tree.nodes[date]
                for name, moment in node.moments.items():
                    values = [
                        tree.nodes[d].moments[name].value
                        for d in dates[:i + 1]
                        if name in tree.nodes[d].moments
                    ]
                    if self.rolling_range > 0:
                        values = values[-self.rolling_range:]
                    moment.average = statistics.fmean(values)
                    moment.std = statistics.pstdev(values)
            self._write(tree)
