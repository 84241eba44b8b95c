from __future__ import annotations

import enum
from typing import Dict
from typing import List
from typing import Optional

from perfdb import commands


class ElementCategory(enum.Enum):
    """Kinds of performance report elements, value is the XML tag name."""

    report = 'performance-report'
    timing = 'timing'
    metric = 'metric'
    metadata = 'metadata'


class Element:
    """A single node of a deserialized performance report.

    `category`, `name`, `date` and `units` are fixed at construction time,
    `attributes` and `children` are filled while a report is being read.

    Metadata elements keep their key in `name` and their value in `value`,
    they never have attributes.

    Two elements are equal if their own fields and attributes are equal,
    children are not compared, use `same_tree` for that.
    """

    attributes: Dict[str, float]
    children: List[Element]
    value: str = ''

    def __init__(
        self,
        category: ElementCategory,
        name: str = '',
        date: str = '',
        units: str = '',
        *,
        value: str = '',
    ):
        self._category = ElementCategory(category)
        self._name = name
        self._date = date
        self._units = units
        self.value = value
        self.attributes = {}
        self.children = []

    def __repr__(self):
        return (
            f'<{self.__class__.__name__}({self._category.name}, '
            f'name={self._name!r}, date={self._date!r}) '
            f'at 0x{id(self):02x}>'
        )

    def __eq__(self, other):
        if not isinstance(other, Element):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((
            self._category,
            self._name,
            self._date,
            self._units,
            self.value,
            frozenset(self.attributes.items()),
        ))

    @property
    def category(self) -> ElementCategory:
        return self._category

    @property
    def type(self) -> str:
        return self._category.name

    @property
    def name(self) -> str:
        return self._name

    @property
    def date(self) -> str:
        return self._date

    @property
    def units(self) -> str:
        return self._units

    def add_child(self, child: Element) -> Element:
        self.children.append(child)
        return child

    def get_children(self, category: Optional[ElementCategory] = None) -> List[Element]:
        if category is None:
            return list(self.children)
        category = ElementCategory(category)
        return [c for c in self.children if c.category is category]

    def get_metadata(self) -> Dict[str, str]:
        return {
            c.name: c.value
            for c in self.get_children(ElementCategory.metadata)
        }

    def dump(self) -> dict:
        data = {
            'category': self._category.value,
            'name': self._name,
            'date': self._date,
            'units': self._units,
        }
        if self._category is ElementCategory.metadata:
            data['value'] = self.value
        else:
            data['attributes'] = dict(self.attributes)
        data['children'] = [c.dump() for c in self.children]
        return data

    def same_tree(self, other: Element) -> bool:
        if self != other or len(self.children) != len(other.children):
            return False
        return all(a.same_tree(b) for a, b in zip(self.children, other.children))

    def _key(self):
        return (
            self._category,
            self._name,
            self._date,
            self._units,
            self.value,
            self.attributes,
        )


@commands.get_error_context.register(Element)
def get_error_context(element: Element):
    return {
        'element': 'this.category.value',
        'name': 'this.name',
    }
