from __future__ import annotations

import io
import logging
import pathlib
from typing import BinaryIO
from typing import List
from typing import Mapping
from typing import Optional
from typing import Union

from lxml import etree

from perfdb.exceptions import MalformedInput
from perfdb.exceptions import UnsupportedAttributeValue
from perfdb.reports.components import Element
from perfdb.reports.components import ElementCategory
from perfdb.reports.helpers import coerce_value
from perfdb.reports.helpers import get_attribute
from perfdb.reports.helpers import get_first_attribute

log = logging.getLogger(__name__)

SCHEMA_PATH = pathlib.Path(__file__).resolve().with_name('perf-report.xsd')

NAME = 'name'
DATE = 'date'
UNITS = 'units'
END_TIME = 'end-time'
TIME_UNITS = 'time-units'
METADATA_KEY = 'key'
METADATA_VALUE = 'value'

# Attributes used for element fields, all other timing and metric attributes
# are measurements.
RESERVED_ATTRIBUTES = {NAME, DATE, END_TIME, UNITS, TIME_UNITS}

DATE_ATTRIBUTES = {
    ElementCategory.report: (DATE,),
    ElementCategory.timing: (DATE, END_TIME),
    ElementCategory.metric: (DATE, END_TIME),
}

UNITS_ATTRIBUTES = (UNITS, TIME_UNITS)

CATEGORIES = {c.value: c for c in ElementCategory}

Source = Union[str, pathlib.Path, bytes, BinaryIO]


def build_element(
    category: ElementCategory,
    attrs: Mapping[str, str],
    *,
    file: str = None,
) -> Element:
    if category is ElementCategory.metadata:
        return Element(
            category,
            get_attribute(attrs, METADATA_KEY),
            value=get_attribute(attrs, METADATA_VALUE),
        )

    element = Element(
        category,
        get_attribute(attrs, NAME),
        get_first_attribute(attrs, DATE_ATTRIBUTES[category]),
        get_first_attribute(attrs, UNITS_ATTRIBUTES),
    )
    if category is ElementCategory.report:
        return element

    for attr, value in attrs.items():
        if attr in RESERVED_ATTRIBUTES:
            continue
        try:
            element.attributes[attr] = coerce_value(value)
        except ValueError:
            raise UnsupportedAttributeValue(
                element,
                file=file,
                attribute=attr,
                value=value,
            ) from None
    return element


class ElementStackBuilder:
    """Builds an element tree from a flat stream of start and end tags.

    Elements of unknown tags are ignored, their recognized descendants are
    added to the closest recognized ancestor.
    """

    def __init__(self, file: str = None):
        self.file = file
        self.stack: List[Element] = []
        self.report: Optional[Element] = None

    @property
    def depth(self) -> int:
        return len(self.stack)

    def start(self, tag: str, attrs: Mapping[str, str]) -> Optional[Element]:
        category = CATEGORIES.get(tag)
        if category is None:
            return None

        if category is ElementCategory.report:
            if self.stack or self.report is not None:
                raise MalformedInput(
                    file=self.file,
                    error="only one top level performance-report element is allowed",
                )
        elif not self.stack:
            raise MalformedInput(
                file=self.file,
                error=f"{tag} element is outside of a performance-report element",
            )

        element = build_element(category, attrs, file=self.file)
        self.stack.append(element)
        return element

    def end(self, tag: str) -> Optional[Element]:
        if tag not in CATEGORIES or not self.stack:
            return None
        element = self.stack.pop()
        if self.stack:
            self.stack[-1].add_child(element)
        else:
            self.report = element
        return element

    def result(self) -> Element:
        if self.stack or self.report is None:
            raise MalformedInput(
                file=self.file,
                error="document does not contain a performance-report element",
            )
        return self.report


class ReportDeserializer:
    """Reads performance report XML documents into `Element` trees.

    Documents are validated against `perf-report.xsd` while they are being
    parsed. Any error stops reading, no partial tree is ever returned.
    """

    schema_path: pathlib.Path = SCHEMA_PATH

    def __init__(self, schema_path: Union[str, pathlib.Path] = None):
        if schema_path is not None:
            self.schema_path = pathlib.Path(schema_path)
        self._schema: Optional[etree.XMLSchema] = None

    @property
    def schema(self) -> etree.XMLSchema:
        if self._schema is None:
            self._schema = etree.XMLSchema(etree.parse(str(self.schema_path)))
        return self._schema

    def deserialize(self, source: Source, *, file: str = None) -> Element:
        if isinstance(source, bytes):
            source = io.BytesIO(source)
        elif isinstance(source, pathlib.Path):
            file = file or str(source)
            source = str(source)
        elif isinstance(source, str):
            file = file or source

        builder = ElementStackBuilder(file)
        events = etree.iterparse(
            source,
            events=('start', 'end'),
            schema=self.schema,
            remove_comments=True,
        )
        try:
            for event, node in events:
                if event == 'start':
                    builder.start(node.tag, node.attrib)
                else:
                    builder.end(node.tag)
                    node.clear()
        except (etree.XMLSyntaxError, etree.DocumentInvalid) as e:
            raise MalformedInput(file=file, error=str(e)) from e

        report = builder.result()
        log.debug(
            "Read performance report %r (date: %r) from %s.",
            report.name, report.date, file or '<stream>',
        )
        return report

    def deserialize_file(self, path: Union[str, pathlib.Path]) -> Element:
        path = pathlib.Path(path)
        with path.open('rb') as f:
            return self.deserialize(f, file=str(path))


def deserialize(source: Source, *, file: str = None) -> Element:
    return _deserializer.deserialize(source, file=file)


_deserializer = ReportDeserializer()
