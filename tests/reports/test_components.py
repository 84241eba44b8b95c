import pytest

from perfdb.reports.components import Element
from perfdb.reports.components import ElementCategory


def _report():
    report = Element(ElementCategory.report, 'build', '2021-01-01', 'ms')
    timing = report.add_child(Element(ElementCategory.timing, 'solve', '2021-01-01', 'ms'))
    timing.attributes['value'] = 1.5
    report.add_child(Element(ElementCategory.metric, 'memory'))
    report.add_child(Element(ElementCategory.metadata, 'host', value='ci-1'))
    return report


def test_fields_are_read_only():
    element = Element(ElementCategory.timing, 'solve')
    with pytest.raises(AttributeError):
        element.name = 'other'
    with pytest.raises(AttributeError):
        element.category = ElementCategory.metric


def test_category_from_tag_name():
    element = Element('performance-report', 'build')
    assert element.category is ElementCategory.report
    assert element.type == 'report'


def test_get_children():
    report = _report()
    assert [c.name for c in report.get_children()] == ['solve', 'memory', 'host']
    assert [c.name for c in report.get_children(ElementCategory.timing)] == ['solve']
    assert [c.name for c in report.get_children(ElementCategory.metric)] == ['memory']
    assert report.get_children(ElementCategory.report) == []


def test_get_children_returns_a_copy():
    report = _report()
    report.get_children().clear()
    assert len(report.children) == 3


def test_get_metadata():
    assert _report().get_metadata() == {'host': 'ci-1'}


def test_equality_ignores_children():
    a = Element(ElementCategory.report, 'build', '2021-01-01')
    b = Element(ElementCategory.report, 'build', '2021-01-01')
    b.add_child(Element(ElementCategory.timing, 'solve'))
    assert a == b
    assert hash(a) == hash(b)
    assert not a.same_tree(b)


def test_equality_compares_attributes():
    a = Element(ElementCategory.timing, 'solve')
    b = Element(ElementCategory.timing, 'solve')
    a.attributes['value'] = 1.0
    assert a != b
    b.attributes['value'] = 1.0
    assert a == b


def test_same_tree():
    assert _report().same_tree(_report())


def test_same_tree_checks_child_order():
    a = Element(ElementCategory.report, 'build')
    a.add_child(Element(ElementCategory.timing, 'x'))
    a.add_child(Element(ElementCategory.timing, 'y'))
    b = Element(ElementCategory.report, 'build')
    b.add_child(Element(ElementCategory.timing, 'y'))
    b.add_child(Element(ElementCategory.timing, 'x'))
    assert a == b
    assert not a.same_tree(b)


def test_dump():
    report = _report()
    assert report.dump() == {
        'category': 'performance-report',
        'name': 'build',
        'date': '2021-01-01',
        'units': 'ms',
        'attributes': {},
        'children': [
            {
                'category': 'timing',
                'name': 'solve',
                'date': '2021-01-01',
                'units': 'ms',
                'attributes': {'value': 1.5},
                'children': [],
            },
            {
                'category': 'metric',
                'name': 'memory',
                'date': '',
                'units': '',
                'attributes': {},
                'children': [],
            },
            {
                'category': 'metadata',
                'name': 'host',
                'date': '',
                'units': '',
                'value': 'ci-1',
                'children': [],
            },
        ],
    }
