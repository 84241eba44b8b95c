import pytest

from perfdb.components import Config
from perfdb.components import Context
from perfdb.core.config import RawConfig
from perfdb.core.context import configure_context
from perfdb.db.components import PartType
from perfdb.parts.tree.components import DiskTree


def test_set_overwrite():
    context = Context('test')
    context.set('a', 1)
    with pytest.raises(Exception) as e:
        context.set('a', 2)
    assert str(e.value) == "Context variable 'a' has been already set."
    assert context.get('a') == 1


def test_bind_overwrite():
    context = Context('test')
    context.bind('a', lambda: 1)
    with pytest.raises(Exception) as e:
        context.bind('a', lambda: 2)
    assert str(e.value) == "Context variable 'a' has been already set."
    assert context.get('a') == 1


def test_bind_is_lazy():
    calls = []

    def factory():
        calls.append(1)
        return 'value'

    context = Context('test')
    context.bind('a', factory)
    assert calls == []
    assert context.get('a') == 'value'
    assert context.get('a') == 'value'
    assert calls == [1]


def test_state():
    context = Context('test')
    context.set('a', 1)
    with context:
        context.set('a', 2)
        context.set('b', 3)
        assert context.get('a') == 2
        assert context.has('b')
    assert context.get('a') == 1
    assert not context.has('b')


def test_fork():
    base = Context('base')
    base.set('a', 1)
    fork = base.fork('fork')
    fork.set('a', 2)
    fork.set('b', 3)
    assert base.get('a') == 1
    assert not base.has('b')
    assert fork.get('a') == 2
    assert fork.has('a')
    assert fork.has('b', local=True)


def test_unknown_variable():
    context = Context('test')
    with pytest.raises(Exception) as e:
        context.get('missing')
    assert str(e.value) == "Unknown context variable 'missing'."


def test_create_context(context: Context, rc: RawConfig):
    config: Config = context.get('config')
    assert context.get('rc') is config.rc
    assert config.data_path == rc.get('data_path')
    assert config.parts[PartType.TREE] is DiskTree
    assert config.dirnames[PartType.TREE] == 'performance_history_tree'


def test_configure_context(context: Context):
    other = configure_context(context, **{
        'parts.views.dirname': 'my_views',
        'parts.filters.dirname': None,
    })
    assert other.get('config').dirnames[PartType.VIEWS] == 'my_views'
    assert other.get('config').dirnames[PartType.FILTERS] == 'performance_history_filters'
    assert context.get('config').dirnames[PartType.VIEWS] == 'performance_views'


def test_tree_settings_are_not_in_config(context: Context):
    config = context.get('config')
    assert not hasattr(config, 'rolling_range')
    assert not hasattr(config, 'default_units')
    assert not config.rc.has('config')
