import pathlib

from perfdb.core.config import SCHEMA
from perfdb.core.config import CliArgs
from perfdb.core.config import EnvFile
from perfdb.core.config import EnvVars
from perfdb.core.config import KeyFormat
from perfdb.core.config import Path
from perfdb.core.config import PyDict
from perfdb.core.config import RawConfig


def test_envvars():
    config = EnvVars('envvars', {
        'PERFDB_PARTS__TREE__ROLLING_RANGE': '10',
    })
    config.read(SCHEMA)
    assert config.config == {
        ('parts', 'tree', 'rolling_range'): '10',
    }


def test_envvars_unknown_keys_are_ignored():
    config = EnvVars('envvars', {
        'PERFDB_UNKNOWN': 'x',
        'OTHER_DATA_PATH': 'x',
        'PERFDB_DATA_PATH': '/data',
    })
    config.read(SCHEMA)
    assert config.config == {
        ('data_path',): '/data',
    }


def test_envfile(tmp_path: pathlib.Path):
    envfile = tmp_path / '.env'
    envfile.write_text(
        '# comment\n'
        '\n'
        'PERFDB_PARTS__TREE__DEFAULT_UNITS = ms\n'
    )
    config = EnvFile('envfile', envfile)
    config.read(SCHEMA)
    assert config.config == {
        ('parts', 'tree', 'default_units'): 'ms',
    }


def test_missing_envfile(tmp_path: pathlib.Path):
    config = EnvFile('envfile', tmp_path / '.env')
    config.read(SCHEMA)
    assert config.config == {}


def test_yaml_file(tmp_path: pathlib.Path):
    path = tmp_path / 'config.yml'
    path.write_text(
        'parts:\n'
        '  tree:\n'
        '    rolling_range: 7\n'
    )
    rc = RawConfig()
    rc.read([
        Path('defaults', 'perfdb.config:CONFIG'),
        Path('yaml', str(path)),
    ])
    assert rc.get('parts', 'tree', 'rolling_range') == 7
    assert rc.get('parts', 'tree', 'dirname') == 'performance_history_tree'


def test_cli_args():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {'commands': {'modules': ['a']}}),
        CliArgs('cli', [
            'commands.modules=a,b',
            'parts.tree.default_units=ms',
        ]),
    ])
    assert rc.get('commands', 'modules', cast=list) == ['a', 'b']
    assert rc.get('parts', 'tree', 'default_units') == 'ms'


def test_override_order():
    rc = RawConfig()
    rc.read([
        PyDict('defaults', {
            'parts': {
                'tree': {
                    'dirname': 'tree',
                    'rolling_range': 30,
                },
            },
        }),
        EnvVars('envvars', {
            'PERFDB_PARTS__TREE__ROLLING_RANGE': '5',
        }),
        PyDict('app', {
            'parts.views.dirname': 'views',
        }),
    ])
    assert rc.keys('parts') == ['tree', 'views']
    assert rc.get('parts', 'tree', 'rolling_range', cast=int) == 5
    assert rc.get('parts', 'tree', 'rolling_range', origin=True) == ('5', 'envvars')
    assert list(rc.getall('parts')) == [
        (('parts', 'tree', 'dirname'), 'tree'),
        (('parts', 'tree', 'rolling_range'), '5'),
        (('parts', 'views', 'dirname'), 'views'),
    ]
    assert rc.to_dict('parts', 'tree') == {
        'dirname': 'tree',
        'rolling_range': '5',
    }


def test_has_and_default():
    rc = RawConfig()
    rc.add('test', {'parts.tree.dirname': 'tree'})
    assert rc.has('parts', 'tree', 'dirname')
    assert not rc.has('parts', 'views', 'dirname')
    assert rc.get('parts', 'views', 'dirname', default='views') == 'views'


def test_fork():
    rc = RawConfig()
    rc.add('test', {'parts.tree.dirname': 'tree'})
    rc.lock()
    fork = rc.fork({'parts.tree.dirname': 'other'})
    assert rc.get('parts', 'tree', 'dirname') == 'tree'
    assert fork.get('parts', 'tree', 'dirname') == 'other'


def test_dump():
    rc = RawConfig()
    rc.add('test', {'parts.tree.dirname': 'tree', 'env': 'test'})
    assert rc.dump('parts', file=None) == [
        ('Origin', 'Name', 'Value'),
        ('------', '------------------', '-----'),
        ('test', 'parts.tree.dirname', 'tree'),
    ]
    assert rc.dump('parts', fmt=KeyFormat.env, file=None)[-1] == (
        'test', 'PERFDB_PARTS__TREE__DIRNAME', 'tree',
    )
