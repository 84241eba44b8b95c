import json
import pathlib

from perfdb.core.config import RawConfig
from perfdb.testing.cli import PerfdbCliRunner

REPORT = '''\
<?xml version="1.0" encoding="UTF-8"?>
<performance-report name="build" date="{date}" units="s">
  <metadata key="host" value="ci-1"/>
  <timing name="solve" value="{value}">
    <timing name="assembly" value="1"/>
  </timing>
</performance-report>
'''


def _write_report(path: pathlib.Path, date='2021-01-01', value='2') -> pathlib.Path:
    path.write_text(REPORT.format(date=date, value=value))
    return path


def test_config(rc: RawConfig, cli: PerfdbCliRunner):
    result = cli.invoke(rc, ['config', 'parts.tree'])
    assert 'parts.tree.dirname' in result.stdout
    assert 'performance_history_tree' in result.stdout
    assert 'parts.views.dirname' not in result.stdout


def test_config_option(rc: RawConfig, cli: PerfdbCliRunner):
    result = cli.invoke(rc, [
        'config', 'parts.tree.rolling_range',
    ])
    assert '30' in result.stdout


def test_init(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    root = tmp_path / 'db'
    result = cli.invoke(rc, ['init', '--root', root])
    assert (root / 'performance_history_tree').is_dir()
    assert (root / 'performance_views').is_dir()
    assert (root / 'performance_history_filters').is_dir()
    assert f'tree: {root / "performance_history_tree"}' in result.stdout


def test_init_data_path(rc: RawConfig, cli: PerfdbCliRunner):
    cli.invoke(rc, ['init'])
    assert (rc.get('data_path') / 'performance_views').is_dir()


def test_init_failure(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    root = tmp_path / 'db'
    root.mkdir()
    (root / 'performance_views').write_text('')
    result = cli.invoke(rc, ['init', '--root', root], fail=False)
    assert result.exit_code == 1
    assert "Can't create views part" in result.output
    assert (root / 'performance_history_tree').is_dir()


def test_ingest(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    root = tmp_path / 'db'
    report = _write_report(tmp_path / 'report.xml')
    result = cli.invoke(rc, ['ingest', '--root', root, report])
    assert "added 'build'" in result.stdout

    record = root / 'performance_history_tree' / 'solve' / 'record.json'
    data = json.loads(record.read_text())
    assert data['nodes']['2021-01-01']['moments']['value'] == {
        'value': 2.0,
        'average': 2.0,
        'std': 0.0,
    }


def test_ingest_duplicate(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    root = tmp_path / 'db'
    report = _write_report(tmp_path / 'report.xml')
    cli.invoke(rc, ['ingest', '--root', root, report])
    result = cli.invoke(rc, ['ingest', '--root', root, report])
    assert 'already added' in result.stdout


def test_ingest_errors(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    root = tmp_path / 'db'
    good = _write_report(tmp_path / 'good.xml')
    bad = _write_report(tmp_path / 'bad.xml', date='2021-01-02', value='abc')
    broken = tmp_path / 'broken.xml'
    broken.write_text('<performance-report')
    result = cli.invoke(rc, [
        'ingest', '--root', root, bad, broken, good,
    ], fail=False)
    assert result.exit_code == 1
    assert f'{bad}: ' in result.output
    assert "'abc'" in result.output
    assert f'{broken}: Performance report is not valid' in result.output

    # Valid reports are still added.
    record = root / 'performance_history_tree' / 'solve' / 'record.json'
    data = json.loads(record.read_text())
    assert list(data['nodes']) == ['2021-01-01']


def test_ingest_missing_file(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    result = cli.invoke(rc, [
        'ingest', '--root', tmp_path / 'db', tmp_path / 'missing.xml',
    ], fail=False)
    assert result.exit_code == 1
    assert 'missing.xml' in result.output


def test_show(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    root = tmp_path / 'db'
    cli.invoke(rc, ['ingest', '--root', root, _write_report(tmp_path / 'report.xml')])

    result = cli.invoke(rc, ['show', '--root', root, 'solve/assembly'])
    data = json.loads(result.stdout)
    assert data['name'] == 'assembly'
    assert data['path'] == 'solve/assembly'
    assert data['category'] == 'timing'

    result = cli.invoke(rc, ['show', '--root', root])
    data = json.loads(result.stdout)
    assert data['name'] == 'build'
    assert data['nodes']['2021-01-01']['metadata'] == {'host': 'ci-1'}

    result = cli.invoke(rc, ['show', '--root', root, '--children'])
    assert result.stdout.split() == ['solve']


def test_show_missing_node(rc: RawConfig, cli: PerfdbCliRunner, tmp_path: pathlib.Path):
    result = cli.invoke(rc, ['show', '--root', tmp_path / 'db', 'missing'], fail=False)
    assert result.exit_code == 1
    assert "Tree node 'missing' does not exist." in result.output


def test_version(rc: RawConfig, cli: PerfdbCliRunner):
    result = cli.invoke(rc, ['--version'])
    assert result.stdout.strip()
