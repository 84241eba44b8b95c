from __future__ import annotations

import enum
import logging
import os
import pathlib
import sys
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ruamel.yaml import YAML

from perfdb.utils.imports import importstr
from perfdb.utils.schema import NA

Schema = Dict[str, Any]
Key = Tuple[str, ...]

ENV_PREFIX = 'PERFDB_'

yaml = YAML(typ='safe')

log = logging.getLogger(__name__)

SCHEMA = {
    'type': 'object',
    'items': yaml.load(
        (pathlib.Path(__file__).resolve().parents[1] / 'config.yml').
        read_text()
    ),
}


def read_config(args=None, envfile=None) -> RawConfig:
    rc = RawConfig()
    rc.read([
        Path('perfdb', 'perfdb.config:CONFIG'),
        EnvFile('envfile', envfile or '.env'),
        EnvVars('envvars', os.environ),
        CliArgs('cliargs', args or []),
    ])
    return rc


class KeyFormat(str, enum.Enum):
    cfg = 'cfg'
    env = 'env'


class ConfigSource:
    name: str = None

    def __init__(self, name=None, config=None):
        self.name = name or self.name or type(self).__name__
        self.config = config

    def __str__(self):
        return self.name

    def __repr__(self):
        return type(self).__module__ + '.' + type(self).__name__ + '(' + repr(self.name) + ')'

    def read(self, schema: Schema):
        # Flatten nested dicts into tuple keys.
        config = {}
        for key, value in self.config.items():
            config.update(_flatten(value, key))
        self.config = config

    def keys(self) -> Iterator[Key]:
        yield from self.config

    def get(self, key: Key):
        return self.config.get(key, NA)


class PyDict(ConfigSource):

    def read(self, schema: Schema):
        self.config = {
            tuple(k.split('.')): v
            for k, v in self.config.items()
        }
        super().read(schema)


class Path(PyDict):

    def read(self, schema: Schema):
        if self.config.endswith(('.yml', '.yaml')):
            path = pathlib.Path(self.config)
            self.config = yaml.load(path.read_text()) or {}
        else:
            self.config = dict(importstr(self.config))
        super().read(schema)


class CliArgs(PyDict):
    name = 'cli'

    def read(self, schema: Schema):
        config = {}
        for arg in self.config:
            key, val = arg.split('=', 1)
            if ',' in val:
                val = [v.strip() for v in val.split(',')]
            config[key] = val
        self.config = config
        super().read(schema)


class EnvVars(ConfigSource):
    name = 'env'

    def read(self, schema: Schema):
        config = {}
        for key, val in self.config.items():
            if not key.startswith(ENV_PREFIX):
                continue
            key = key[len(ENV_PREFIX):]
            key = tuple(key.lower().split('__'))
            if key[0] not in schema['items']:
                continue
            config[key] = val
        self.config = config


class EnvFile(EnvVars):

    def read(self, schema: Schema):
        config = {}
        path = pathlib.Path(self.config)
        if path.exists():
            with path.open() as f:
                for line in f:
                    line = line.strip()
                    if line == '' or line.startswith('#') or '=' not in line:
                        continue
                    name, value = line.split('=', 1)
                    config[name.strip()] = value.strip()
        self.config = config
        super().read(schema)


class RawConfig:
    """A raw configuration reader component

    Reads configuration directly from supported configuration `sources`,
    later sources override values of earlier ones.

    Currently supported configuration sources are:

    - `PyDict` - python `dict` objects.
    - `Path` - python module path pointing to a `dict` or YAML file path.
    - `EnvVars` - environment variables with `PERFDB_` prefix.
    - `EnvFile` - `.env` files containing variables with `PERFDB_` prefix.
    - `CliArgs` - `-o` command line arguments with `name=value` values.

    """
    sources: List[ConfigSource]

    def __init__(self, sources: Optional[List[ConfigSource]] = None):
        self._locked = False
        self._schema = SCHEMA
        self.sources = list(sources or [])

    def read(self, sources: List[ConfigSource]):
        if self._locked:
            raise Exception(
                "Configuration is locked, use `rc.fork()` if you need to "
                "change configuration."
            )

        for config in sources:
            log.debug("Reading config from %s.", config.name)
            config.read(self._schema)

        self.sources.extend(sources)

    def add(self, name: str, params: dict) -> RawConfig:
        self.read([PyDict(name, params)])
        return self

    def fork(self, params: dict = None) -> RawConfig:
        rc = RawConfig(self.sources)
        if params:
            rc.add('fork', params)
        return rc

    def lock(self):
        self._locked = True

    def has(self, *key: str) -> bool:
        return self.get(*key, default=NA) is not NA

    def get(
        self,
        *key: str,
        default=None,
        cast=None,
        required=False,
        origin=False,
    ) -> Any:
        value, config = self._get_config_value(key, default)

        if cast is not None:
            if cast is list and isinstance(value, str):
                value = [v.strip() for v in value.split(',')] if value else []
            elif value is not None and value is not NA:
                value = cast(value)

        if required and value is None:
            name = '.'.join(key)
            raise Exception(f"{name!r} is a required configuration option.")

        if origin:
            return value, (config.name if config else '')
        return value

    def keys(self, *key: str) -> List[str]:
        """Return names of direct child keys of given `key`."""
        n = len(key)
        result = []
        for config in self.sources:
            for k in config.keys():
                if len(k) > n and k[:n] == key and k[n] not in result:
                    result.append(k[n])
        return result

    def getall(self, *key: str, origin=False):
        keys = self.keys(*key)
        if keys:
            for k in keys:
                yield from self.getall(*key, k, origin=origin)
        else:
            res = self.get(*key, origin=origin)
            res = res if origin else (res,)
            yield (key,) + res

    def dump(self, *names: str, fmt: KeyFormat = KeyFormat.cfg, file=sys.stdout):
        table = [('Origin', 'Name', 'Value')]
        for key, val, origin in self.getall(origin=True):
            if names and not any(
                '.'.join(key).startswith(name) for name in names
            ):
                continue
            if fmt == KeyFormat.env:
                key = ENV_PREFIX + '__'.join(key).upper()
            else:
                key = '.'.join(key)
            table.append((origin, key, val))

        sizes = [max(len(str(row[i])) for row in table) for i in range(3)]
        table = table[:1] + [tuple('-' * s for s in sizes)] + table[1:]
        if file:
            for row in table:
                print('  '.join([str(x).ljust(s) for x, s in zip(row, sizes)]).rstrip(), file=file)
        else:
            return table

    def to_dict(self, *names: str) -> Dict[str, Any]:
        result = {}
        for key, val in self.getall(*names):
            key = '.'.join(key[len(names):])
            result[key] = val
        return result

    def _get_config_value(self, key: Key, default: Any = None):
        assert isinstance(key, tuple)
        for config in reversed(self.sources):
            val = config.get(key)
            if val is not NA:
                return val, config
        return default, None


def _flatten(value: Any, key: Key) -> Iterator[Tuple[Key, Any]]:
    if isinstance(value, dict) and value:
        for k, v in value.items():
            yield from _flatten(v, key + tuple(str(k).split('.')))
    else:
        yield key, value
