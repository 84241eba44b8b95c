import pathlib

from perfdb import commands
from perfdb.components import Config
from perfdb.components import Context
from perfdb.core.config import RawConfig
from perfdb.db.components import PartType
from perfdb.utils.imports import importstr


@commands.load.register(Context, Config, RawConfig)
def load(context: Context, config: Config, rc: RawConfig):
    config.rc = rc
    config.data_path = rc.get('data_path', cast=pathlib.Path, required=True)
    for type_ in PartType:
        name = type_.value
        config.parts[type_] = rc.get('components', 'parts', name, cast=importstr, required=True)
        config.dirnames[type_] = rc.get('parts', name, 'dirname', required=True)
    return config
