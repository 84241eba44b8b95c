from perfdb import commands
from perfdb.components import Context
from perfdb.core.config import RawConfig
from perfdb.db.components import DatabasePart


@commands.load.register(Context, DatabasePart, RawConfig)
def load(context: Context, part: DatabasePart, rc: RawConfig):
    return part
