import pathlib
from typing import Optional
from typing import Type

from perfdb.components import Config
from perfdb.components import Context
from perfdb.db.components import DatabaseAccessor
from perfdb.utils.imports import importstr


def create_accessor(
    context: Context,
    root: Optional[pathlib.Path] = None,
) -> DatabaseAccessor:
    """Create database accessor for `root` or for configured `data_path`."""
    config: Config = context.get('config')
    Accessor: Type[DatabaseAccessor] = config.rc.get(
        'components', 'core', 'accessor',
        cast=importstr,
        required=True,
    )
    return Accessor(context, root or config.data_path)
