from perfdb import commands
from perfdb.components import Context
from perfdb.core.config import RawConfig
from perfdb.parts.tree.components import DiskTree
from perfdb.reports.components import Element


@commands.load.register(Context, DiskTree, RawConfig)
def load(context: Context, tree: DiskTree, rc: RawConfig):
    tree.rolling_range = rc.get('parts', 'tree', 'rolling_range', default=tree.rolling_range, cast=int)
    tree.default_units = rc.get('parts', 'tree', 'default_units', default=tree.default_units) or ''
    return tree


@commands.merge.register(Context, DiskTree, Element)
def merge(context: Context, tree: DiskTree, report: Element) -> bool:
    return tree.add_report(report)
