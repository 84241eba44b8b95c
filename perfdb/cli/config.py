import sys
from typing import List
from typing import Optional

from typer import Argument
from typer import Context as TyperContext

from perfdb.core.config import KeyFormat


def config(
    ctx: TyperContext,
    name: Optional[List[str]] = Argument(None),
    fmt: KeyFormat = KeyFormat.cfg,
):
    """Show current configuration values"""
    rc = ctx.obj.get('rc')
    rc.dump(*(name or []), fmt=fmt, file=sys.stdout)
