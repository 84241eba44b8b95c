import json
import logging
import pathlib
from typing import List
from typing import Optional

from typer import Argument
from typer import Context as TyperContext
from typer import Exit
from typer import Option
from typer import echo

from perfdb import commands
from perfdb.cli.helpers.errors import ErrorCounter
from perfdb.cli.helpers.errors import cli_error
from perfdb.cli.helpers.store import create_accessor
from perfdb.db.components import PartType
from perfdb.exceptions import MalformedInput
from perfdb.exceptions import NodeNotFound
from perfdb.exceptions import UnsupportedAttributeValue
from perfdb.reports.deserializer import ReportDeserializer

log = logging.getLogger(__name__)


def init(
    ctx: TyperContext,
    root: Optional[pathlib.Path] = Option(None, '--root', help=(
        "Database directory, defaults to `data_path` configuration option."
    )),
):
    """Create directories of all database parts"""
    accessor = create_accessor(ctx.obj, root)
    errors = ErrorCounter()
    for type_ in PartType:
        part = accessor.get_part(type_)
        if part is None:
            echo(f"Can't create {type_.value} part in {accessor.path}.", err=True)
            errors.increase()
        else:
            echo(f"{type_.value}: {part.path}")
    if errors.has_errors():
        raise Exit(code=1)


def ingest(
    ctx: TyperContext,
    reports: List[pathlib.Path] = Argument(..., help=(
        "Performance report XML files"
    )),
    root: Optional[pathlib.Path] = Option(None, '--root', help=(
        "Database directory, defaults to `data_path` configuration option."
    )),
):
    """Read performance reports and add them to the tree"""
    context = ctx.obj
    accessor = create_accessor(context, root)
    tree = accessor.get_and_open_part(PartType.TREE)
    if tree is None or not tree.is_open():
        cli_error(f"Can't open performance tree in {accessor.path}.")

    deserializer = ReportDeserializer()
    errors = ErrorCounter()
    try:
        for path in reports:
            try:
                report = deserializer.deserialize_file(path)
            except (MalformedInput, UnsupportedAttributeValue) as e:
                echo(f"{path}: {e.message}", err=True)
                errors.increase()
                continue
            except OSError as e:
                echo(f"{path}: {e}", err=True)
                errors.increase()
                continue
            if commands.merge(context, tree, report):
                echo(f"{path}: added {report.name!r} ({report.date})")
            else:
                echo(f"{path}: already added, skipped")
    finally:
        if not accessor.close_all():
            log.error("Failed to close database parts in %s.", accessor.path)
            errors.increase()

    if errors.has_errors():
        raise Exit(code=1)


def show(
    ctx: TyperContext,
    path: str = Argument('', help="Tree node path, e.g. `solver/assembly`"),
    root: Optional[pathlib.Path] = Option(None, '--root', help=(
        "Database directory, defaults to `data_path` configuration option."
    )),
    children: bool = Option(False, '--children', help=(
        "List child nodes instead of showing node data."
    )),
):
    """Show a node of the performance tree"""
    accessor = create_accessor(ctx.obj, root)
    tree = accessor.get_and_open_part(PartType.TREE)
    if tree is None or not tree.is_open():
        cli_error(f"Can't open performance tree in {accessor.path}.")
    try:
        node = tree.get_node_at(path)
        if node is None:
            cli_error(NodeNotFound(tree, node=path).message)
        if children:
            for child in tree.get_children_at(path):
                echo(child.path)
        else:
            echo(json.dumps(node.dump(), indent=2, sort_keys=True))
    finally:
        accessor.close_all()
