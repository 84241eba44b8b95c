import logging
import pathlib
from typing import List
from typing import Optional

from typer import Context as TyperContext
from typer import Option
from typer import Typer
from typer import echo

import perfdb
from perfdb.cli import config
from perfdb.cli import db
from perfdb.cli.helpers.typer import add
from perfdb.core.context import create_context

log = logging.getLogger(__name__)

app = Typer()

add(app, 'config', config.config, short_help="Show current configuration values")
add(app, 'init', db.init, short_help="Create directories of all database parts")
add(app, 'ingest', db.ingest, short_help="Add performance reports to the tree")
add(app, 'show', db.show, short_help="Show a node of the performance tree")


@app.callback(invoke_without_command=True)
def main(
    ctx: TyperContext,
    option: Optional[List[str]] = Option(None, '-o', '--option', help=(
        "Set configuration option, example: `-o option.name=value`."
    )),
    env_file: Optional[pathlib.Path] = Option(None, '--env-file', help=(
        "Load configuration from a given .env file."
    )),
    version: bool = Option(False, help="Show version number."),
    log_file: Optional[pathlib.Path] = Option(None, '--log-file', help=(
        "Write log messages to a specified file, if not given, writes logs to "
        "STDERR."
    )),
    log_level: Optional[str] = Option('warning', '--log-level', help=(
        "Log level. Possible levels: critical, error, warning, info, debug. "
        "Default: warning."
    )),
):
    logging.basicConfig(
        level=logging.getLevelName(log_level.upper()),
        format='%(asctime)s %(levelname)s: %(message)s',
        filename=log_file,
    )

    log.debug("log file set to: %s", log_file or 'STDERR')
    log.debug("log level set to: %s", log_level)

    ctx.obj = ctx.obj or create_context('cli', args=option, envfile=env_file)
    if version:
        echo(perfdb.__version__)
