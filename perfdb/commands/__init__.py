from __future__ import annotations

from perfdb.dispatcher import command


@command()
def load():
    """Load a component from configuration.

    load(context: Context, config: Config, rc: RawConfig)
    load(context: Context, part: DatabasePart, rc: RawConfig)

    """


@command()
def merge():
    """Merge a deserialized report into a database part.

    merge(context: Context, tree: DiskTree, report: Element) -> bool

    """


@command()
def get_error_context():
    """Return error context schema for a component.

    Schema maps context names to attribute paths relative to `this`, for
    example `{'part': 'this.type.value'}`.

    """


@get_error_context.register(object)
def get_error_context_default(this: object):
    return {}
