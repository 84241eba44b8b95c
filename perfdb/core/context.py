import importlib
import pathlib
from typing import Type
from typing import TypeVar

from perfdb import commands
from perfdb.components import Config
from perfdb.components import Context
from perfdb.core.config import RawConfig
from perfdb.core.config import read_config
from perfdb.utils.imports import importstr


ContextType = TypeVar('ContextType', bound=Context)


def create_context(
    name='perfdb',
    rc: RawConfig = None,
    context: ContextType = None,
    args=None,
    envfile=None,
) -> ContextType:
    if rc is None:
        rc = read_config(args, envfile)

    load_commands(rc.get('commands', 'modules', cast=list))

    if context is None:
        Context_: Type[Context] = rc.get('components', 'core', 'context', cast=importstr, required=True)
        context = Context_(name)

    context.set('rc', rc)

    Config_: Type[Config] = rc.get('components', 'core', 'config', cast=importstr, required=True)
    config = Config_()
    commands.load(context, config, rc)
    context.set('config', config)

    return context


def load_commands(modules):
    # Import all submodules of given packages, importing a module registers
    # its command implementations.
    for module_path in modules:
        module = importlib.import_module(module_path)
        path = pathlib.Path(module.__file__).resolve()
        if path.name != '__init__.py':
            continue
        path = path.parent
        base = path.parents[module_path.count('.')]
        for path in sorted(path.glob('**/*.py')):
            if path.name == '__init__.py':
                module_path = path.parent.relative_to(base)
            else:
                module_path = path.relative_to(base).with_suffix('')
            module_path = '.'.join(module_path.parts)
            importlib.import_module(module_path)


def configure_context(context: Context, **params) -> Context:
    """Fork `context` with configuration overridden by `params`."""
    rc: RawConfig = context.get('rc')
    rc = rc.fork({k: v for k, v in params.items() if v is not None})
    return create_context(context._name, rc)
