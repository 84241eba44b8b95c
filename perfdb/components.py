from __future__ import annotations

import pathlib
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Set
from typing import Tuple
from typing import Type
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perfdb.core.config import RawConfig
    from perfdb.db.components import DatabasePart
    from perfdb.db.components import PartType


class Context:
    """Explicit state passed to everything that needs configuration.

    Each job gets its own context (usually forked from a base one), so
    independent jobs never share mutable state through module globals.

    Context is a stack of states. Entering a `with context:` block pushes a
    new state, values set inside the block are discarded on exit.

        context = Context('base')
        context.set('rc', rc)
        context.bind('config', load_config, rc)

        with context:
            context.set('path', path)
            context.get('config')  # factory is called once and cached

    """
    _name: str
    _parent: Optional[Context]

    def __init__(self, name: str, parent: Context = None):
        self._name = name
        self._parent = parent

        # Names defined in current context, not inherited from parent.
        self._local_names: List[Set[str]] = [set()]

        if parent:
            self._factory: List[Dict[str, Tuple[Callable, tuple, dict]]] = [
                parent._factory[-1].copy()
            ]
            self._names: List[Set[str]] = [parent._names[-1].copy()]
            # Only explicitly set values are copied, bound factories are
            # evaluated again in the forked context.
            copy_keys = set(parent._context[-1]) - set(parent._factory[-1])
            self._context: List[Dict[str, Any]] = [
                {k: parent._context[-1][k] for k in copy_keys}
            ]
        else:
            self._factory = [{}]
            self._names = [set()]
            self._context = [{}]

    def __repr__(self):
        name = []
        parent = self
        while parent is not None:
            name.append(f'{parent._name}:{len(parent._context) - 1}')
            parent = parent._parent
        name = ' < '.join(reversed(name))
        return (
            f'<{self.__class__.__module__}.{self.__class__.__name__}({name}) '
            f'at 0x{id(self):02x}>'
        )

    def __enter__(self):
        self._context.append(self._context[-1].copy())
        self._names.append(self._names[-1].copy())
        self._local_names.append(set())
        self._factory.append({})
        return self

    def __exit__(self, *exc):
        self._context.pop()
        self._names.pop()
        self._local_names.pop()
        self._factory.pop()

    def fork(self, name: str) -> Context:
        """Create a new context, based on current state of this context."""
        return type(self)(name, self)

    def bind(self, name: str, factory: Callable, *args, **kwargs):
        """Bind a lazy factory, called on first `get` and cached."""
        self._set_local_name(name)
        self._factory[-1][name] = (factory, args, kwargs)

    def set(self, name: str, value: Any):
        """Set `name` to `value` in current context."""
        self._set_local_name(name)
        self._context[-1][name] = value
        return value

    def get(self, name: str) -> Any:
        if name in self._context[-1]:
            return self._context[-1][name]

        for state in range(len(self._factory) - 1, -1, -1):
            if name in self._factory[state]:
                if name not in self._context[state]:
                    factory, args, kwargs = self._factory[state][name]
                    self._context[state][name] = factory(*args, **kwargs)
                self._context[-1][name] = self._context[state][name]
                return self._context[-1][name]

        raise Exception(f"Unknown context variable {name!r}.")

    def has(self, name: str, local: bool = False) -> bool:
        if local:
            return name in self._local_names[-1]
        return name in self._names[-1]

    def _set_local_name(self, name: str):
        # Prevent redefining local names, but allow to redefine inherited names.
        if name in self._local_names[-1]:
            raise Exception(f"Context variable {name!r} has been already set.")
        self._local_names[-1].add(name)
        self._names[-1].add(name)


class Config:
    """perfdb configuration

    Runtime values taken from `RawConfig` when the context is created.

    """
    rc: RawConfig
    data_path: pathlib.Path
    parts: Dict[PartType, Type[DatabasePart]]
    dirnames: Dict[PartType, str]

    def __init__(self):
        self.parts = {}
        self.dirnames = {}
