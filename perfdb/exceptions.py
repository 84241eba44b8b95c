from typing import Optional, Any, Dict, Tuple

import logging
import re


log = logging.getLogger(__name__)


class UnknownValue:

    def __str__(self):
        return '[UNKNOWN]'

    __repr__ = __str__


UNKNOWN_VALUE = UnknownValue()


def resolve_context_vars(schema: Dict[str, str], this: Optional[Any], kwargs: dict):
    """Resolve value from given kwargs and schema."""
    # Extend context by calling get_error_context command on first positional
    # argument.
    if this is not None:
        from perfdb import commands
        schema = {
            **commands.get_error_context(this),
            **schema,
        }
        kwargs = {**kwargs, 'this': this}

    added = set()
    context = {}
    if this is not None:
        context['component'] = type(this).__module__ + '.' + type(this).__name__
    for k, path in schema.items():
        path = path or k
        name, *names = path.split('.')
        if name not in kwargs:
            continue
        added.add(name)
        value = kwargs
        for name in [name] + names:
            if name.endswith('()'):
                name = name[:-2]
                func = True
            else:
                func = False
            if isinstance(value, dict):
                value = value.get(name)
            elif hasattr(value, name):
                value = getattr(value, name)
            else:
                value = UNKNOWN_VALUE
                break
            if func:
                value = value()
        if value is not UNKNOWN_VALUE:
            context[k] = value

    for k in set(kwargs) - added - {'this'}:
        v = kwargs[k]
        if not isinstance(v, (int, float, str)):
            v = str(v)
        context[k] = v

    names = [
        'component',
        'part',
        'path',
        'file',
        'element',
        'attribute',
    ]
    names += [x for x in schema if x not in names]
    names += [x for x in kwargs if x not in names]

    def sort_key(item: Tuple[str, Any]) -> Tuple[int, str]:
        key = item[0]
        try:
            return names.index(key), key
        except ValueError:
            return len(names), key

    return {k: v for k, v in sorted(context.items(), key=sort_key)}


class BaseError(Exception):
    type: str = None
    template: str = None
    context: Dict[str, Any] = {}

    def __init__(self, *args, **kwargs):
        if len(args) == 0:
            this = None
        elif len(args) == 1:
            this = args[0]
        else:
            this = None
            log.error("Only one positional argument is alowed, but %d was given.", len(args), stack_info=True)

        self.type = getattr(this, 'type', None) or 'system'
        if not isinstance(self.type, str):
            self.type = getattr(self.type, 'value', str(self.type))

        self.context = resolve_context_vars(self.context, this, kwargs)

    def __str__(self):
        return (
            self.message + '\n' +
            ('  Context:\n' if self.context else '') +
            ''.join(
                f'    {k}: {v}\n'
                for k, v in self.context.items()
            )
        )

    @property
    def message(self):
        try:
            return _render_template(self)
        except KeyError:
            log.exception("Can't render error message for %s.", self.__class__.__name__)
            return self.template


def error_response(error: BaseError):
    return {
        'type': error.type,
        'code': type(error).__name__,
        'template': error.template,
        'context': error.context,
        'message': error.message,
    }


def _render_template(error: BaseError):
    try:
        return error.template.format(**error.context)
    except KeyError:
        context = error.context.copy()
        template_vars_re = re.compile(r'\{(\w+)')
        for match in template_vars_re.finditer(error.template):
            name = match.group(1)
            if name not in context:
                context[name] = UNKNOWN_VALUE
        return error.template.format(**context)


class UserError(BaseError):
    pass


class MalformedInput(UserError):
    template = "Performance report is not valid: {error}"
    context = {
        'file': None,
        'error': None,
    }


class UnsupportedAttributeValue(UserError):
    template = (
        "Cannot store value {value!r} of attribute {attribute!r}, only "
        "numbers and true/false values are supported."
    )
    context = {
        'file': None,
        'attribute': None,
        'value': None,
    }


class PartNotOpen(BaseError):
    template = "Database part {part!r} must be opened before use."


class DirectoryCreationFailure(BaseError):
    template = "Can't create directory {path} for database part {part!r}."


class InvalidPartType(BaseError):
    template = "Unknown database part type {part!r}."


class PartTypeMismatch(UserError):
    template = (
        "Database part {given!r} can't be installed as {part!r}, "
        "expected {expected!r}."
    )


class ViewAlreadyExists(UserError):
    template = "View with name {name!r} already exists."


class NodeNotFound(UserError):
    template = "Tree node {node!r} does not exist."
