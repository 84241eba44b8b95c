import re
from typing import Mapping
from typing import Sequence

NULL = 'null'

BOOLEANS = {
    'true': 1.0,
    'false': 0.0,
}

# Plain decimal numbers, optionally with an exponent. Python specific literals
# (`1_000`, `inf`, `nan`, surrounding whitespace) are not numbers here.
NUMBER_RE = re.compile(r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?', re.ASCII)


def coerce_value(value: str) -> float:
    """Convert a raw attribute value to a number.

    Decimal numbers are parsed as floats, `true` and `false` (in any case)
    become 1.0 and 0.0. Raises ValueError for anything else.
    """
    if NUMBER_RE.fullmatch(value):
        return float(value)
    try:
        return BOOLEANS[value.lower()]
    except KeyError:
        raise ValueError(f"Not a number or a boolean: {value!r}.") from None


def get_attribute(attrs: Mapping[str, str], name: str) -> str:
    value = attrs.get(name)
    if value is None or value == NULL:
        return ''
    return value


def get_first_attribute(attrs: Mapping[str, str], names: Sequence[str]) -> str:
    # First attribute that is present wins, even if its value is `null`.
    for name in names:
        if name in attrs:
            return get_attribute(attrs, name)
    return ''
