""" Percent-encoding of values that go into a query string """

from __future__ import annotations

from collections import abc
from urllib.parse import quote

from prestql import exc
from prestql.typing import ClauseValue


# Characters that encodeURIComponent() leaves as-is. The gateway decodes with the same rules.
_SAFE_CHARACTERS = "-_.!~*'()"


def stringify_value(value: ClauseValue) -> str:
    """ Render a value the way it appears in a query string, before encoding

    Booleans are lowercase: `true`, `false`
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    elif value is None:
        return ''
    else:
        return str(value)


def encode_value(value: ClauseValue) -> str:
    """ Percent-encode a single value

    Example:
        encode_value('fat & rat') -> 'fat%20%26%20rat'
    """
    return quote(stringify_value(value), safe=_SAFE_CHARACTERS)


def encode_param(name: str, value: ClauseValue) -> str:
    """ Encode a reserved `name=value` parameter. The name is never encoded. """
    return f'{name}={encode_value(value)}'


def join_field_list(argument_name: str, fields: abc.Iterable[str]) -> str:
    """ Join field names into a comma-separated list

    Raises:
        exc.InvalidArgumentError: empty list, or a field name that contains a comma
    """
    fields = list(fields)
    if not fields:
        raise exc.InvalidArgumentError(f'"{argument_name}" needs at least one field')

    for field in fields:
        if not isinstance(field, str) or not field:
            raise exc.InvalidArgumentError(f'"{argument_name}": field names must be non-empty strings, {field!r} given')
        if ',' in field:
            raise exc.InvalidArgumentError(f'"{argument_name}": field name {field!r} must not contain a comma')

    return ','.join(fields)
