""" Table reference: which schema & table a request is about """

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from prestql import exc


# The schema to use when the identifier does not name one
DEFAULT_SCHEMA = 'public'


def resolve_table(identifier: Optional[str]) -> tuple[str, str]:
    """ Split a table identifier into (schema, table)

    Only the first '.' splits: everything after it is the table name.

    Example:
        resolve_table('products') -> ('public', 'products')
        resolve_table('shop.products') -> ('shop', 'products')
        resolve_table('.products') -> ('public', 'products')
        resolve_table('shop.') -> ('shop', '')  # all tables of a schema

    Raises:
        exc.InvalidArgumentError: empty identifier
    """
    if not identifier:
        raise exc.InvalidArgumentError('Table name is required')
    if not isinstance(identifier, str):
        raise exc.InvalidArgumentError(f'Table name must be a string, "{type(identifier).__name__}" given')

    schema, dot, table = identifier.partition('.')
    if not dot:
        return DEFAULT_SCHEMA, identifier
    else:
        return schema or DEFAULT_SCHEMA, table


@dataclass(frozen=True)
class TableRef:
    """ A resolved table identifier

    An empty `table_name` refers to the schema itself: the gateway then lists its tables
    """
    schema_name: str
    table_name: str

    __slots__ = 'schema_name', 'table_name'

    @classmethod
    def resolve(cls, identifier: Optional[str]) -> TableRef:
        """ Resolve an identifier: 'table' or 'schema.table' """
        schema_name, table_name = resolve_table(identifier)
        return cls(schema_name=schema_name, table_name=table_name)

    def path(self, database: str, prefix: Optional[str] = None) -> str:
        """ Get the resource path: /[prefix/]database/schema/table

        Every segment is percent-encoded. Empty segments are left out.
        """
        segments = (prefix, database, self.schema_name, self.table_name)
        return ''.join(
            '/' + quote(segment, safe='')
            for segment in segments
            if segment
        )
