""" Query clauses: every chained call becomes one of these

Each clause knows how to export itself into URL fragments.
They do not interact with the network in any way.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from prestql import exc
from prestql.typing import ClauseValue

from .encode import encode_param, encode_value, join_field_list


class ClauseBase:
    """ Base class for clauses

    A clause is one parsed chained call. It exports into zero or more URL fragments
    """

    def export(self) -> list[str]:
        """ Export the clause into URL fragments, ready to be joined with '&' """
        raise NotImplementedError


class OutputFormat(Enum):
    """ Response renderers supported by the gateway """
    JSON = 'json'
    XML = 'xml'

    @classmethod
    def from_input(cls, value: str) -> OutputFormat:
        try:
            return cls(value)
        except ValueError:
            raise exc.InvalidArgumentError(f'"renderer" must be one of: json, xml; {value!r} given') from None


class JoinType(Enum):
    INNER = 'inner'
    LEFT = 'left'
    RIGHT = 'right'
    OUTER = 'outer'

    @classmethod
    def from_input(cls, value: str) -> JoinType:
        try:
            return cls(value)
        except ValueError:
            raise exc.InvalidArgumentError(f'"join" type must be one of: inner, left, right, outer; {value!r} given') from None


class AggregateFunction(Enum):
    """ SQL functions applied to a field by the gateway """
    SUM = 'sum'
    AVG = 'avg'
    MAX = 'max'
    MIN = 'min'
    STDDEV = 'stddev'
    VARIANCE = 'variance'


def _check_integer(argument_name: str, value: int) -> int:
    # bool is an int, but `_page=true` makes no sense
    if not isinstance(value, int) or isinstance(value, bool):
        raise exc.InvalidArgumentError(f'"{argument_name}" must be an integer')
    return value


# Characters with a meaning in the URL grammar
_SEPARATORS = ':$&='


def _check_field(argument_name: str, field: str) -> str:
    if not isinstance(field, str) or not field:
        raise exc.InvalidArgumentError(f'"{argument_name}" needs a field name')
    return field


# region Pager

@dataclass
class PageClause(ClauseBase):
    """ `_page=n`: the page to retrieve """
    page: int

    __slots__ = 'page',

    def __post_init__(self):
        _check_integer('page', self.page)

    def export(self) -> list[str]:
        return [encode_param('_page', self.page)]


@dataclass
class PageSizeClause(ClauseBase):
    """ `_page_size=n`: the number of rows per page """
    page_size: int

    __slots__ = 'page_size',

    def __post_init__(self):
        _check_integer('page_size', self.page_size)

    def export(self) -> list[str]:
        return [encode_param('_page_size', self.page_size)]

# endregion


# region Selection

@dataclass
class SelectClause(ClauseBase):
    """ `_select=a,b,c`: the fields to retrieve """
    fields: tuple[str, ...]

    __slots__ = 'fields',

    def __post_init__(self):
        join_field_list('select', self.fields)

    def export(self) -> list[str]:
        return [encode_param('_select', join_field_list('select', self.fields))]


@dataclass
class CountClause(ClauseBase):
    """ `_count=field`: count rows instead of returning them """
    field: str = '*'

    def export(self) -> list[str]:
        return [encode_param('_count', self.field or '*')]


@dataclass
class CountFirstClause(ClauseBase):
    """ `_count_first=true`: return the count as a single object rather than a list """
    count_first: bool = True

    def export(self) -> list[str]:
        return [encode_param('_count_first', self.count_first)]


@dataclass
class DistinctClause(ClauseBase):
    """ `_distinct=true`: remove duplicate rows """
    distinct: bool = True

    def export(self) -> list[str]:
        return [encode_param('_distinct', self.distinct)]


@dataclass
class RendererClause(ClauseBase):
    """ `_renderer=xml`: the output format of the response """
    renderer: OutputFormat

    __slots__ = 'renderer',

    def export(self) -> list[str]:
        return [encode_param('_renderer', self.renderer.value)]

# endregion


# region Sorting & grouping

class OrderingDirection(Enum):
    ASC = ''
    DESC = '-'


@dataclass
class OrderingField:
    name: str
    direction: OrderingDirection

    __slots__ = 'name', 'direction'

    @classmethod
    def from_input(cls, field: str) -> OrderingField:
        """ Parse a field string: `-name` is descending, `name` is ascending """
        _check_field('order', field)
        if field.startswith('-'):
            return cls(name=_check_field('order', field[1:]), direction=OrderingDirection.DESC)
        else:
            return cls(name=field, direction=OrderingDirection.ASC)

    def export(self) -> str:
        return f'{self.direction.value}{self.name}'


@dataclass
class OrderClause(ClauseBase):
    """ `_order=a,-b`: sorting

    The list is ordered: the first field has the highest priority
    """
    fields: list[OrderingField]

    __slots__ = 'fields',

    def __post_init__(self):
        join_field_list('order', [field.export() for field in self.fields])

    @classmethod
    def from_input(cls, fields: tuple[str, ...]) -> OrderClause:
        return cls(fields=[OrderingField.from_input(field) for field in fields])

    def export(self) -> list[str]:
        return [encode_param('_order', join_field_list('order', [field.export() for field in self.fields]))]


@dataclass
class GroupByClause(ClauseBase):
    """ `_groupby=a,b`: grouping for aggregate functions """
    fields: tuple[str, ...]

    __slots__ = 'fields',

    def __post_init__(self):
        join_field_list('group_by', self.fields)

    def export(self) -> list[str]:
        return [encode_param('_groupby', join_field_list('group_by', self.fields))]

# endregion


# region Filters

@dataclass
class FilterEqualClause(ClauseBase):
    """ `field=value`: the field must be equal to the value """
    field: str
    value: ClauseValue

    __slots__ = 'field', 'value'

    def __post_init__(self):
        _check_field('filter_equal', self.field)

    def export(self) -> list[str]:
        return [f'{self.field}={encode_value(self.value)}']


@dataclass
class FilterOperatorClause(ClauseBase):
    """ `field=$op.value`: compare the field using one of the gateway's operators

    Example:
        FilterOperatorClause('age', '$gt', 18)  ->  age=$gt.18
    """
    field: str
    operator: str
    value: ClauseValue

    __slots__ = 'field', 'operator', 'value'

    def __post_init__(self):
        _check_field('filter', self.field)
        if not self.operator:
            raise exc.InvalidArgumentError('"filter" needs an operator')
        if not self.operator.startswith('$'):
            self.operator = '$' + self.operator

    def export(self) -> list[str]:
        return [f'{self.field}={self.operator}.{encode_value(self.value)}']


@dataclass
class FilterRangeClause(ClauseBase):
    """ `field=$gte.start&field=$lte.end`: inclusive range

    Either bound may be omitted. With no bounds at all, nothing is exported
    """
    field: str
    start: Optional[ClauseValue] = None
    end: Optional[ClauseValue] = None

    def __post_init__(self):
        _check_field('filter_range', self.field)

    def export(self) -> list[str]:
        fragments = []
        if self.start is not None:
            fragments.append(f'{self.field}=$gte.{encode_value(self.start)}')
        if self.end is not None:
            fragments.append(f'{self.field}=$lte.{encode_value(self.end)}')
        return fragments


@dataclass
class JsonbFilterClause(ClauseBase):
    """ `field->>key:jsonb=value`: compare a key of a JSONB column """
    field: str
    json_field: str
    value: ClauseValue

    __slots__ = 'field', 'json_field', 'value'

    def __post_init__(self):
        _check_field('jsonb_filter', self.field)
        _check_field('jsonb_filter', self.json_field)

    def export(self) -> list[str]:
        return [f'{self.field}->>{self.json_field}:jsonb={encode_value(self.value)}']


@dataclass
class TextSearchClause(ClauseBase):
    """ `field:tsquery=query`, or `field$language:tsquery=query`: full-text search """
    field: str
    query: str
    language: Optional[str] = None

    def __post_init__(self):
        _check_field('text_search', self.field)
        if self.language is not None:
            _check_field('text_search', self.language)
            if any(c in self.language for c in _SEPARATORS):
                raise exc.InvalidArgumentError(f'"text_search" language must be a plain name; {self.language!r} given')

    def export(self) -> list[str]:
        language = f'${self.language}' if self.language is not None else ''
        return [f'{self.field}{language}:tsquery={encode_value(self.query)}']

# endregion


# region Joins & aggregates

@dataclass
class JoinClause(ClauseBase):
    """ `_join=inner:table:local_field:$eq:foreign_field` """
    join_type: JoinType
    table: str
    local_field: str
    operator: str
    foreign_field: str

    __slots__ = 'join_type', 'table', 'local_field', 'operator', 'foreign_field'

    def export(self) -> list[str]:
        return [f'_join={self.join_type.value}:{self.table}:{self.local_field}:{self.operator}:{self.foreign_field}']


@dataclass
class HavingClause(ClauseBase):
    """ `having:sum:field:$gt:value`: a condition on aggregated values """
    function: str
    field: str
    condition: str
    value: ClauseValue

    __slots__ = 'function', 'field', 'condition', 'value'

    def export(self) -> list[str]:
        return [f'having:{self.function}:{self.field}:{self.condition}:{encode_value(self.value)}']


@dataclass
class AggregateField:
    """ `sum:field`: one item of the trailing aggregate `_select` """
    function: AggregateFunction
    field: str

    __slots__ = 'function', 'field'

    def __post_init__(self):
        _check_field(self.function.value, self.field)

    def export(self) -> str:
        return f'{self.function.value}:{self.field}'

# endregion
