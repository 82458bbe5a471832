""" Tools for building queries

Clauses only represent the structure of a query and render it into URL fragments.
ChainedQuery collects them and sends the request.
"""

from .chained import ChainedQuery, QueryState
from .encode import encode_value, encode_param

from .clauses import ClauseBase, OutputFormat, JoinType, AggregateFunction, AggregateField
from .clauses import PageClause, PageSizeClause
from .clauses import SelectClause, CountClause, CountFirstClause, DistinctClause, RendererClause
from .clauses import OrderClause, OrderingField, OrderingDirection, GroupByClause
from .clauses import FilterEqualClause, FilterOperatorClause, FilterRangeClause, JsonbFilterClause, TextSearchClause
from .clauses import JoinClause, HavingClause
