""" ChainedQuery: the fluent query builder """

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

from prestql import exc
from prestql.transport import HttpMethod
from prestql.typing import ClauseValue, JSONValue

from .clauses import (
    ClauseBase,
    OutputFormat, JoinType, AggregateFunction, AggregateField,
    PageClause, PageSizeClause,
    SelectClause, CountClause, CountFirstClause, DistinctClause, RendererClause,
    OrderClause, GroupByClause,
    FilterEqualClause, FilterOperatorClause, FilterRangeClause, JsonbFilterClause, TextSearchClause,
    JoinClause, HavingClause,
)


if TYPE_CHECKING:
    from prestql.client import PrestClient


logger = logging.getLogger(__name__)


class QueryState(Enum):
    """ Lifecycle of a ChainedQuery. There is no way back to BUILDING """
    BUILDING = 'building'
    EXECUTING = 'executing'
    RESOLVED = 'resolved'
    REJECTED = 'rejected'


class ChainedQuery:
    """ A query against one table of the gateway, built by chaining calls

    Every chained call adds a clause and returns the same object.
    When the query is complete, execute() renders the URL, makes exactly one request, and decodes the response.

    Example:
        rows = client.table('shop.products').list() \\
            .select('id', 'name') \\
            .filter_range('price', 10, 100) \\
            .order('-price') \\
            .page(1).page_size(20) \\
            .execute()
    """
    # The client that sends the request
    client: PrestClient

    # URL of the resource, without the query string
    base_url: str

    # HTTP method and the body to send with POST and PUT
    method: HttpMethod
    body: Optional[JSONValue]

    # How to decode the response. Set by renderer()
    output_format: OutputFormat

    # Clauses, in the order they were added. Order matters: it is preserved in the URL
    clauses: list[ClauseBase]

    # Aggregate functions. They go into one `_select` fragment at the very end of the URL
    aggregates: list[AggregateField]

    # Where in its lifecycle the query is
    state: QueryState

    def __init__(self, client: PrestClient, base_url: str, method: HttpMethod, body: Optional[JSONValue] = None):
        """ Prepare a query

        Args:
            client: The client to send the request with
            base_url: Full URL of the resource, without the query string
            method: HTTP method
            body: Data to send with POST and PUT requests. Ignored for other methods
        """
        self.client = client
        self.base_url = base_url
        self.method = method
        self.body = body
        self.output_format = OutputFormat.JSON
        self.clauses = []
        self.aggregates = []
        self.state = QueryState.BUILDING

    def __repr__(self):
        return f'<{type(self).__name__} {self.method.value} {self.url} ({self.state.value})>'

    # region Pager

    def page(self, page: int) -> ChainedQuery:
        """ Retrieve this page of results

        Example:
            client.table('products').list().page(2).page_size(10)
        """
        return self.add_clause(PageClause(page))

    def page_size(self, page_size: int) -> ChainedQuery:
        """ The number of rows per page """
        return self.add_clause(PageSizeClause(page_size))

    # endregion

    # region Selection

    def select(self, *fields: str) -> ChainedQuery:
        """ Only return these fields

        Example:
            client.table('products').list().select('id', 'name', 'price')
        """
        return self.add_clause(SelectClause(fields))

    def count(self, field: Optional[str] = None) -> ChainedQuery:
        """ Count rows, optionally counting non-null values of a field. Default: '*' """
        return self.add_clause(CountClause(field or '*'))

    def count_first(self, count_first: bool = True) -> ChainedQuery:
        """ Return the count as an object rather than as a list of one object """
        return self.add_clause(CountFirstClause(count_first))

    def renderer(self, renderer: str) -> ChainedQuery:
        """ Ask the gateway for 'json' (default) or 'xml'

        With 'xml', execute() returns the response text as is: it is not parsed
        """
        output_format = OutputFormat.from_input(renderer)
        self.add_clause(RendererClause(output_format))
        self.output_format = output_format
        return self

    def distinct(self, distinct: bool = True) -> ChainedQuery:
        """ Remove duplicate rows """
        return self.add_clause(DistinctClause(distinct))

    # endregion

    # region Sorting & grouping

    def order(self, *fields: str) -> ChainedQuery:
        """ Sort the results

        A '-' prefix sorts in descending order. The first field has the highest priority.

        Example:
            client.table('products').list().order('price', '-name')
        """
        return self.add_clause(OrderClause.from_input(fields))

    def group_by(self, *fields: str) -> ChainedQuery:
        """ Group rows. Use with aggregate functions: sum(), avg(), ...

        Example:
            client.table('sales').list().group_by('category').sum('amount')
        """
        return self.add_clause(GroupByClause(fields))

    # endregion

    # region Filters

    def filter_equal(self, field: str, value: ClauseValue) -> ChainedQuery:
        """ The field must be equal to the value """
        return self.add_clause(FilterEqualClause(field, value))

    def filter(self, field: str, operator: str, value: ClauseValue) -> ChainedQuery:
        """ Compare the field using a gateway operator: $eq, $ne, $gt, $gte, $lt, $lte, $in, $nin, $like, ...

        Example:
            client.table('users').list().filter('age', '$gt', 18)  # age=$gt.18
        """
        return self.add_clause(FilterOperatorClause(field, operator, value))

    def filter_range(self, field: str, start: Optional[ClauseValue] = None, end: Optional[ClauseValue] = None) -> ChainedQuery:
        """ The field must be within the range. Both bounds are inclusive, and each is optional

        Example:
            client.table('categories').list().filter_range('category_id', 200, 300)
            client.table('categories').list().filter_range('category_id', 200)
        """
        return self.add_clause(FilterRangeClause(field, start, end))

    def jsonb_filter(self, field: str, json_field: str, value: ClauseValue) -> ChainedQuery:
        """ A key of a JSONB column must be equal to the value

        Example:
            client.table('mock_json').list().jsonb_filter('jsonb_data', 'tags', 1)
        """
        return self.add_clause(JsonbFilterClause(field, json_field, value))

    def text_search(self, field: str, query: str, language: Optional[str] = None) -> ChainedQuery:
        """ Full-text search with tsquery syntax

        Example:
            client.table('documents').list().text_search('content', 'fat & rat')
            client.table('documents').list().text_search('content', 'gato & cão', 'portuguese')
        """
        return self.add_clause(TextSearchClause(field, query, language))

    # endregion

    # region Joins & aggregates

    def join(self, join_type: str, table: str, local_field: str, operator: str, foreign_field: str) -> ChainedQuery:
        """ Join another table

        Example:
            client.table('categories').list() \\
                .join('inner', 'products', 'categories.category_id', '$eq', 'products.category_id')
        """
        return self.add_clause(JoinClause(JoinType.from_input(join_type), table, local_field, operator, foreign_field))

    def having(self, function: str, field: str, condition: str, value: ClauseValue) -> ChainedQuery:
        """ A condition on aggregated values

        Example:
            client.table('categories').list() \\
                .group_by('category_id') \\
                .sum('category_id') \\
                .having('sum', 'category_id', '$gt', 5)
        """
        return self.add_clause(HavingClause(function, field, condition, value))

    def sum(self, field: str) -> ChainedQuery:
        return self.add_aggregate(AggregateFunction.SUM, field)

    def avg(self, field: str) -> ChainedQuery:
        return self.add_aggregate(AggregateFunction.AVG, field)

    def max(self, field: str) -> ChainedQuery:
        return self.add_aggregate(AggregateFunction.MAX, field)

    def min(self, field: str) -> ChainedQuery:
        return self.add_aggregate(AggregateFunction.MIN, field)

    def std_dev(self, field: str) -> ChainedQuery:
        return self.add_aggregate(AggregateFunction.STDDEV, field)

    def variance(self, field: str) -> ChainedQuery:
        return self.add_aggregate(AggregateFunction.VARIANCE, field)

    # endregion

    # region Accumulation

    def add_clause(self, clause: ClauseBase) -> ChainedQuery:
        """ Add a clause to the end of the query

        Use it with custom ClauseBase subclasses to get fragments the builder has no method for.

        Raises:
            exc.QueryStateError: the query has already been executed
        """
        self._ensure_building('add a clause')
        self.clauses.append(clause)
        return self

    def add_aggregate(self, function: AggregateFunction, field: str) -> ChainedQuery:
        """ Add an aggregate function to the trailing `_select` """
        self._ensure_building('add an aggregate')
        self.aggregates.append(AggregateField(function, field))
        return self

    def _ensure_building(self, action: str):
        if self.state is not QueryState.BUILDING:
            raise exc.QueryStateError(self.state.value, action)

    # endregion

    # region Rendering & execution

    @property
    def fragments(self) -> list[str]:
        """ All URL fragments, in order. Aggregates come last """
        fragments = [
            fragment
            for clause in self.clauses
            for fragment in clause.export()
        ]

        if self.aggregates:
            fragments.append('_select=' + ','.join(aggregate.export() for aggregate in self.aggregates))

        return fragments

    @property
    def url(self) -> str:
        """ The full URL of the request: base URL + query string """
        fragments = self.fragments
        if not fragments:
            return self.base_url
        else:
            return self.base_url + '?' + '&'.join(fragments)

    def execute(self) -> Any:
        """ Send the request and decode the response

        Can only be called once.

        Returns:
            With 'json' output: the decoded JSON value
            With 'xml' output: the response text as is

        Raises:
            exc.QueryStateError: the query has already been executed
            exc.NotInitializedError: the client is closed
            exc.RequestFailedError: non-2xx status, transport fault, or an invalid JSON response
        """
        self._ensure_building('execute')
        url = self.url
        body = self.body if self.method.has_body else None

        # Send
        self.state = QueryState.EXECUTING
        try:
            res = self.client.send(self.method, url, body)
        except exc.RequestFailedError as e:
            self.state = QueryState.REJECTED
            logger.warning('%s %s failed: %s', self.method.value, url, e.reason)
            raise
        except exc.BasePrestqlException:
            self.state = QueryState.REJECTED
            raise
        except Exception as e:
            # Whatever the transport raised, the caller gets a RequestFailedError
            self.state = QueryState.REJECTED
            logger.warning('%s %s failed: %s', self.method.value, url, e)
            raise exc.RequestFailedError(str(e) or type(e).__name__, method=self.method.value, url=url) from e

        # Check status
        if not res.ok:
            self.state = QueryState.REJECTED
            logger.warning('%s %s failed: %s %s', self.method.value, url, res.status, res.reason)
            raise exc.RequestFailedError(res.reason, status=res.status, method=self.method.value, url=url)

        # Decode
        try:
            result = self._decode_response(res.text)
        except ValueError as e:
            self.state = QueryState.REJECTED
            logger.warning('%s %s failed: invalid JSON in response: %s', self.method.value, url, e)
            raise exc.RequestFailedError(f'Invalid JSON in response: {e}', status=res.status, method=self.method.value, url=url) from e

        self.state = QueryState.RESOLVED
        return result

    def _decode_response(self, text: str) -> Any:
        if self.output_format is OutputFormat.JSON:
            return json.loads(text)
        else:
            return text

    # endregion
