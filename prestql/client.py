""" PrestClient: the entry point """

from __future__ import annotations

import base64
from collections import abc
import logging
from typing import Any, Optional, Union

from prestql import exc
from prestql.query import ChainedQuery
from prestql.settings import ClientOptions
from prestql.table import TableRef
from prestql.transport import HttpMethod, HttpResponse, Transport, RequestsTransport
from prestql.typing import JSONValue, RowDict


logger = logging.getLogger(__name__)


class PrestClient:
    """ A client for a pREST gateway

    The client is ready as soon as it is constructed: the Authorization header is built right away.

    Example:
        with PrestClient({'base_url': 'http://localhost:3000', 'user_name': 'prest', 'password': 'prest', 'database': 'shop'}) as client:
            rows = client.table('products').list().page(1).execute()
    """
    # Connection options
    options: ClientOptions

    # Sends requests. None when the client is closed
    transport: Optional[Transport]

    def __init__(self, options: Union[ClientOptions, dict], transport: Optional[Transport] = None):
        """
        Args:
            options: Connection options, or a dict with the same keys
            transport: The transport to send requests with. Default: RequestsTransport()

        Raises:
            exc.InvalidArgumentError: invalid options
        """
        self.options = ClientOptions.ensure_options(options)
        self.transport = transport if transport is not None else RequestsTransport()

        # Headers shared by every request. Never modified after this point
        self._headers = {
            'Authorization': basic_auth_header(self.options.user_name, self.options.password),
        }

    @classmethod
    def from_env(cls, transport: Optional[Transport] = None) -> PrestClient:
        """ Create a client configured with environment variables

        See: ClientOptions.from_env()
        """
        return cls(ClientOptions.from_env(), transport=transport)

    @property
    def database(self) -> str:
        """ The database the client is connected to """
        return self.options.database

    @property
    def base_url(self) -> str:
        """ URL of the gateway """
        return self.options.base_url

    def table(self, identifier: str) -> Table:
        """ Get an object for interacting with a table

        Args:
            identifier: 'table', or 'schema.table'. Schema defaults to 'public'.
                'schema.' (with the dot) refers to the schema itself: list() then lists its tables.

        Raises:
            exc.InvalidArgumentError: empty table name
            exc.NotInitializedError: the client is closed
        """
        self._ensure_open()
        return Table(self, TableRef.resolve(identifier))

    def send(self, method: HttpMethod, url: str, body: Optional[JSONValue] = None) -> HttpResponse:
        """ Send one request with the client's credentials

        Used by ChainedQuery.execute(). Status codes are not checked here.

        Raises:
            exc.NotInitializedError: the client is closed
            exc.RequestFailedError: transport fault
        """
        transport = self._ensure_open()

        logger.debug('%s %s', method.value, url)
        res = transport.request(method, url, headers=dict(self._headers), body=body)
        logger.debug('%s %s -> %s', method.value, url, res.status)
        return res

    def close(self):
        """ Release the transport. The client cannot be used after that """
        if self.transport is not None:
            self.transport.close()
            self.transport = None

    def _ensure_open(self) -> Transport:
        if self.transport is None:
            raise exc.NotInitializedError('Client not initialized: it has been closed')
        return self.transport

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


class Table:
    """ Operations on one table

    Every method gives a new ChainedQuery: chain more calls, then execute() it
    """
    client: PrestClient
    ref: TableRef

    __slots__ = 'client', 'ref'

    def __init__(self, client: PrestClient, ref: TableRef):
        self.client = client
        self.ref = ref

    def __repr__(self):
        return f'<{type(self).__name__} {self.ref.schema_name}.{self.ref.table_name}>'

    def list(self) -> ChainedQuery:
        """ Query rows of the table: GET /database/schema/table

        With an empty table name ('schema.'), lists the tables of the schema
        """
        return self._query(HttpMethod.GET)

    def show(self) -> ChainedQuery:
        """ Get the structure of the table: GET /show/database/schema/table """
        return self._query(HttpMethod.GET, prefix='show')

    def insert(self, data: RowDict) -> ChainedQuery:
        """ Insert one row: POST /database/schema/table

        Example:
            client.table('categories').insert({'category_name': 'New', 'picture': '\\\\x'}).execute()
        """
        return self._query(HttpMethod.POST, body=data)

    def batch_insert(self, rows: abc.Sequence[RowDict]) -> ChainedQuery:
        """ Insert many rows with one request: POST /batch/database/schema/table """
        return self._query(HttpMethod.POST, body=rows, prefix='batch')

    def update(self, data: RowDict) -> ChainedQuery:
        """ Update rows: PUT /database/schema/table

        Chain filters to choose the rows:

            client.table('categories').update({'description': 'Updated'}).filter_equal('category_id', 12).execute()
        """
        return self._query(HttpMethod.PUT, body=data)

    def delete(self) -> ChainedQuery:
        """ Delete rows: DELETE /database/schema/table. Chain filters to choose the rows """
        return self._query(HttpMethod.DELETE)

    def _query(self, method: HttpMethod, body: Any = None, prefix: Optional[str] = None) -> ChainedQuery:
        self.client._ensure_open()
        base_url = self.client.base_url + self.ref.path(self.client.database, prefix=prefix)
        return ChainedQuery(self.client, base_url, method, body)


def basic_auth_header(user_name: str, password: str) -> str:
    """ Build the value of a Basic Authorization header """
    credentials = f'{user_name}:{password}'.encode('utf-8')
    return 'Basic ' + base64.b64encode(credentials).decode('ascii')
