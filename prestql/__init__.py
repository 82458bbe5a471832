from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version('prestql')
except PackageNotFoundError:  # not installed: running from a source checkout
    __version__ = '0.0.0'

from .client import PrestClient, Table, basic_auth_header
from .settings import ClientOptions
from .table import TableRef, resolve_table
from .transport import HttpMethod, HttpResponse, Transport, RequestsTransport
from .query import ChainedQuery, QueryState

from . import query
from . import exc
