""" Transport: sends one HTTP request, gives back status & body """

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, NamedTuple, Optional, Protocol, Union

import requests

from prestql import exc


logger = logging.getLogger(__name__)


class HttpMethod(Enum):
    """ HTTP methods the gateway understands """
    GET = 'GET'
    POST = 'POST'
    PUT = 'PUT'
    DELETE = 'DELETE'

    @property
    def has_body(self) -> bool:
        """ Does a request with this method carry a JSON body? """
        return self in (HttpMethod.POST, HttpMethod.PUT)


class HttpResponse(NamedTuple):
    """ What a transport gives back """
    # HTTP status code
    status: int

    # HTTP status text, e.g. "Not Found"
    reason: str

    # Response body, decoded
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """ Anything that can send an HTTP request

    A transport only moves bytes: it does not check status codes and does not decode the body.
    A transport-level fault (connection refused, DNS, ...) is best reported as exc.RequestFailedError.
    ChainedQuery.execute() wraps any other exception into one
    """

    def request(self, method: HttpMethod, url: str, *, headers: dict[str, str], body: Any = None) -> HttpResponse:
        ...

    def close(self) -> None:
        ...


class RequestsTransport:
    """ Transport over `requests`

    One Session is used for all requests, so connections are reused.

    Example:
        transport = RequestsTransport(timeout=10)
        client = PrestClient(options, transport=transport)
    """

    def __init__(self, session: Optional[requests.Session] = None, *, timeout: Union[None, float, tuple[float, float]] = None):
        """
        Args:
            session: The session to use. The transport closes it on close()
            timeout: Passed to requests as is. None waits forever
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, method: HttpMethod, url: str, *, headers: dict[str, str], body: Any = None) -> HttpResponse:
        kwargs: dict[str, Any] = {}
        if method.has_body:
            # requests serializes the body and sets "Content-Type: application/json"
            kwargs['json'] = body

        try:
            res = self.session.request(method.value, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.debug('%s %s: %s', method.value, url, e)
            raise exc.RequestFailedError(str(e), method=method.value, url=url) from e

        return HttpResponse(status=res.status_code, reason=res.reason or '', text=res.text)

    def close(self) -> None:
        self.session.close()
