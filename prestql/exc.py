from __future__ import annotations

from typing import Optional


class BasePrestqlException(Exception):
    pass


class InvalidArgumentError(BasePrestqlException, ValueError):
    """ Invalid input provided by the caller

    Reported when a table identifier is empty, a connection option is missing,
    or a clause receives an argument it cannot render
    """


class NotInitializedError(BasePrestqlException):
    """ An operation was invoked on something that is not ready to perform it

    Reported when a closed client is used
    """


class QueryStateError(NotInitializedError):
    """ A query was modified or executed after it had been executed already

    A ChainedQuery performs exactly one request. Build a new one to repeat it.
    """

    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f'Cannot {action}: the query is already {state}')


class RequestFailedError(BasePrestqlException):
    """ The gateway did not answer with a success, or could not be reached at all

    Attributes:
        status: HTTP status code; `None` when the failure happened before a response was received
        reason: HTTP status text, or the message of the underlying fault
        method: HTTP method of the failed request
        url: URL of the failed request
    """

    def __init__(self, reason: str, *, status: Optional[int] = None, method: Optional[str] = None, url: Optional[str] = None):
        self.status = status
        self.reason = reason
        self.method = method
        self.url = url

        if status is None:
            super().__init__(f'Failed to make API request: {reason}')
        else:
            super().__init__(f'Failed to make API request: {status} {reason}')
