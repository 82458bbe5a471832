""" Tools for testing """

from .stub import StubTransport, RecordedRequest, stub_response
from .request_logger import RequestCounter, RequestLogger, ExpectedRequestCounter
