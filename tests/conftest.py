import pytest

from prestql import PrestClient, ClientOptions
from prestql.testing import StubTransport


# Connection options used throughout the tests
OPTIONS = dict(
    base_url='http://prest.test',
    user_name='user',
    password='secret',
    database='store',
)


@pytest.fixture()
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture()
def client(transport: StubTransport) -> PrestClient:
    with PrestClient(ClientOptions(**OPTIONS), transport=transport) as c:
        yield c
