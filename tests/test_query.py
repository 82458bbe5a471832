import json
import logging

import pytest

from prestql import PrestClient, HttpMethod, QueryState
from prestql import exc
from prestql.testing import StubTransport
from prestql.testing.stub import stub_response


BASE = 'http://prest.test/store/public/products'


def test_url_rendering(client: PrestClient):
    """ Fragments come in call order, aggregates always last """
    query = client.table('products').list()

    # Nothing: no query string
    assert query.url == BASE

    # Aggregates only: the trailing _select is the first fragment
    assert client.table('products').list().sum('amount').url == BASE + '?_select=sum:amount'

    # Everything, mixed
    query = client.table('products').list() \
        .group_by('category') \
        .sum('amount') \
        .select('category') \
        .filter_range('price', 10, 100) \
        .avg('price') \
        .order('-category') \
        .page(2)
    assert query.url == BASE + '?' + '&'.join([
        '_groupby=category',
        '_select=category',
        'price=$gte.10',
        'price=$lte.100',
        '_order=-category',
        '_page=2',
        '_select=sum:amount,avg:price',
    ])


def test_url_rendering_repeated_clauses(client: PrestClient):
    """ The same clause may be added many times: nothing is merged or deduplicated """
    query = client.table('products').list() \
        .filter_equal('a', 1) \
        .page(1) \
        .filter_equal('a', 2) \
        .page(2)
    assert query.url == BASE + '?a=1&_page=1&a=2&_page=2'


def test_execute_scenario_list(transport: StubTransport, client: PrestClient):
    """ list() + page() + select() against a stub """
    result = client.table('shop.products').list().page(1).select('id', 'name').execute()
    assert result == []

    # Exactly one request
    assert len(transport) == 1
    request = transport[0]
    assert request.method == HttpMethod.GET
    assert request.url == 'http://prest.test/store/shop/products?_page=1&_select=id%2Cname'
    assert request.body is None
    assert request.headers == {'Authorization': 'Basic dXNlcjpzZWNyZXQ='}


def test_execute_json(client: PrestClient, transport: StubTransport):
    """ JSON is decoded by default """
    transport.responses = [stub_response(200, json.dumps([{'id': 1, 'name': 'Chair'}]))]
    assert client.table('products').list().execute() == [{'id': 1, 'name': 'Chair'}]

    transport.responses = [stub_response(200, '{"count": 7}')]
    assert client.table('products').list().count().count_first().renderer('json').execute() == {'count': 7}


def test_execute_xml(client: PrestClient, transport: StubTransport):
    """ With renderer('xml'), the text is returned as is """
    transport.responses = [stub_response(200, '<objects><object><id>1</id></object></objects>')]
    result = client.table('products').list().renderer('xml').execute()
    assert result == '<objects><object><id>1</id></object></objects>'
    assert transport.urls == [BASE + '?_renderer=xml']


def test_execute_http_error(client: PrestClient, transport: StubTransport):
    """ A non-2xx status fails the query, and is not retried """
    transport.responses = [stub_response(404)]

    query = client.table('products').delete().filter_equal('id', 7)
    with pytest.raises(exc.RequestFailedError) as e:
        query.execute()

    assert e.value.status == 404
    assert e.value.reason == 'Not Found'
    assert e.value.method == 'DELETE'
    assert e.value.url == BASE + '?id=7'
    assert 'Not Found' in str(e.value)
    assert query.state == QueryState.REJECTED

    # No retries
    assert len(transport) == 1


def test_execute_transport_error(client: PrestClient, transport: StubTransport):
    """ Transport faults are reported as they are """
    transport.responses = [exc.RequestFailedError('Connection refused')]

    query = client.table('products').list()
    with pytest.raises(exc.RequestFailedError) as e:
        query.execute()

    assert e.value.status is None
    assert 'Connection refused' in str(e.value)
    assert query.state == QueryState.REJECTED
    assert len(transport) == 1


def test_execute_transport_error_wrapped(client: PrestClient, transport: StubTransport, caplog):
    """ Any exception from the transport becomes a RequestFailedError """
    transport.responses = [ConnectionResetError('peer reset')]

    query = client.table('products').list()
    with caplog.at_level(logging.WARNING, logger='prestql'):
        with pytest.raises(exc.RequestFailedError) as e:
            query.execute()

    assert e.value.status is None
    assert e.value.method == 'GET'
    assert e.value.url == BASE
    assert 'peer reset' in str(e.value)
    assert isinstance(e.value.__cause__, ConnectionResetError)
    assert query.state == QueryState.REJECTED

    # Logged as a failed request
    assert [r.levelno for r in caplog.records] == [logging.WARNING]
    assert 'peer reset' in caplog.records[0].getMessage()


def test_execute_closed_client(client: PrestClient):
    """ A closed client is not a request failure """
    query = client.table('products').list()
    client.close()

    with pytest.raises(exc.NotInitializedError) as e:
        query.execute()

    assert not isinstance(e.value, exc.RequestFailedError)
    assert query.state == QueryState.REJECTED


@pytest.mark.parametrize('response', [
    stub_response(404),
    stub_response(200, '<html>Oops</html>'),
    exc.RequestFailedError('Connection refused'),
])
def test_execute_failure_logged(client: PrestClient, transport: StubTransport, caplog, response):
    """ Every failed request leaves a warning """
    transport.responses = [response]

    with caplog.at_level(logging.DEBUG, logger='prestql'):
        with pytest.raises(exc.RequestFailedError):
            client.table('products').list().execute()

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert BASE in warnings[0].getMessage()

    # Credentials never get into the log
    assert not any('secret' in r.getMessage() or 'Basic' in r.getMessage() for r in caplog.records)


def test_execute_invalid_json(client: PrestClient, transport: StubTransport):
    """ A response that is not JSON fails the query """
    transport.responses = [stub_response(200, '<html>Oops</html>')]

    query = client.table('products').list()
    with pytest.raises(exc.RequestFailedError) as e:
        query.execute()

    assert e.value.status == 200
    assert isinstance(e.value.__cause__, json.JSONDecodeError)
    assert query.state == QueryState.REJECTED


def test_execute_once(client: PrestClient, transport: StubTransport):
    """ A query is executed once: then it can neither be modified nor executed again """
    query = client.table('products').list().page(1)
    assert query.state == QueryState.BUILDING

    query.execute()
    assert query.state == QueryState.RESOLVED

    with pytest.raises(exc.QueryStateError):
        query.execute()
    with pytest.raises(exc.QueryStateError):
        query.page(2)
    with pytest.raises(exc.QueryStateError):
        query.sum('amount')

    # Still one request, and the URL is unchanged
    assert transport.urls == [BASE + '?_page=1']
    assert query.url == BASE + '?_page=1'


def test_execute_once_after_failure(client: PrestClient, transport: StubTransport):
    """ A failed query cannot be executed again either """
    transport.responses = [stub_response(500)]
    query = client.table('products').list()

    with pytest.raises(exc.RequestFailedError):
        query.execute()
    with pytest.raises(exc.NotInitializedError):  # QueryStateError is a NotInitializedError
        query.execute()

    assert len(transport) == 1


@pytest.mark.parametrize(('make_query', 'expected_method', 'expected_url', 'expected_body'), [
    (lambda t: t.list(), HttpMethod.GET, BASE, None),
    (lambda t: t.show(), HttpMethod.GET, 'http://prest.test/show/store/public/products', None),
    (lambda t: t.insert({'name': 'Chair'}), HttpMethod.POST, BASE, {'name': 'Chair'}),
    (lambda t: t.batch_insert([{'name': 'Chair'}, {'name': 'Table'}]), HttpMethod.POST,
     'http://prest.test/batch/store/public/products', [{'name': 'Chair'}, {'name': 'Table'}]),
    (lambda t: t.update({'name': 'Sofa'}), HttpMethod.PUT, BASE, {'name': 'Sofa'}),
    (lambda t: t.delete(), HttpMethod.DELETE, BASE, None),
])
def test_execute_entry_points(client: PrestClient, transport: StubTransport, make_query, expected_method: HttpMethod, expected_url: str, expected_body):
    """ Every entry point: method, URL, body """
    query = make_query(client.table('products'))
    assert query.method == expected_method
    query.execute()

    request, = transport
    assert request.method == expected_method
    assert request.url == expected_url
    assert request.body == expected_body


def test_repr(client: PrestClient):
    query = client.table('products').list().page(1)
    assert repr(query) == f'<ChainedQuery GET {BASE}?_page=1 (building)>'
