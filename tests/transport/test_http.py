import httpx
import pytest

import mtarget
from mtarget.protocol import message
from mtarget.transport import HttpTransport, TransportConnectionError, TransportTimeout


def make_request():
    url = message.url('unittest', 'session-1')
    return message.Request(url, {'execute': {'mboxes': [{'index': 0, 'name': 'a'}]}}, 3)


def test_post():

    seen = list()

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={'requestId': 'r1'})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    transport = HttpTransport(client)

    response = transport.send(make_request())

    assert response.status == 200
    assert response.json() == {'requestId': 'r1'}

    sent = seen[0]
    assert sent.method == 'POST'
    assert sent.url.host == 'unittest.tt.omtrdc.net'
    assert sent.url.params['client'] == 'unittest'
    assert sent.url.params['sessionId'] == 'session-1'
    assert sent.headers['content-type'] == 'application/json'
    assert mtarget.json.loads(sent.content)['execute']['mboxes'][0]['name'] == 'a'

    transport.close()


def test_error_status_is_not_an_exception():

    def handler(request):
        return httpx.Response(400, json={'message': 'failure'})

    transport = HttpTransport(httpx.Client(transport=httpx.MockTransport(handler)))
    response = transport.send(make_request())

    assert response.ok == False
    assert response.error_message() == 'failure'


def test_timeout():

    def handler(request):
        raise httpx.ReadTimeout('too slow', request=request)

    transport = HttpTransport(httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(TransportTimeout):
        transport.send(make_request())


def test_connection_error():

    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    transport = HttpTransport(httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(TransportConnectionError):
        transport.send(make_request())


def test_open_and_close():

    transport = HttpTransport()
    assert transport.is_open == False

    transport.open()
    assert transport.is_open == True

    transport.close()
    assert transport.is_open == False


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
