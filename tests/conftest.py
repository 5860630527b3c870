import threading

import pytest

import mtarget
from mtarget.protocol import message
from mtarget.transport import Transport, TransportTimeout


CLIENT_CODE = 'unittest'

CONFIGURATION = {
    'global.privacy': 'optedin',
    'target.clientCode': CLIENT_CODE,
    'target.timeout': 5,
}


def reply(document, status=200):
    """ Wrap a response *document* as a :class:`message.Response`.
    """

    if isinstance(document, (bytes, str)):
        body = document
        if isinstance(body, str):
            body = body.encode()
    else:
        body = mtarget.json.dumps(document)

    return message.Response(status, body)


def echo(request):
    """ Respond to every mbox in the request as a well-behaved server would:
        content named after the mbox, a display token on every option, and a
        click metric on every mbox. The index is echoed back unchanged.
    """

    payload = request.payload
    document = dict()
    document['requestId'] = 'request-%d' % (request.id)
    document['client'] = CLIENT_CODE
    document['id'] = {'tntId': 'tnt-from-server'}
    document['edgeHost'] = 'mboxedge35.tt.omtrdc.net'

    for kind in ('execute', 'prefetch'):
        try:
            mboxes = payload[kind]['mboxes']
        except KeyError:
            continue

        echoed = list()

        for mbox in mboxes:
            name = mbox['name']
            echoed.append({
                'index': mbox['index'],
                'name': name,
                'state': 'state-' + name,
                'options': [{
                    'content': 'content for ' + name,
                    'type': 'html',
                    'eventToken': 'display-' + name,
                    'responseTokens': {'activity.id': '42'},
                }],
                'metrics': [{
                    'type': 'click',
                    'eventToken': 'click-' + name,
                    'analytics': {'payload': {'pe': 'tnt', 'tnta': 'click'}},
                }],
                'analytics': {'payload': {'pe': 'tnt', 'tnta': name}},
            })

        document[kind] = {'mboxes': echoed}

    return reply(document)


class FakeTransport(Transport):
    """ A transport that never touches the network: every request is
        recorded, and the response comes from the *responder* callable.
    """

    def __init__(self, responder=echo):
        self.responder = responder
        self.requests = list()
        self.lock = threading.Lock()
        self.opened = True

    def open(self):
        self.opened = True

    def close(self):
        self.opened = False

    @property
    def is_open(self):
        return self.opened

    def send(self, request):
        with self.lock:
            self.requests.append(request)
        return self.responder(request)

    @property
    def payloads(self):
        with self.lock:
            return [request.payload for request in self.requests]


def timeout(request):
    raise TransportTimeout('simulated timeout')


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def target(tmp_path, transport):

    engine = mtarget.Target(CONFIGURATION, transport=transport, directory=str(tmp_path))
    yield engine
    engine.close()


@pytest.fixture
def make_target(tmp_path):
    """ Factory for engines sharing one state directory, for tests that
        need to restart the engine.
    """

    created = list()

    def make(configuration=CONFIGURATION, transport=None, **kwargs):
        if transport is None:
            transport = FakeTransport()
        engine = mtarget.Target(configuration, transport=transport, directory=str(tmp_path), **kwargs)
        created.append(engine)
        return engine

    yield make

    for engine in created:
        engine.close()

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
