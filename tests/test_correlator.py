from mtarget.correlator import Batch
from mtarget.location import LocationRequest
from mtarget.protocol.message import Completion


def batch_of(*names):
    requests = [LocationRequest(name, 'default ' + name) for name in names]
    return Batch('execute', requests), requests


def mbox(index, name, content=None):
    found = {'index': index, 'name': name}
    if content is not None:
        found['options'] = [{'content': content}]
    return found


def test_duplicate_names_are_matched_by_index():

    batch, requests = batch_of('same', 'same')

    # Response order differs from request order; only the index matters.
    decoded = {'execute': {'mboxes': [mbox(1, 'same', 'second'), mbox(0, 'same', 'first')]}}
    batch.deliver(decoded)

    assert requests[0].wait(0) == 'first'
    assert requests[1].wait(0) == 'second'


def test_names_are_not_trusted():

    batch, requests = batch_of('a', 'b')

    decoded = {'execute': {'mboxes': [mbox(0, 'b', 'for a'), mbox(1, 'a', 'for b')]}}
    batch.deliver(decoded)

    assert requests[0].wait(0) == 'for a'
    assert requests[1].wait(0) == 'for b'


def test_position_is_used_without_a_usable_index():

    batch, requests = batch_of('a', 'b')

    decoded = {'execute': {'mboxes': [
        {'name': 'a', 'options': [{'content': 'one'}]},
        {'index': 7, 'name': 'b', 'options': [{'content': 'two'}]},
    ]}}
    batch.deliver(decoded)

    assert requests[0].wait(0) == 'one'
    assert requests[1].wait(0) == 'two'


def test_missing_and_empty_mboxes_get_default_content():

    batch, requests = batch_of('a', 'b', 'c')

    decoded = {'execute': {'mboxes': [mbox(0, 'a', 'content a'), mbox(1, 'b')]}}
    pairs = batch.deliver(decoded)

    assert [request.name for request, found in pairs] == ['a', 'b']
    assert requests[0].wait(0) == 'content a'
    assert requests[1].wait(0) == 'default b'
    assert requests[2].wait(0) == 'default c'


def test_every_request_is_delivered_exactly_once():

    delivered = list()
    requests = [LocationRequest(name, 'default', callback=delivered.append) for name in ('a', 'b')]
    batch = Batch('execute', requests)

    batch.deliver({'execute': {'mboxes': [mbox(0, 'a', 'content')]}})
    batch.fail('late failure')
    batch.deliver({'execute': {'mboxes': [mbox(1, 'b', 'late content')]}})

    assert sorted(delivered) == ['content', 'default']


def test_data_is_delivered_with_content():

    received = list()

    def data_callback(content, data):
        received.append((content, data))

    request = LocationRequest('a', 'default', data_callback=data_callback)
    batch = Batch('execute', [request])

    found = mbox(0, 'a')
    found['options'] = [{'content': 'content', 'responseTokens': {'k': 'v'}}]
    batch.deliver({'execute': {'mboxes': [found]}})

    assert received == [('content', {'responseTokens': {'k': 'v'}})]
    assert request.data == {'responseTokens': {'k': 'v'}}


def test_failure_completes_the_batch():

    completion = Completion()
    batch = Batch('prefetch', [], completion=completion)
    batch.fail('failure')

    assert completion.wait(0) == 'failure'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
