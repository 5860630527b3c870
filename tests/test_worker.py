import threading

import pytest

from mtarget.worker import Worker


@pytest.fixture
def worker():
    running = Worker('test-worker')
    yield running
    running.stop()


def test_submission_order(worker):

    seen = list()

    for number in range(100):
        worker.submit(seen.append, number)

    assert worker.sync(5) == True
    assert seen == list(range(100))


def test_single_thread(worker):

    threads = set()

    def remember():
        threads.add(threading.current_thread())

    for number in range(20):
        worker.submit(remember)

    worker.sync(5)
    assert threads == set((worker.thread,))


def test_call_returns_result(worker):

    assert worker.call(sum, (1, 2, 3)) == 6


def test_call_from_worker_thread(worker):

    def nested():
        return worker.call(lambda: 'inner')

    assert worker.call(nested) == 'inner'
    assert worker.call(lambda: worker.sync()) == True


def test_exceptions_do_not_stop_the_worker(worker):

    def broken():
        raise ValueError('broken on purpose')

    worker.submit(broken)
    assert worker.call(lambda: 'still alive') == 'still alive'


def test_call_propagates_nothing_on_error(worker):

    def broken():
        raise ValueError('broken on purpose')

    assert worker.call(broken) is None


def test_call_timeout(worker):

    gate = threading.Event()
    worker.submit(gate.wait, 5)

    with pytest.raises(TimeoutError):
        worker.call(lambda: None, timeout=0.05)

    gate.set()
    assert worker.sync(5) == True


def test_stop():

    stopped = Worker('stopped-worker')
    stopped.stop()
    stopped.thread.join(5)

    assert not stopped.thread.is_alive()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
