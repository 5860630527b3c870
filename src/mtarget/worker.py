""" The single background thread on which all engine state is mutated.
"""

import logging
import queue
import threading

from .protocol.message import Completion


logger = logging.getLogger(__name__)


class _WorkerWake(RuntimeError):
    pass


class Worker:
    """ Background thread draining a queue of work items in submission order.
        Any thread may :func:`submit` work; only the worker thread ever runs
        it, so the state touched by work items needs no locking of its own.
        An exception raised by a work item is logged and does not stop the
        thread.
    """

    def __init__(self, name='mtarget'):

        self.queue = queue.SimpleQueue()
        self.shutdown = False

        self.thread = threading.Thread(target=self.run, name=name)
        self.thread.daemon = True
        self.thread.start()


    def run(self):

        while True:
            if self.shutdown == True:
                break

            try:
                dequeued = self.queue.get(timeout=300)
            except queue.Empty:
                continue

            if isinstance(dequeued, _WorkerWake):
                continue

            method, args = dequeued

            try:
                method(*args)
            except Exception:
                logger.exception('unhandled exception in %r', method)


    def submit(self, method, *args):
        """ Queue ``method(*args)`` to run on the worker thread.
        """

        self.queue.put((method, args))


    def call(self, method, *args, timeout=60):
        """ Run ``method(*args)`` on the worker thread and return its result,
            blocking the caller until it has run. If called from the worker
            thread itself the method runs immediately.
        """

        if threading.current_thread() is self.thread:
            return method(*args)

        completion = Completion()

        def invoke():
            result = None
            try:
                result = method(*args)
            finally:
                completion._complete(result)

        self.submit(invoke)

        if completion.rep_event.wait(timeout):
            return completion.result

        raise TimeoutError('no result from the worker after %s seconds' % (timeout))


    def sync(self, timeout=60):
        """ Block until everything submitted before this call has run.
            Returns False if that did not happen within *timeout* seconds.
        """

        if threading.current_thread() is self.thread:
            return True

        completion = Completion()
        self.submit(completion._complete, True)
        return completion.rep_event.wait(timeout)


    def stop(self):
        self.shutdown = True
        self.wake()


    def wake(self):
        self.queue.put(_WorkerWake())


# end of class Worker


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
