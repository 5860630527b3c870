""" Class representations of a single exchange with the delivery API: the
    outbound :class:`Request`, the :class:`Response` that comes back, and
    the :class:`Completion` used to hand a final result back to the caller
    exactly once.
"""

import itertools
import logging
import threading
import time as timemodule
import urllib.parse

from .. import errors
from .. import json
from . import fields


logger = logging.getLogger(__name__)

DELIVERY_HOST = '%s.tt.omtrdc.net'
DELIVERY_PATH = '/rest/v1/delivery/'
CONTENT_TYPE = 'application/json'


class Completion:
    """ A :class:`Completion` signals that an operation is finished and
        holds its final result. It can be completed only once; any later
        attempt is ignored (and logged), which is what guarantees that a
        caller sees exactly one result even if a failure path and a success
        path both try to deliver.

        The optional *callback* is invoked with the result when the
        completion occurs; exceptions raised by the callback are logged and
        do not propagate to whoever completed the operation.

        :ivar result: The final result; None until the operation completes.
        :ivar data: Auxiliary data delivered along with the result, if any.
    """

    def __init__(self, callback=None):

        self.callback = callback
        self.result = None
        self.data = None
        self.rep_event = threading.Event()
        self._lock = threading.Lock()
        self._completed = False


    def _complete(self, result, data=None):
        """ Locally store the result, invoke the callback if any, and signal
            any callers blocking via :func:`wait` to proceed. Returns True if
            this call completed the operation, False if it had already been
            completed.
        """

        self._lock.acquire()

        if self._completed == True:
            self._lock.release()
            logger.debug('ignoring repeat completion of %r', self)
            return False

        self._completed = True
        self.result = result
        self.data = data
        self._lock.release()

        try:
            self._invoke(result)
        finally:
            self.rep_event.set()

        return True


    def _invoke(self, result):

        callback = self.callback

        if callback is None:
            return

        try:
            callback(result)
        except Exception:
            logger.exception('callback %r raised an exception', callback)


    def poll(self):
        """ Return True if the operation is complete, otherwise return False.
        """

        return self.rep_event.is_set()


    def wait(self, timeout=60):
        """ Block until the operation is complete. The result is always
            returned; it will be None if the operation is still pending after
            *timeout* seconds. If the *timeout* argument is None it will
            block indefinitely.
        """

        self.rep_event.wait(timeout)
        return self.result


# end of class Completion



class Request:
    """ A single HTTP exchange with the delivery API. The *payload* is the
        request document as a Python dictionary; it is encoded to JSON only
        when :func:`encode` is called. An identification number unique to
        this process is generated automatically; it is used only for
        logging and for matching a response to the request that produced it.

        :ivar url: The full URL, query string included.
        :ivar timeout: The network timeout in seconds.
        :ivar response: The :class:`Response`, once one has arrived.
    """

    def __init__(self, url, payload, timeout, id=None):

        if id is None:
            id = _id_next()

        self.id = id
        self.url = url
        self.payload = payload
        self.timeout = timeout
        self.headers = {'Content-Type': CONTENT_TYPE}
        self.timestamp = timemodule.time()
        self.response = None


    def __repr__(self):
        return 'Request(%d, %s)' % (self.id, self.url)


    def encode(self):
        return json.dumps(self.payload)


# end of class Request



class Response:
    """ The raw outcome of a :class:`Request`: an HTTP *status* code and the
        undecoded response *body*.
    """

    def __init__(self, status, body):

        self.status = status
        self.body = body
        self._decoded = None


    def __repr__(self):
        return 'Response(%d, %d bytes)' % (self.status, len(self.body or b''))


    @property
    def ok(self):
        return self.status == 200


    def json(self):
        """ Decode the response body. A body that is empty, is not valid JSON,
            or does not contain a JSON object raises
            :class:`mtarget.errors.ProtocolError`.
        """

        decoded = self._decoded

        if decoded is not None:
            return decoded

        body = self.body

        if body is None or len(body) == 0:
            raise errors.ProtocolError(errors.NULL_RESPONSE_JSON)

        try:
            decoded = json.loads(body)
        except json.JSONDecodeError:
            raise errors.ProtocolError(errors.NULL_RESPONSE_JSON)

        if isinstance(decoded, dict):
            pass
        else:
            raise errors.ProtocolError(errors.NULL_RESPONSE_JSON)

        self._decoded = decoded
        return decoded


    def error_message(self):
        """ Return the top-level error message carried by the response, if
            any; otherwise return None.
        """

        try:
            decoded = self.json()
        except errors.ProtocolError:
            return None

        message = decoded.get(fields.MESSAGE)

        if message is None or message == '':
            return None

        return str(message)


# end of class Response



def url(client_code, session_id, server=None, edge_host=None):
    """ Return the delivery URL for the given *client_code*. The host is the
        explicitly configured *server* if any, otherwise the sticky
        *edge_host* learned from a previous response, otherwise the default
        host derived from the client code.
    """

    if server:
        host = server
    elif edge_host:
        host = edge_host
    else:
        host = DELIVERY_HOST % (client_code)

    query = urllib.parse.urlencode((('client', client_code), ('sessionId', session_id)))
    return 'https://' + host + DELIVERY_PATH + '?' + query



def _id_next():
    """ Return the next request identification number for subroutines to
        use when constructing a :class:`Request`.
    """

    return next(_id_counter)


_id_counter = itertools.count(1)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
