""" The :class:`Target` engine: the public entry point for retrieving,
    prefetching and tracking content from the delivery API.
"""

import concurrent.futures
import logging
import threading
import time

from . import config
from . import errors
from . import parameters as params
from .cache import PrefetchCache
from .correlator import Batch
from .location import LocationRequest, PrefetchRequest
from .notifications import Tracker
from .protocol import builder
from .protocol import fields
from .protocol import message
from .protocol import parser
from .state import State
from .store import Store
from .transport import HttpTransport, TransportError, TransportTimeout
from .worker import Worker


logger = logging.getLogger(__name__)

# Batch kinds other than execute and prefetch.

RAW = 'raw'
NOTIFY = None


class Target:
    """ A :class:`Target` owns all of the state needed to talk to the
        delivery API on behalf of one application: the identifiers and
        session, the prefetch cache, and the notification bookkeeping.
        Nothing is shared between instances.

        Every public method returns promptly. Work is handed to a single
        background worker thread, which processes it strictly in submission
        order; network requests run on a small thread pool and their
        responses are handed back to the same worker. Results reach the
        caller through callbacks, or through the :class:`Completion
        <mtarget.protocol.message.Completion>` objects the methods return.
        No method raises because of a failed request: failures are
        delivered as default content, None, or an error string, as
        documented per method.

        The *configuration* is a :class:`mtarget.config.Configuration` or a
        plain dictionary; if omitted, the last configuration applied by a
        previous instance using the same *directory* is used. The
        *transport* defaults to a :class:`mtarget.transport.HttpTransport`.
        The *analytics_handler*, if provided, is called with every A4T
        analytics payload; the *shared_state_listener*, if provided, is
        called with :func:`shared_state` whenever an identifier changes.
        Both are called on the worker thread.
    """

    def __init__(self, configuration=None, transport=None, directory=None,
                 device=None, analytics_handler=None,
                 shared_state_listener=None, clock=time.time, network_threads=4):

        if directory is None:
            directory = config.directory()

        if transport is None:
            transport = HttpTransport()

        if device is None:
            device = builder.Device()

        self.directory = directory
        self.transport = transport
        self.device = device
        self.analytics_handler = analytics_handler
        self.shared_state_listener = shared_state_listener

        identifiers = Store('identifiers', directory)
        configuration_store = Store('configuration', directory)

        self.state = State(identifiers, configuration_store, clock)
        self.cache = PrefetchCache()
        self.tracker = Tracker(clock)

        self.identity = dict()
        self.lifecycle = dict()
        self.attached_profile = dict()

        self._in_flight = set()
        self._in_flight_lock = threading.Lock()

        self.executor = concurrent.futures.ThreadPoolExecutor(network_threads, thread_name_prefix='mtarget-network')
        self.worker = Worker()
        self.closed = False

        if configuration is not None:
            self.update_configuration(configuration)


    def __enter__(self):
        return self


    def __exit__(self, *args):
        self.close()


    # Public interface. Everything here runs on the caller's thread, and
    # does no more than validate arguments and queue work for the worker.

    def update_configuration(self, configuration):
        """ Apply a new configuration. A change of client code forgets the
            edge host; a privacy status of opted out clears the identifiers,
            the prefetch cache, and every pending notification.
        """

        if isinstance(configuration, config.Configuration):
            pass
        else:
            configuration = config.Configuration(configuration)

        self.worker.submit(self._update_configuration, configuration)


    def update_identity(self, snapshot):
        """ Replace the identity snapshot (marketing cloud visitor id,
            customer ids, audience manager blob and location hint) sent with
            subsequent requests.
        """

        self.worker.submit(self._update_snapshot, 'identity', dict(snapshot or {}))


    def update_lifecycle(self, data):
        """ Replace the lifecycle context data sent as mbox parameters.
        """

        self.worker.submit(self._update_snapshot, 'lifecycle', dict(data or {}))


    def update_attached_profile(self, data):
        """ Replace the attached profile data; these only fill in profile
            parameters that a request does not set itself.
        """

        self.worker.submit(self._update_snapshot, 'attached_profile', dict(data or {}))


    def retrieve_location_content(self, requests, parameters=None):
        """ Retrieve content for every :class:`mtarget.location.LocationRequest`
            in *requests*, all in one network request. Content previously
            prefetched is delivered from the prefetch cache instead, and that
            cache entry is consumed. The global *parameters* apply to every
            request, with each request's own parameters taking precedence;
            a plain mapping is accepted as the mbox parameters group.

            Every request is delivered exactly once: content, or its default
            content on any failure. The *requests* are returned for
            convenience.
        """

        requests = list(requests or ())

        if len(requests) == 0:
            logger.warning('retrieve_location_content: %s', errors.NO_TARGET_REQUESTS)
            return requests

        for request in requests:
            if isinstance(request, LocationRequest):
                pass
            else:
                raise TypeError('expected a LocationRequest, got ' + repr(request))

        parameters = params.coerce(parameters)
        self.worker.submit(self._retrieve, requests, parameters)
        return requests


    def prefetch_content(self, prefetches, parameters=None, callback=None):
        """ Prefetch the content for every
            :class:`mtarget.location.PrefetchRequest` in *prefetches* into
            the prefetch cache. The returned completion, and the *callback*
            if any, receive None on success or an error string.
        """

        completion = message.Completion(callback)
        prefetches = list(prefetches or ())
        parameters = params.coerce(parameters)

        for prefetch in prefetches:
            if isinstance(prefetch, PrefetchRequest):
                pass
            else:
                raise TypeError('expected a PrefetchRequest, got ' + repr(prefetch))

        self.worker.submit(self._prefetch, prefetches, parameters, completion)
        return completion


    def locations_displayed(self, names, parameters=None):
        """ Send a display notification for each of the mbox *names* that was
            prefetched. Names that were never prefetched are ignored; if none
            were, nothing is sent.
        """

        names = list(names or ())
        parameters = params.coerce(parameters)
        self.worker.submit(self._displayed, names, parameters)


    def location_clicked(self, name, parameters=None):
        """ Send a click notification for the mbox *name*, if the response
            that delivered it carried a click metric. Otherwise nothing is
            sent.
        """

        parameters = params.coerce(parameters)
        self.worker.submit(self._clicked, name, parameters)


    def execute_raw_request(self, document, callback=None):
        """ Send a caller-built request *document* (with ``execute`` and/or
            ``prefetch`` nodes, plus optionally ``id``, ``context``,
            ``experienceCloud``, ``property``, ``environmentId`` and
            ``notifications``) and deliver the decoded response. The
            returned completion, and the *callback* if any, receive the
            response dictionary, or None if nothing was sent or the request
            failed. The prefetch cache is not involved.
        """

        completion = message.Completion(callback)
        self.worker.submit(self._execute_raw, document, completion)
        return completion


    def send_raw_notifications(self, document):
        """ Send the ``notifications`` of a caller-built request *document*.
            No response is delivered.
        """

        self.worker.submit(self._send_raw_notifications, document)


    def set_third_party_id(self, third_party_id):
        self.worker.submit(self._set_third_party_id, third_party_id)


    def get_third_party_id(self):
        return self.worker.call(lambda: self.state.third_party_id)


    def set_tnt_id(self, tnt_id):
        self.worker.submit(self._set_tnt_id, tnt_id)


    def get_tnt_id(self):
        return self.worker.call(lambda: self.state.tnt_id)


    def set_session_id(self, session_id):
        self.worker.submit(self.state.update_session_id, session_id)


    def get_session_id(self):
        """ Return the current session id, starting a new session if there
            is none or the previous one has expired.
        """

        return self.worker.call(lambda: self.state.session_id)


    def reset_experience(self):
        """ Forget the identifiers, the session and the edge host, and clear
            the prefetch cache along with every pending notification.
        """

        self.worker.submit(self._reset_experience)


    def clear_prefetch_cache(self):
        self.worker.submit(self._clear_prefetch_cache)


    def shared_state(self):
        """ Return a snapshot of the identifiers, as published to the
            *shared_state_listener*.
        """

        return self.worker.call(self.state.shared)


    def sync(self, timeout=10):
        """ Block until all queued work, and every network request it started,
            has been processed. Returns False if that did not happen within
            *timeout* seconds.
        """

        deadline = time.monotonic() + timeout

        while True:
            remaining = deadline - time.monotonic()

            if remaining <= 0:
                return False

            if self.worker.sync(remaining) == False:
                return False

            self._in_flight_lock.acquire()
            pending = tuple(self._in_flight)
            self._in_flight_lock.release()

            if len(pending) == 0:
                return True

            remaining = deadline - time.monotonic()
            done, not_done = concurrent.futures.wait(pending, timeout=max(remaining, 0))

            if not_done:
                return False

            # The done callbacks hand the responses to the worker; give them
            # a moment to be queued before synchronizing with the worker again.
            time.sleep(0.001)


    def close(self):
        """ Wait for outstanding work, then release the worker thread, the
            network threads, and the transport. Closing more than once is
            harmless.
        """

        if self.closed == True:
            return

        self.closed = True
        self.sync()
        self.executor.shutdown(wait=True)
        self.worker.sync()
        self.worker.stop()
        self.transport.close()


    # Worker side. Everything below runs on the worker thread.

    def _update_configuration(self, configuration):

        self.state.update_configuration(configuration)

        if configuration.opted_out:
            logger.debug('privacy opted out, clearing identifiers and cached content')
            self._reset_experience()


    def _update_snapshot(self, attribute, value):
        setattr(self, attribute, value)


    def _check_ready(self):
        """ Raise the appropriate :class:`mtarget.errors.TargetError` if no
            request should be sent right now.
        """

        configuration = self.state.configuration

        if configuration.client_code == '':
            raise errors.ConfigurationError()

        if configuration.opted_in:
            pass
        else:
            raise errors.PrivacyError()


    def _builder(self):

        configuration = self.state.configuration

        request = builder.RequestBuilder(self.device)
        request.identifiers(self.state.tnt_id, self.state.third_party_id)
        request.identity(self.identity)
        request.environment(configuration.environment_id)
        request.property_token(configuration.property_token)
        request.lifecycle(self.lifecycle)
        request.attached_profile(self.attached_profile)

        return request


    def _retrieve(self, requests, parameters):

        try:
            self._retrieve_content(requests, parameters)
        except Exception:
            logger.exception('unable to retrieve location content')
            Batch(fields.EXECUTE, requests).fail(errors.REQUEST_GENERATION_FAILED)


    def _retrieve_content(self, requests, parameters):

        try:
            self._check_ready()
        except errors.TargetError as e:
            logger.warning('unable to retrieve location content: %s', e)
            for request in requests:
                request._deliver_default()
            return

        misses = list()

        for request in requests:
            entry = self.cache.lookup(request.name)

            if entry is None:
                misses.append(request)
                continue

            content = parser.content(entry)

            if content is None:
                request._deliver_default()
            else:
                request._deliver(content, parser.content_data(entry))

            merged = params.merge(parameters, request.parameters)
            self.tracker.displayed((request.name,), merged)
            self._forward_analytics(parser.analytics_payload(entry))

        if len(misses) == 0:
            # Everything came from the cache; the display notifications just
            # queued go out on their own.
            self._send_notifications()
            return

        flushed = self.tracker.flush()

        try:
            request = self._builder()
            request.execute(misses, parameters)
            request.notifications(flushed)
            batch = Batch(fields.EXECUTE, misses, flushed)
            self._send(batch, request.build())
        except Exception:
            self.tracker.restore(flushed)
            raise


    def _prefetch(self, prefetches, parameters, completion):

        try:
            self._prefetch_content(prefetches, parameters, completion)
        except Exception:
            logger.exception('unable to prefetch mbox content')
            Batch(fields.PREFETCH, prefetches, completion=completion).fail(errors.REQUEST_GENERATION_FAILED)


    def _prefetch_content(self, prefetches, parameters, completion):

        if len(prefetches) == 0:
            logger.warning('unable to prefetch mbox content: %s', errors.NO_PREFETCH_REQUESTS)
            completion._complete(errors.NO_PREFETCH_REQUESTS)
            return

        try:
            self._check_ready()
        except errors.TargetError as e:
            logger.warning('unable to prefetch mbox content: %s', e)
            completion._complete(str(e))
            return

        flushed = self.tracker.flush()

        try:
            request = self._builder()
            request.prefetch(prefetches, parameters)
            request.notifications(flushed)
            batch = Batch(fields.PREFETCH, prefetches, flushed, completion)
            self._send(batch, request.build())
        except Exception:
            self.tracker.restore(flushed)
            raise


    def _displayed(self, names, parameters):

        names = [name for name in names if name]

        if len(names) == 0:
            logger.warning('unable to send display notification: %s', errors.MBOX_NAMES_NULL_OR_EMPTY)
            return

        try:
            self._check_ready()
        except errors.TargetError as e:
            logger.warning('unable to send display notification: %s', e)
            return

        if self.tracker.displayed(names, parameters) == 0:
            logger.warning('%s: %s', errors.DISPLAY_NOTIFICATION_NOT_SENT, ', '.join(names))
            return

        self._send_notifications()


    def _clicked(self, name, parameters):

        if not name:
            logger.warning('unable to send click notification: %s', errors.MBOX_NAME_NULL_OR_EMPTY)
            return

        try:
            self._check_ready()
        except errors.TargetError as e:
            logger.warning('unable to send click notification: %s', e)
            return

        if self.tracker.clicked(name, parameters) == False:
            logger.warning('%s: ' + errors.NO_CLICK_METRICS, errors.CLICK_NOTIFICATION_NOT_SENT, name)
            return

        entry = self.cache.find(name)

        if entry is not None:
            self._forward_analytics(parser.analytics_payload(parser.click_metric(entry)))

        self._send_notifications()


    def _send_notifications(self):
        """ Send every pending notification in a request of its own.
        """

        flushed = self.tracker.flush()

        if len(flushed) == 0:
            return

        try:
            request = self._builder()
            request.notifications(flushed)
            batch = Batch(NOTIFY, (), flushed)
            self._send(batch, request.build())
        except Exception:
            self.tracker.restore(flushed)
            raise


    def _execute_raw(self, document, completion):

        try:
            self._check_ready()
        except errors.TargetError as e:
            logger.warning('unable to send raw request: %s', e)
            completion._complete(None)
            return

        if isinstance(document, dict):
            pass
        else:
            document = dict()

        execute = document.get(fields.EXECUTE)
        prefetch = document.get(fields.PREFETCH)

        if not execute and not prefetch:
            logger.warning('unable to send raw request: %s', errors.NO_TARGET_REQUESTS)
            completion._complete(None)
            return

        request = self._builder()
        request.raw(document)

        batch = Batch(RAW, (), completion=completion)
        self._send(batch, request.build())


    def _send_raw_notifications(self, document):

        try:
            self._check_ready()
        except errors.TargetError as e:
            logger.warning('unable to send raw notifications: %s', e)
            return

        if isinstance(document, dict):
            pass
        else:
            document = dict()

        notifications = document.get(fields.NOTIFICATIONS)

        if isinstance(notifications, list) and len(notifications) > 0:
            pass
        else:
            logger.warning('unable to send raw notifications: no notifications in the request')
            return

        document = dict(document)
        document.pop(fields.EXECUTE, None)
        document.pop(fields.PREFETCH, None)

        request = self._builder()
        request.raw(document)

        batch = Batch(NOTIFY, ())
        self._send(batch, request.build())


    def _send(self, batch, payload):
        """ Hand the request off to a network thread. The response, or the
            failure, comes back to :func:`_handle` on the worker thread.
        """

        configuration = self.state.configuration
        url = message.url(configuration.client_code, self.state.session_id,
                          configuration.server, self.state.edge_host)

        request = message.Request(url, payload, configuration.timeout)
        logger.debug('sending %r for %r', request, batch)

        try:
            future = self.executor.submit(self.transport.send, request)
        except RuntimeError:
            logger.error('unable to send %r: the engine is closed', request)
            self.tracker.restore(batch.notifications)
            self._fail(batch, errors.NetworkError(errors.NO_CONNECTION))
            return

        self._in_flight_lock.acquire()
        self._in_flight.add(future)
        self._in_flight_lock.release()

        def done(future):
            self.worker.submit(self._handle, batch, request, future)

        future.add_done_callback(done)


    def _handle(self, batch, request, future):

        self._in_flight_lock.acquire()
        self._in_flight.discard(future)
        self._in_flight_lock.release()

        try:
            response = future.result()
        except TransportTimeout:
            error = errors.NetworkTimeout(errors.REQUEST_TIMEOUT)
        except TransportError as e:
            logger.debug('%r failed: %s', request, e)
            error = errors.NetworkError(errors.NO_CONNECTION)
        except Exception:
            logger.exception('%r failed unexpectedly', request)
            error = errors.NetworkError(errors.NO_CONNECTION)
        else:
            error = None

        if error is not None:
            logger.warning('%r failed: %s', request, error)
            self.tracker.restore(batch.notifications)
            self._fail(batch, error)
            return

        request.response = response
        self._process(batch, response)


    def _fail(self, batch, error):

        if batch.kind == RAW:
            batch.complete(None)
        else:
            batch.fail(error)


    def _process(self, batch, response):

        try:
            decoded = response.json()
        except errors.ProtocolError as e:
            logger.warning('undecodable response with status %d: %s', response.status, e)
            self.tracker.restore(batch.notifications)
            self._fail(batch, e)
            return

        logger.debug('response: %r', decoded)

        error_message = response.error_message()

        if error_message is not None:
            error = errors.ServerError(error_message)
        elif response.ok:
            error = None
        else:
            error = errors.ServerError('HTTP status %d' % (response.status))

        if response.ok:
            self.tracker.acknowledge(batch.notifications)
        elif error.is_notification_error():
            logger.warning('dropping %d notifications rejected by the server', len(batch.notifications))
        else:
            self.tracker.restore(batch.notifications)

        if error is not None:
            logger.warning(errors.ERROR_RESPONSE + '%s', error)
            self._fail(batch, error)
            return

        self._update_from_response(decoded)

        if batch.kind == fields.EXECUTE:
            self._dispatch_execute(batch, decoded)
        elif batch.kind == fields.PREFETCH:
            self._dispatch_prefetch(batch, decoded)
        elif batch.kind == RAW:
            batch.complete(decoded)


    def _update_from_response(self, decoded):

        self.state.touch_session()

        changed = False

        tnt_id = parser.tnt_id(decoded)
        if tnt_id is not None:
            changed = self.state.update_tnt_id(tnt_id)

        edge_host = parser.edge_host(decoded)
        if edge_host is not None:
            self.state.update_edge_host(edge_host)

        if changed:
            self._publish_shared_state()


    def _dispatch_execute(self, batch, decoded):

        pairs = batch.deliver(decoded)

        for request, mbox in pairs:
            self.tracker.record_mbox(mbox, prefetched=False)
            self.cache.mark_loaded(request.name, mbox)
            self._forward_analytics(parser.analytics_payload(mbox))


    def _dispatch_prefetch(self, batch, decoded):

        prefetched = parser.prefetched_mboxes(decoded)

        if len(prefetched) == 0:
            logger.warning(errors.NO_PREFETCH_MBOXES)
            batch.complete(errors.NO_PREFETCH_MBOXES)
            return

        self.cache.merge(prefetched)

        for mbox in prefetched.values():
            self.tracker.record_mbox(mbox, prefetched=True)

        logger.debug('prefetched mboxes now cached: %s', ', '.join(self.cache.names()))
        batch.complete(None)


    def _forward_analytics(self, payload):

        handler = self.analytics_handler

        if handler is None or not payload:
            return

        prepared = parser.a4t_payload(payload, self.state.session_id)

        try:
            handler(prepared)
        except Exception:
            logger.exception('analytics handler %r raised an exception', handler)


    def _publish_shared_state(self):

        listener = self.shared_state_listener

        if listener is None:
            return

        try:
            listener(self.state.shared())
        except Exception:
            logger.exception('shared state listener %r raised an exception', listener)


    def _set_third_party_id(self, third_party_id):
        if self.state.update_third_party_id(third_party_id):
            self._publish_shared_state()


    def _set_tnt_id(self, tnt_id):
        if self.state.update_tnt_id(tnt_id):
            self._publish_shared_state()


    def _reset_experience(self):

        self.state.reset()
        self.cache.clear()
        self.tracker.clear()
        self._publish_shared_state()


    def _clear_prefetch_cache(self):
        self.cache.clear()
        self.tracker.forget_tokens()


# end of class Target


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
