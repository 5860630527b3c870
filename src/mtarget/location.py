""" The per-location requests a caller hands to :class:`mtarget.Target`:
    a :class:`LocationRequest` asks for content to be delivered, a
    :class:`PrefetchRequest` asks for content to be fetched and cached for
    later.
"""

import logging

from . import errors
from .parameters import Parameters, coerce
from .protocol.message import Completion


logger = logging.getLogger(__name__)


def _check_name(name):

    if name is None or name == '':
        raise ValueError(errors.MBOX_NAME_NULL_OR_EMPTY)

    return str(name)



class PrefetchRequest:
    """ A request to prefetch the content for the mbox *name*, with an
        optional set of :class:`mtarget.parameters.Parameters`.
    """

    def __init__(self, name, parameters=None):

        self.name = _check_name(name)

        parameters = coerce(parameters)
        if parameters is None:
            parameters = Parameters()

        self.parameters = parameters


    def __repr__(self):
        return 'PrefetchRequest(%r)' % (self.name)


# end of class PrefetchRequest



class LocationRequest(Completion):
    """ A request for the content of the mbox *name*. The content is
        delivered exactly once, either by invoking *callback* with the
        content string, or by invoking *data_callback* with the content
        string and a dictionary of auxiliary data (response tokens and
        analytics payloads; None if there are none), or both. The
        *default_content* is what gets delivered if no content is
        available for any reason: a network failure, an error response, or
        a response that has nothing for this mbox.

        The request can also be used synchronously: :func:`wait` blocks
        until the content has been delivered and returns it.
    """

    def __init__(self, name, default_content='', parameters=None, callback=None, data_callback=None):

        Completion.__init__(self, callback)

        self.name = _check_name(name)

        parameters = coerce(parameters)
        if parameters is None:
            parameters = Parameters()

        if default_content is None:
            default_content = ''

        self.parameters = parameters
        self.default_content = default_content
        self.data_callback = data_callback


    def __repr__(self):
        return 'LocationRequest(%r)' % (self.name)


    def _deliver(self, content, data=None):
        """ Deliver *content* (and *data*) to the caller, unless something has
            already been delivered. Returns True if this call did the
            delivery.
        """

        return self._complete(content, data)


    def _deliver_default(self):
        return self._deliver(self.default_content, None)


    def _invoke(self, result):

        Completion._invoke(self, result)

        data_callback = self.data_callback

        if data_callback is None:
            return

        try:
            data_callback(result, self.data)
        except Exception:
            logger.exception('data callback %r raised an exception', data_callback)


# end of class LocationRequest


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
