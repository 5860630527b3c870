""" Demultiplexing of a delivery API response back onto the batch of
    requests that produced it.
"""

import logging

from .protocol import fields
from .protocol import parser


logger = logging.getLogger(__name__)


class Batch:
    """ One outbound delivery request and everything needed to resolve it:
        the ordered *requests* (location or prefetch requests, their position
        in the sequence being their wire index), the *kind* of batch
        (``execute`` or ``prefetch``, or None for notification-only and raw
        requests), the pending *notifications* that were flushed into it,
        and an optional *completion* for batch-level results.
    """

    def __init__(self, kind, requests=(), notifications=None, completion=None):

        self.kind = kind
        self.requests = tuple(requests)
        self.notifications = notifications or list()
        self.completion = completion


    def __repr__(self):
        return 'Batch(%r, %d requests, %d notifications)' % (self.kind, len(self.requests), len(self.notifications))


    def correlate(self, decoded):
        """ Match each mbox in the *decoded* response to the request that
            asked for it. The echoed index is used when it names an
            outbound request that has not been matched yet; otherwise the
            position of the mbox in the response array is used. Mbox names
            are never used for matching, as one batch may ask for the same
            name more than once.

            Returns a list of ``(request, mbox)`` pairs in response order;
            requests that nothing matched are not included.
        """

        found = parser.mboxes(decoded, self.kind)
        requests = self.requests
        count = len(requests)
        matched = dict()

        for position, mbox in enumerate(found):
            index = parser.index(mbox)

            if index is None or index < 0 or index >= count or index in matched:
                index = position

            if index >= count or index in matched:
                logger.debug('response mbox %r matches no outstanding request', mbox.get(fields.NAME))
                continue

            matched[index] = mbox

        pairs = list()

        for index in sorted(matched):
            pairs.append((requests[index], matched[index]))

        return pairs


    def deliver(self, decoded):
        """ Deliver content to every location request in an execute batch.
            Requests without a matching mbox, or whose mbox carries no
            content, receive their default content. Returns the
            ``(request, mbox)`` pairs that were matched.
        """

        pairs = self.correlate(decoded)

        for request, mbox in pairs:
            content = parser.content(mbox)

            if content is None:
                request._deliver_default()
            else:
                request._deliver(content, parser.content_data(mbox))

        self.deliver_defaults()
        return pairs


    def deliver_defaults(self):
        """ Deliver the default content to every request that has not had
            anything delivered yet.
        """

        for request in self.requests:
            deliver_default = getattr(request, '_deliver_default', None)
            if deliver_default is not None:
                deliver_default()


    def complete(self, result):
        """ Report the batch-level *result*; only meaningful if the batch was
            created with a completion.
        """

        if self.completion is not None:
            self.completion._complete(result)


    def fail(self, error):
        """ Resolve the whole batch as failed: default content for every
            request, and the error string for the batch completion.
        """

        self.deliver_defaults()
        self.complete(str(error))


# end of class Batch


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
