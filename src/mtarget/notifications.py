""" Bookkeeping for display and click notifications. Event tokens are
    recorded as mbox responses arrive; a later display or click for one of
    those mboxes turns the recorded tokens into a notification, which is
    held until it can be sent along with the next outbound request.
"""

import logging
import time
import uuid

from .protocol import builder
from .protocol import fields
from .protocol import parser


logger = logging.getLogger(__name__)


class Record:
    """ The event *tokens* for one mbox, as recorded from a response.
    """

    def __init__(self, name, tokens, state=None):

        self.name = name
        self.tokens = tuple(tokens)
        self.state = state
        self.timestamp = time.time()


    def __repr__(self):
        return 'Record(%r, %r)' % (self.name, self.tokens)


# end of class Record



class Tracker:
    """ The :class:`Tracker` remembers the display and click tokens seen in
        mbox responses, and the notifications that have been generated from
        them but not yet delivered. Display tokens are only recorded for
        prefetched mboxes: content delivered directly by an execute request
        is counted as displayed by the server already. Click tokens are
        recorded for both.

        Pending notifications are handed out by :func:`flush`; once a batch
        has been sent it is either acknowledged (and forgotten) or restored
        (and sent again with the next request).

        All access is expected to come from the engine's worker thread.
    """

    def __init__(self, clock=time.time):

        self.clock = clock
        self._display = dict()
        self._click = dict()
        self._pending = list()


    def __len__(self):
        return len(self._pending)


    def record(self, name, tokens, type=fields.DISPLAY, state=None):
        """ Remember the event *tokens* for the mbox *name*, replacing any
            previous record of the same *type*.
        """

        tokens = [token for token in tokens if token]

        if len(tokens) == 0:
            return

        record = Record(name, tokens, state)

        if type == fields.CLICK:
            self._click[name] = record
        else:
            self._display[name] = record


    def record_mbox(self, mbox, prefetched):
        """ Record whatever tokens the decoded *mbox* carries.
        """

        name = mbox.get(fields.NAME)

        if not name:
            return

        state = mbox.get(fields.STATE)

        if prefetched:
            self.record(name, parser.event_tokens(mbox), fields.DISPLAY, state)

        metric = parser.click_metric(mbox)

        if metric is not None:
            self.record(name, (metric[fields.EVENT_TOKEN],), fields.CLICK, state)
        elif prefetched:
            self._click.pop(name, None)


    def has_display(self, name):
        return name in self._display


    def has_click(self, name):
        return name in self._click


    def displayed(self, names, parameters=None):
        """ Queue a display notification for each of *names* that has a
            recorded display token. Names without one are skipped silently.
            Returns the number of notifications queued.
        """

        queued = 0

        for name in names:
            try:
                record = self._display[name]
            except KeyError:
                logger.debug("no display tokens recorded for '%s'", name)
                continue

            self._queue(fields.DISPLAY, record, parameters)
            queued += 1

        return queued


    def clicked(self, name, parameters=None):
        """ Queue a click notification for *name* if a click token was
            recorded for it. Returns True if a notification was queued.
        """

        try:
            record = self._click[name]
        except KeyError:
            logger.debug("no click token recorded for '%s'", name)
            return False

        self._queue(fields.CLICK, record, parameters)
        return True


    def _queue(self, type, record, parameters):

        timestamp = int(self.clock() * 1000)
        id = str(uuid.uuid4())

        notification = builder.notification(type, record.name, record.tokens, timestamp, id, parameters, record.state)
        self._pending.append(notification)


    def flush(self):
        """ Hand out every pending notification and clear the pending set.
            The caller is expected to follow up with :func:`acknowledge` or
            :func:`restore` once the outcome of sending them is known.
        """

        flushed = self._pending
        self._pending = list()
        return flushed


    def acknowledge(self, flushed):
        if flushed:
            logger.debug('%d notifications delivered', len(flushed))


    def restore(self, flushed):
        """ Put notifications that could not be delivered back at the front of
            the pending set.
        """

        if flushed:
            self._pending[:0] = flushed


    def forget_tokens(self):
        """ Drop every recorded token, keeping pending notifications.
        """

        self._display.clear()
        self._click.clear()


    def clear(self):
        self.forget_tokens()
        self._pending = list()


# end of class Tracker


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
