""" Identity and session state for a single :class:`mtarget.Target`
    instance. Every method here is expected to be called from the engine's
    worker thread; there is no locking.
"""

import logging
import time
import uuid

from . import config


logger = logging.getLogger(__name__)

TNT_ID = 'TNT_ID'
THIRD_PARTY_ID = 'THIRD_PARTY_ID'
SESSION_ID = 'SESSION_ID'
SESSION_TIMESTAMP = 'SESSION_TIMESTAMP'
EDGE_HOST = 'EDGE_HOST'

SHARED_TNT_ID = 'tntid'
SHARED_THIRD_PARTY_ID = 'thirdpartyid'


class State:
    """ The identifiers (*tnt_id*, *third_party_id*), the session (*session_id*
        and the timestamp of the last activity within it), the sticky
        *edge_host*, and the most recent :class:`mtarget.config.Configuration`.

        The identifiers are persisted in the *identifiers* store as they
        change, and restored from it when the :class:`State` is constructed;
        the configuration is likewise persisted in the *configuration*
        store. Both are :class:`mtarget.store.Store` instances.
    """

    def __init__(self, identifiers, configuration, clock=time.time):

        self.identifiers = identifiers
        self.configuration_store = configuration
        self.clock = clock

        self.tnt_id = identifiers.get(TNT_ID)
        self.third_party_id = identifiers.get(THIRD_PARTY_ID)
        self.edge_host = identifiers.get(EDGE_HOST)
        self._session_id = identifiers.get(SESSION_ID)

        try:
            self._session_timestamp = int(identifiers.get(SESSION_TIMESTAMP, 0))
        except ValueError:
            self._session_timestamp = 0

        self.configuration = config.Configuration.from_store(configuration.copy())


    # Configuration

    def update_configuration(self, configuration):
        """ Apply a new :class:`mtarget.config.Configuration`. Returns the
            previous one so the caller can react to what changed.
        """

        previous = self.configuration

        if previous.client_code != configuration.client_code:
            logger.debug('client code changed, resetting the edge host')
            self.update_edge_host(None)

        self.configuration = configuration
        self.configuration_store.replace(configuration.to_store())
        return previous


    # Identifiers

    def update_tnt_id(self, tnt_id):
        """ Set the tntId; an empty or None value removes it.
        """

        if tnt_id == '':
            tnt_id = None

        if tnt_id == self.tnt_id:
            return False

        self.tnt_id = tnt_id
        self.identifiers.set(TNT_ID, tnt_id)
        return True


    def update_third_party_id(self, third_party_id):

        if third_party_id == '':
            third_party_id = None

        if third_party_id == self.third_party_id:
            return False

        self.third_party_id = third_party_id
        self.identifiers.set(THIRD_PARTY_ID, third_party_id)
        return True


    def update_edge_host(self, edge_host):
        """ Remember the edge host returned by the server, so that subsequent
            requests are routed to the same edge. Nothing is persisted if the
            host is unchanged.
        """

        if edge_host == '':
            edge_host = None

        if edge_host == self.edge_host:
            return

        self.edge_host = edge_host
        self.identifiers.set(EDGE_HOST, edge_host)


    def shared(self):
        """ Return the identifiers as a snapshot suitable for publishing to
            other components.
        """

        shared = dict()
        shared[SHARED_TNT_ID] = self.tnt_id
        shared[SHARED_THIRD_PARTY_ID] = self.third_party_id
        return shared


    # Session

    def session_expired(self):

        timestamp = self._session_timestamp

        if timestamp <= 0:
            return False

        elapsed = self.clock() - timestamp
        return elapsed > self.configuration.session_timeout


    @property
    def session_id(self):
        """ The current session id. A new id is generated if there is none
            yet, or if the session has been idle for longer than the
            configured session timeout; in the latter case the edge host is
            also forgotten, since edge affinity is per session.
        """

        if self.session_id_expired():
            self.reset_session()

        if not self._session_id:
            self._session_id = str(uuid.uuid4())
            self.identifiers.set(SESSION_ID, self._session_id)

        return self._session_id


    def session_id_expired(self):
        return bool(self._session_id) and self.session_expired()


    def update_session_id(self, session_id):
        """ Explicitly set the session id. An empty or None value is ignored;
            the same id is a no-op apart from refreshing the timestamp.
        """

        if not session_id:
            logger.debug('ignoring an empty session id')
            return

        if session_id != self._session_id:
            self._session_id = session_id
            self.identifiers.set(SESSION_ID, session_id)
            self.update_edge_host(None)

        self.touch_session()


    def touch_session(self):
        """ Record activity within the current session.
        """

        now = int(self.clock())
        self._session_timestamp = now
        self.identifiers.set(SESSION_TIMESTAMP, now)


    def reset_session(self):

        self._session_id = None
        self._session_timestamp = 0
        self.identifiers.remove(SESSION_ID)
        self.identifiers.remove(SESSION_TIMESTAMP)
        self.update_edge_host(None)


    def reset(self):
        """ Forget every identifier along with the session and edge host.
        """

        self.update_tnt_id(None)
        self.update_third_party_id(None)
        self.reset_session()


# end of class State


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
