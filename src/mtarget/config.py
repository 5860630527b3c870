""" Configuration handling for :mod:`mtarget`. There are two distinct
    concerns here: where local state (persisted identifiers, the last known
    configuration) is kept on disk, handled by :func:`directory`; and the
    remote service configuration itself, represented by a
    :class:`Configuration` instance.
"""

import os

from . import json


PRIVACY = 'global.privacy'
CLIENT_CODE = 'target.clientCode'
TIMEOUT = 'target.timeout'
ENVIRONMENT_ID = 'target.environmentId'
PROPERTY_TOKEN = 'target.propertyToken'
SESSION_TIMEOUT = 'target.sessionTimeout'
SERVER = 'target.server'

OPTED_IN = 'optedin'
OPTED_OUT = 'optedout'

DEFAULT_TIMEOUT = 2
DEFAULT_SESSION_TIMEOUT = 30 * 60

HOME_VARIABLE = 'MTARGET_HOME'
HOME_DIRECTORY = '.mtarget'



class Configuration:
    """ A read-only snapshot of the remote configuration for a single
        :class:`mtarget.Target` instance. To first order an instance acts
        like a dictionary keyed by the dotted configuration names (for
        example, ``target.clientCode``); the properties defined here apply
        the defaults expected by the delivery API when a key is missing or
        malformed.

        A new configuration is never applied by mutating an existing
        :class:`Configuration`; a new instance is constructed instead, so
        that a snapshot handed to a request builder cannot change underneath
        it.
    """

    def __init__(self, values=None):

        self._values = dict()

        if values is None:
            return

        for key, value in values.items():
            if value is None:
                continue
            self._values[str(key)] = value


    @classmethod
    def load(cls, filename):
        """ Read a configuration from the JSON file *filename*. The file must
            contain a single JSON object; anything else raises ValueError.
        """

        with open(filename, 'rb') as opened:
            contents = opened.read()

        try:
            values = json.loads(contents)
        except json.JSONDecodeError:
            raise ValueError('configuration file is not valid JSON: ' + filename)

        if isinstance(values, dict):
            pass
        else:
            raise ValueError('configuration file must contain a JSON object: ' + filename)

        return cls(values)


    def __contains__(self, key):
        return key in self._values


    def __getitem__(self, key):
        return self._values[key]


    def __iter__(self):
        return iter(self._values)


    def __len__(self):
        return len(self._values)


    def __eq__(self, other):
        if isinstance(other, Configuration):
            return self._values == other._values
        return NotImplemented


    def __repr__(self):
        return 'Configuration(' + repr(self._values) + ')'


    def get(self, key, default=None):
        return self._values.get(key, default)


    def items(self):
        return self._values.items()


    def to_store(self):
        """ Return a flat str to str dictionary suitable for persisting in a
            :class:`mtarget.store.Store`.
        """

        flattened = dict()

        for key, value in self._values.items():
            if isinstance(value, str):
                flattened[key] = value
            else:
                flattened[key] = json.dumps_str(value)

        return flattened


    @classmethod
    def from_store(cls, stored):
        """ The inverse of :func:`to_store`.
        """

        values = dict()

        for key, value in stored.items():
            if key in (TIMEOUT, ENVIRONMENT_ID, SESSION_TIMEOUT):
                try:
                    value = json.loads(value)
                except json.JSONDecodeError:
                    pass
            values[key] = value

        return cls(values)


    @property
    def client_code(self):
        value = self._values.get(CLIENT_CODE)
        if value is None:
            return ''
        return str(value)


    @property
    def privacy(self):
        value = self._values.get(PRIVACY)
        if value is None or value == '':
            return OPTED_IN
        return str(value)


    @property
    def opted_in(self):
        return self.privacy == OPTED_IN


    @property
    def opted_out(self):
        return self.privacy == OPTED_OUT


    @property
    def property_token(self):
        value = self._values.get(PROPERTY_TOKEN)
        if value is None:
            return ''
        return str(value)


    @property
    def server(self):
        value = self._values.get(SERVER)
        if value is None:
            return ''
        return str(value)


    @property
    def timeout(self):
        return _positive_number(self._values.get(TIMEOUT), DEFAULT_TIMEOUT)


    @property
    def session_timeout(self):
        return _positive_number(self._values.get(SESSION_TIMEOUT), DEFAULT_SESSION_TIMEOUT)


    @property
    def environment_id(self):
        value = self._values.get(ENVIRONMENT_ID)

        try:
            value = int(value)
        except (TypeError, ValueError):
            return 0

        return value


# end of class Configuration



def _positive_number(value, default):

    if isinstance(value, bool):
        return default

    try:
        value = float(value)
    except (TypeError, ValueError):
        return default

    if value <= 0:
        return default

    if value == int(value):
        value = int(value)

    return value



def directory(default=None):
    """ Return the directory holding local state for every
        :class:`mtarget.Target` that is not given one explicitly: the
        ``MTARGET_HOME`` environment variable if set, otherwise
        ``~/.mtarget``. The answer is looked up once per process.

        An absolute *default* replaces the answer for the rest of the
        process, and is created if it does not exist yet.
    """

    if default is not None:
        default = os.path.expandvars(str(default))

        if os.path.isabs(default) == False:
            raise ValueError('the state directory must be an absolute path: ' + default)

        os.makedirs(default, mode=0o775, exist_ok=True)
        directory.found = default
        return default

    if directory.found is None:
        found = os.environ.get(HOME_VARIABLE)

        if not found:
            found = os.path.join(os.path.expanduser('~'), HOME_DIRECTORY)

        directory.found = found

    return directory.found

directory.found = None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
