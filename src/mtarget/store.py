import logging
import os
import tempfile
import threading

from . import config
from . import json


logger = logging.getLogger(__name__)


class Store:
    """ The :class:`Store` implements a small persistent key/value store,
        effectively a Python dictionary of strings that is written out to
        disk every time it changes. A store has a unique *name* within the
        local state directory; the identifier state and the last known
        configuration each get a store of their own.

        The on-disk representation is a single JSON object in
        ``<directory>/store/<name>.json``. The file is rewritten in full on
        every mutation by writing a temporary file and renaming it over the
        original, so that a crash mid-write never leaves a truncated store
        behind.
    """

    def __init__(self, name, directory=None):

        if directory is None:
            directory = config.directory()

        self.name = name
        self.directory = os.path.join(directory, 'store')
        self.filename = os.path.join(self.directory, name + '.json')
        self._values = dict()
        self._lock = threading.Lock()

        self.load()


    def load(self):
        """ Read the persisted contents from disk, replacing any values held
            in memory. A missing or unreadable file results in an empty store.
        """

        try:
            contents = open(self.filename, 'rb').read()
        except FileNotFoundError:
            contents = None
        except OSError:
            logger.warning("unable to read store '%s'", self.filename, exc_info=True)
            contents = None

        values = dict()

        if contents:
            try:
                loaded = json.loads(contents)
            except json.JSONDecodeError:
                logger.warning("discarding corrupt store '%s'", self.filename)
                loaded = dict()

            if isinstance(loaded, dict):
                for key, value in loaded.items():
                    if isinstance(value, str):
                        values[key] = value

        with self._lock:
            self._values = values


    def _save(self):
        """ Write the current contents to disk. The caller is expected to hold
            the lock. A failure to write is logged; the values held in memory
            are kept either way.
        """

        contents = json.dumps(self._values)
        temporary = None

        try:
            if os.path.isdir(self.directory):
                pass
            else:
                os.makedirs(self.directory, mode=0o775)

            descriptor, temporary = tempfile.mkstemp(dir=self.directory, prefix='.' + self.name)

            with os.fdopen(descriptor, 'wb') as writer:
                writer.write(contents)

            os.replace(temporary, self.filename)
        except OSError:
            logger.error("unable to save store '%s'", self.filename, exc_info=True)
            if temporary is not None:
                try:
                    os.remove(temporary)
                except OSError:
                    pass


    def __contains__(self, key):
        return key in self._values


    def __getitem__(self, key):
        return self._values[key]


    def __setitem__(self, key, value):
        self.set(key, value)


    def __delitem__(self, key):
        with self._lock:
            del self._values[key]
            self._save()


    def __iter__(self):
        return iter(tuple(self._values))


    def __len__(self):
        return len(self._values)


    def get(self, key, default=None):
        return self._values.get(key, default)


    def set(self, key, value):
        """ Store the string *value* for *key*. A value of None is the same
            as calling :func:`remove`.
        """

        if value is None:
            self.remove(key)
            return

        value = str(value)

        with self._lock:
            if self._values.get(key) == value:
                return

            self._values[key] = value
            self._save()


    def remove(self, key):
        """ Remove *key* from the store; removing a missing key is not an
            error.
        """

        try:
            del self[key]
        except KeyError:
            pass


    def replace(self, values):
        """ Replace the entire contents of the store with the str to str
            mapping *values*.
        """

        values = dict((str(key), str(value)) for key, value in values.items())

        with self._lock:
            self._values = values
            self._save()


    def clear(self):
        self.replace(dict())


    def copy(self):
        return dict(self._values)


# end of class Store


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
