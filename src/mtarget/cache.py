""" In-memory caches of mbox responses. The :class:`PrefetchCache` holds
    prefetched mboxes until a retrieve call consumes them; loaded mboxes,
    those whose content has already been handed to a caller, are kept
    separately so that a later click can still find its token.
"""

import logging


logger = logging.getLogger(__name__)


class PrefetchCache:
    """ Mbox responses keyed by mbox name. Entries are keyed by name alone:
        a retrieve call with different parameters than the prefetch that
        produced an entry will still be served from it.

        All access is expected to come from the engine's worker thread.
    """

    def __init__(self):

        self._prefetched = dict()
        self._loaded = dict()


    def __contains__(self, name):
        return name in self._prefetched


    def __len__(self):
        return len(self._prefetched)


    def names(self):
        return tuple(self._prefetched.keys())


    def lookup(self, name):
        """ Remove and return the prefetched entry for *name*, or None if
            there isn't one. A hit is consumed: a second lookup for the same
            name misses until the name is prefetched again. The consumed entry
            is remembered as loaded.
        """

        try:
            entry = self._prefetched.pop(name)
        except KeyError:
            logger.debug("prefetch cache miss for '%s'", name)
            return None

        logger.debug("prefetch cache hit for '%s'", name)
        self._loaded[name] = entry
        return entry


    def peek(self, name):
        """ Return the prefetched entry for *name* without consuming it.
        """

        return self._prefetched.get(name)


    def store(self, name, entry):
        """ Cache *entry* for *name*, replacing any previous entry. A freshly
            prefetched name is no longer considered loaded.
        """

        self._prefetched[name] = entry
        self._loaded.pop(name, None)


    def merge(self, entries):
        """ :func:`store` every item of the *entries* dictionary.
        """

        for name, entry in entries.items():
            self.store(name, entry)


    def loaded(self, name):
        return self._loaded.get(name)


    def mark_loaded(self, name, entry):
        self._loaded[name] = entry


    def find(self, name):
        """ Return the entry for *name* from either the prefetched or the
            loaded mboxes, prefetched first, without consuming anything.
        """

        try:
            return self._prefetched[name]
        except KeyError:
            pass

        return self._loaded.get(name)


    def clear(self):
        """ Empty the cache entirely, loaded mboxes included.
        """

        count = len(self._prefetched)
        self._prefetched.clear()
        self._loaded.clear()

        if count:
            logger.debug('prefetch cache cleared, %d entries dropped', count)


# end of class PrefetchCache


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
