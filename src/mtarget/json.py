""" Thin wrapper around :mod:`orjson` so that the rest of the package has a
    single place to call for the equivalent of :func:`json.loads` and
    :func:`json.dumps`.
"""

import orjson


# orjson.dumps() returns bytes; everything that calls dumps() in this package
# is expected to handle bytes, and only decode to str where a string is
# specifically required (such as an embedded JSON literal).

JSONDecodeError = orjson.JSONDecodeError

dumps = orjson.dumps
loads = orjson.loads


def dumps_str(value):
    """ Return the JSON encoding of *value* as a str instead of bytes.
    """

    return orjson.dumps(value).decode()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
