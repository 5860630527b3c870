""" The delivery API protocol layer: the JSON vocabulary (:mod:`.fields`),
    the request/response representation (:mod:`.message`), decoding of
    response documents (:mod:`.parser`), and construction of request
    documents (:mod:`.builder`).

    Nothing in this subpackage knows how bytes get on the wire; that is the
    job of :mod:`mtarget.transport`.
"""

from . import fields
from . import message
from . import parser

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
