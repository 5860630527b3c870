""" Python client for a content decisioning delivery API. This includes
    building delivery requests from per-location parameters, correlating
    the responses back to the callers that asked for them, caching
    prefetched content, and tracking display and click notifications.
"""

# Utility components.

from . import json
from . import errors

# Submodules used by multiple other components.

from . import protocol
from . import config
from . import transport
home = config.directory

# Primary public-facing interfaces.

from .parameters import Parameters, Order, Product, merge
from .location import LocationRequest, PrefetchRequest
from .protocol.builder import Device
from .target import Target

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
