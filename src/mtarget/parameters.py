""" Value objects describing the parameters attached to an mbox request:
    the plain mbox parameters, the profile parameters, and the optional
    order and product descriptions. The :func:`merge` function combines a
    global set of parameters with a per-request set.
"""

import collections.abc

from . import json
from .protocol import fields


class Order:
    """ An order placed by the visitor. The *total* is a floating point
        amount, or None if it is not known; the *purchased_product_ids* are
        an ordered sequence of product identifiers.

        The delivery API expects the purchased product identifiers as a
        single string containing a JSON array literal, not as a native
        array; :func:`to_json` takes care of that conversion.
    """

    def __init__(self, id, total=None, purchased_product_ids=None):

        self.id = str(id)

        if total is not None:
            total = float(total)

        self.total = total

        if purchased_product_ids is None:
            self.purchased_product_ids = tuple()
        else:
            self.purchased_product_ids = tuple(str(x) for x in purchased_product_ids)


    def __eq__(self, other):
        if isinstance(other, Order):
            return self.to_json() == other.to_json()
        return NotImplemented


    def __repr__(self):
        return 'Order(' + repr(self.to_json()) + ')'


    @classmethod
    def from_dict(cls, data):
        """ Build an :class:`Order` from a wire-style dictionary. Returns None
            if *data* is empty or has no usable order id. A total that cannot
            be interpreted as a number is dropped rather than rejected.
        """

        if not data:
            return None

        id = data.get(fields.ID)

        if id is None or id == '':
            return None

        total = data.get(fields.TOTAL)

        if isinstance(total, bool):
            total = None
        elif total is not None:
            try:
                total = float(total)
            except (TypeError, ValueError):
                total = None

        ids = data.get(fields.PURCHASED_PRODUCT_IDS)

        if isinstance(ids, str):
            try:
                ids = json.loads(ids)
            except json.JSONDecodeError:
                ids = ids.split(',')

        if ids is not None and not isinstance(ids, (list, tuple)):
            ids = None

        if ids is not None:
            ids = [x for x in ids if isinstance(x, str)]

        return cls(id, total, ids)


    def to_json(self):

        order = dict()
        order[fields.ID] = self.id

        if self.total is not None:
            order[fields.TOTAL] = self.total

        if self.purchased_product_ids:
            ids = list(self.purchased_product_ids)
            order[fields.PURCHASED_PRODUCT_IDS] = json.dumps_str(ids)

        return order


# end of class Order



class Product:
    """ A product being viewed, identified by *id* and *category_id*.
    """

    def __init__(self, id, category_id=None):

        self.id = str(id)

        if category_id is not None:
            category_id = str(category_id)

        self.category_id = category_id


    def __eq__(self, other):
        if isinstance(other, Product):
            return self.to_json() == other.to_json()
        return NotImplemented


    def __repr__(self):
        return 'Product(' + repr(self.to_json()) + ')'


    @classmethod
    def from_dict(cls, data):

        if not data:
            return None

        id = data.get(fields.ID)

        if id is None or id == '':
            return None

        return cls(id, data.get(fields.CATEGORY_ID))


    def to_json(self):

        product = dict()
        product[fields.ID] = self.id

        if self.category_id:
            product[fields.CATEGORY_ID] = self.category_id

        return product


# end of class Product



class Parameters:
    """ The full set of parameters attached to a single mbox request, or
        the global set applied to every request in a batch. Instances are
        not modified after construction; :func:`merge` and the ``with_*``
        methods return new instances.

        Parameter values that are None are dropped at construction time,
        everything else is converted to a string. No other validation is
        performed: an empty key with an empty value is kept and sent as-is.
    """

    def __init__(self, parameters=None, profile_parameters=None, order=None, product=None):

        self._parameters = stringify(parameters)
        self._profile_parameters = stringify(profile_parameters)

        if isinstance(order, dict):
            order = Order.from_dict(order)
        if isinstance(product, dict):
            product = Product.from_dict(product)

        self.order = order
        self.product = product


    @property
    def parameters(self):
        return dict(self._parameters)


    @property
    def profile_parameters(self):
        return dict(self._profile_parameters)


    def __eq__(self, other):
        if isinstance(other, Parameters):
            return self.to_json() == other.to_json()
        return NotImplemented


    def __repr__(self):
        return 'Parameters(' + repr(self.to_json()) + ')'


    def empty(self):
        if self._parameters or self._profile_parameters:
            return False
        if self.order is not None or self.product is not None:
            return False
        return True


    def with_parameters(self, parameters):
        return Parameters(parameters, self._profile_parameters, self.order, self.product)


    def with_profile_parameters(self, profile_parameters):
        return Parameters(self._parameters, profile_parameters, self.order, self.product)


    def to_json(self):
        """ Return the wire representation as a dictionary containing only
            the groups that are present: ``parameters``,
            ``profileParameters``, ``order``, and ``product``.
        """

        groups = dict()

        if self._parameters:
            groups[fields.PARAMETERS] = dict(self._parameters)

        if self._profile_parameters:
            groups[fields.PROFILE_PARAMETERS] = dict(self._profile_parameters)

        if self.order is not None:
            groups[fields.ORDER] = self.order.to_json()

        if self.product is not None:
            groups[fields.PRODUCT] = self.product.to_json()

        return groups


# end of class Parameters



def stringify(mapping):

    stringified = dict()

    if not mapping:
        return stringified

    for key, value in mapping.items():
        if key is None or value is None:
            continue
        stringified[str(key)] = str(value)

    return stringified



def merge(base, override):
    """ Combine two :class:`Parameters` instances. Each group is handled
        independently: if the *override* has a non-empty group it replaces
        the corresponding group from *base* outright, otherwise the group
        from *base* is kept. There is no key-by-key merge within a group.
        Either argument may be None.
    """

    if base is None and override is None:
        return Parameters()
    if base is None:
        return override
    if override is None:
        return base

    parameters = override._parameters or base._parameters
    profile = override._profile_parameters or base._profile_parameters

    order = override.order
    if order is None:
        order = base.order

    product = override.product
    if product is None:
        product = base.product

    return Parameters(parameters, profile, order, product)



def merge_all(sequence):
    """ Fold :func:`merge` over *sequence* from left to right, so that later
        entries take precedence over earlier ones. None entries are skipped.
    """

    merged = Parameters()

    for parameters in sequence:
        if parameters is None:
            continue
        merged = merge(merged, parameters)

    return merged



def coerce(parameters):
    """ Return *parameters* as a :class:`Parameters` instance, or None. A
        plain mapping is taken to be the mbox parameters group; anything
        else raises TypeError.
    """

    if parameters is None or isinstance(parameters, Parameters):
        return parameters

    if isinstance(parameters, collections.abc.Mapping):
        return Parameters(parameters)

    raise TypeError('expected Parameters or a mapping, got ' + repr(parameters))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
