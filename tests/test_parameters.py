import pytest

import mtarget
from mtarget.parameters import Order, Parameters, Product, coerce, merge, merge_all


def test_order_product_ids_are_a_json_string():
    order = Order('order1', 100.34, ['no1', 'no2', 'no3'])
    serialized = order.to_json()

    assert serialized['id'] == 'order1'
    assert serialized['total'] == 100.34
    assert serialized['purchasedProductIds'] == '["no1","no2","no3"]'
    assert isinstance(serialized['purchasedProductIds'], str)


def test_order_from_dict():
    order = Order.from_dict({'id': 'order1', 'total': '12.5', 'purchasedProductIds': ['a', 'b']})
    assert order.total == 12.5
    assert order.purchased_product_ids == ('a', 'b')

    # A total that isn't a number is dropped, not rejected.
    order = Order.from_dict({'id': 'order1', 'total': 'total'})
    assert order is not None
    assert 'total' not in order.to_json()

    # An order needs an id.
    assert Order.from_dict({'total': 1.0}) is None
    assert Order.from_dict({'id': '', 'total': 1.0}) is None
    assert Order.from_dict(None) is None


def test_product():
    product = Product('product1', 'category1')
    assert product.to_json() == {'id': 'product1', 'categoryId': 'category1'}

    assert Product.from_dict({'categoryId': 'c'}) is None
    assert Product.from_dict({'id': 'p'}).to_json() == {'id': 'p'}


def test_groups_present_only_when_set():
    assert Parameters().to_json() == dict()
    assert Parameters().empty()

    parameters = Parameters({'a': 1, 'skip': None}, order={'id': 'o'})
    serialized = parameters.to_json()

    assert serialized == {'parameters': {'a': '1'}, 'order': {'id': 'o'}}
    assert not parameters.empty()


def test_empty_key_is_kept():
    parameters = Parameters({'': ''}, {'': ''})
    assert parameters.to_json() == {'parameters': {'': ''}, 'profileParameters': {'': ''}}


def test_merge_replaces_whole_groups():
    base = Parameters({'a': '1', 'c': '9'}, {'p': 'global'})
    override = Parameters({'a': '2', 'b': '3'})

    merged = merge(base, override)

    # The mbox parameter group is replaced outright, not merged key by key;
    # the profile group is inherited because the override doesn't set one.
    assert merged.parameters == {'a': '2', 'b': '3'}
    assert merged.profile_parameters == {'p': 'global'}


def test_merge_profile_group_replacement():
    base = Parameters(profile_parameters={'x': '1'})
    override = Parameters(profile_parameters={'y': '2'})

    merged = merge(base, override)
    assert merged.profile_parameters == {'y': '2'}


def test_merge_order_and_product():
    base = Parameters(order=Order('global'), product=Product('global-product'))
    override = Parameters(order=Order('request', 5.0))

    merged = merge(base, override)
    assert merged.order == Order('request', 5.0)
    assert merged.product == Product('global-product')


def test_merge_with_none():
    parameters = Parameters({'a': '1'})

    assert merge(None, parameters) is parameters
    assert merge(parameters, None) is parameters
    assert merge(None, None).empty()


def test_merge_all():
    merged = merge_all([Parameters({'a': '1'}, {'p': '1'}), None, Parameters({'b': '2'})])
    assert merged.parameters == {'b': '2'}
    assert merged.profile_parameters == {'p': '1'}


def test_parameters_are_not_mutable_through_accessors():
    parameters = Parameters({'a': '1'})
    copy = parameters.parameters
    copy['a'] = 'changed'
    assert parameters.parameters == {'a': '1'}


def test_with_methods_return_new_instances():
    order = Order('o1', 10)
    original = Parameters({'a': '1'}, {'p': '1'}, order)

    replaced = original.with_parameters({'b': 2})
    assert replaced.parameters == {'b': '2'}
    assert replaced.profile_parameters == {'p': '1'}
    assert replaced.order == order
    assert original.parameters == {'a': '1'}

    replaced = original.with_profile_parameters(None)
    assert replaced.profile_parameters == {}
    assert replaced.empty() == False
    assert Parameters().empty() == True


def test_coerce():
    parameters = Parameters({'a': '1'})
    assert coerce(parameters) is parameters
    assert coerce(None) is None
    assert coerce({'a': 1}) == parameters

    with pytest.raises(TypeError):
        coerce([('a', '1')])


def test_top_level_exports():
    assert mtarget.merge is merge
    assert mtarget.Parameters is Parameters


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
