import os

import pytest

from mtarget.store import Store


def test_values_survive_a_restart(tmp_path):

    store = Store('identifiers', str(tmp_path))
    assert store.name == 'identifiers'
    assert len(store) == 0

    store['TNT_ID'] = 'tnt'
    store.set('SESSION_TIMESTAMP', 12345)

    reloaded = Store('identifiers', str(tmp_path))
    assert reloaded['TNT_ID'] == 'tnt'
    assert reloaded['SESSION_TIMESTAMP'] == '12345'
    assert os.path.exists(os.path.join(str(tmp_path), 'store', 'identifiers.json'))


def test_stores_are_independent(tmp_path):

    first = Store('first', str(tmp_path))
    second = Store('second', str(tmp_path))

    first['key'] = 'one'
    assert 'key' not in second


def test_remove(tmp_path):

    store = Store('unittest', str(tmp_path))
    store['key'] = 'value'

    store.remove('key')
    store.remove('missing')
    assert 'key' not in store

    store['key'] = 'value'
    store.set('key', None)
    assert 'key' not in store

    with pytest.raises(KeyError):
        del store['key']

    assert 'key' not in Store('unittest', str(tmp_path))


def test_replace_and_clear(tmp_path):

    store = Store('unittest', str(tmp_path))
    store['old'] = 'value'
    store.replace({'new': 1})

    assert store.copy() == {'new': '1'}

    store.clear()
    assert len(Store('unittest', str(tmp_path))) == 0


def test_corrupt_store_is_discarded(tmp_path):

    directory = os.path.join(str(tmp_path), 'store')
    os.makedirs(directory)

    with open(os.path.join(directory, 'unittest.json'), 'w') as corrupt:
        corrupt.write('{not json')

    store = Store('unittest', str(tmp_path))
    assert len(store) == 0

    store['key'] = 'value'
    assert Store('unittest', str(tmp_path))['key'] == 'value'


def test_unwritable_directory_keeps_values_in_memory(tmp_path):

    # A regular file where the store directory should be.
    with open(os.path.join(str(tmp_path), 'store'), 'w') as blocking:
        blocking.write('')

    store = Store('unittest', str(tmp_path))

    store.set('a', '1')
    assert store['a'] == '1'
    assert store._lock.locked() == False

    store.set('b', '2')
    store.replace({'c': 3})
    store.remove('c')

    assert store.copy() == {}
    assert store._lock.locked() == False


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
