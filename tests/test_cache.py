from mtarget.cache import PrefetchCache


def test_lookup_consumes():

    cache = PrefetchCache()
    cache.store('mbox1', {'name': 'mbox1'})

    assert 'mbox1' in cache
    assert cache.lookup('mbox1') == {'name': 'mbox1'}
    assert cache.lookup('mbox1') is None
    assert 'mbox1' not in cache

    # A consumed entry is remembered as loaded.
    assert cache.loaded('mbox1') == {'name': 'mbox1'}
    assert cache.find('mbox1') == {'name': 'mbox1'}


def test_store_overwrites():

    cache = PrefetchCache()
    cache.store('mbox1', {'version': 1})
    cache.merge({'mbox1': {'version': 2}, 'mbox2': {'version': 1}})

    assert len(cache) == 2
    assert cache.peek('mbox1') == {'version': 2}
    assert cache.names() == ('mbox1', 'mbox2')


def test_prefetch_replaces_loaded():

    cache = PrefetchCache()
    cache.mark_loaded('mbox1', {'version': 'loaded'})
    cache.store('mbox1', {'version': 'prefetched'})

    assert cache.loaded('mbox1') is None
    assert cache.find('mbox1') == {'version': 'prefetched'}


def test_miss_and_clear():

    cache = PrefetchCache()
    assert cache.lookup('missing') is None

    cache.store('mbox1', {})
    cache.mark_loaded('mbox2', {})
    cache.clear()

    assert len(cache) == 0
    assert cache.find('mbox1') is None
    assert cache.find('mbox2') is None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
