from mtarget.notifications import Tracker
from mtarget.parameters import Parameters


class Clock:
    now = 1500.25

    def __call__(self):
        return self.now


def prefetched(name, click=True):
    mbox = {
        'name': name,
        'state': 'state-' + name,
        'options': [{'content': 'x', 'eventToken': 'display-' + name}],
    }
    if click:
        mbox['metrics'] = [{'type': 'click', 'eventToken': 'click-' + name}]
    return mbox


def test_display_needs_a_prefetched_record():

    tracker = Tracker(Clock())
    assert tracker.displayed(['never-fetched']) == 0
    assert len(tracker) == 0

    tracker.record_mbox(prefetched('a'), prefetched=True)
    assert tracker.displayed(['a', 'never-fetched'], Parameters({'k': 'v'})) == 1

    flushed = tracker.flush()
    assert len(flushed) == 1

    notification = flushed[0]
    assert notification['type'] == 'display'
    assert notification['timestamp'] == 1500250
    assert notification['mbox'] == {'name': 'a', 'state': 'state-a'}
    assert notification['tokens'] == ['display-a']
    assert notification['parameters'] == {'k': 'v'}
    assert notification['id']


def test_executed_mboxes_record_clicks_only():

    tracker = Tracker(Clock())
    tracker.record_mbox(prefetched('a'), prefetched=False)

    assert not tracker.has_display('a')
    assert tracker.has_click('a')

    assert tracker.clicked('a') == True
    notification = tracker.flush()[0]

    assert notification['type'] == 'click'
    assert notification['tokens'] == ['click-a']
    for key in ('parameters', 'profileParameters', 'order', 'product'):
        assert key not in notification


def test_click_without_metric():

    tracker = Tracker(Clock())
    tracker.record_mbox(prefetched('a', click=False), prefetched=True)

    assert tracker.clicked('a') == False
    assert tracker.clicked('never-fetched') == False
    assert len(tracker) == 0


def test_prefetch_without_click_drops_stale_click_token():

    tracker = Tracker(Clock())
    tracker.record_mbox(prefetched('a'), prefetched=False)
    tracker.record_mbox(prefetched('a', click=False), prefetched=True)

    assert not tracker.has_click('a')


def test_flush_restore_acknowledge():

    tracker = Tracker(Clock())
    tracker.record_mbox(prefetched('a'), prefetched=True)
    tracker.record_mbox(prefetched('b'), prefetched=True)

    tracker.displayed(['a'])
    first = tracker.flush()
    assert len(tracker) == 0

    tracker.displayed(['b'])
    tracker.restore(first)

    flushed = tracker.flush()
    assert [n['mbox']['name'] for n in flushed] == ['a', 'b']

    tracker.acknowledge(flushed)
    assert tracker.flush() == []


def test_clear():

    tracker = Tracker(Clock())
    tracker.record_mbox(prefetched('a'), prefetched=True)
    tracker.displayed(['a'])

    tracker.forget_tokens()
    assert len(tracker) == 1
    assert tracker.displayed(['a']) == 0

    tracker.clear()
    assert len(tracker) == 0


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
