from mouse_click_effects.debounce import Debouncer

from conftest import FakeScheduler


def make(window_ms=100):
    calls = []
    scheduler = FakeScheduler()
    debouncer = Debouncer(lambda *args: calls.append(args), window_ms, scheduler)
    return debouncer, scheduler, calls


def test_first_call_fires_immediately():
    debouncer, scheduler, calls = make()

    debouncer.trigger('a')

    assert calls == [('a',)]
    assert not debouncer.pending


def test_burst_collapses_to_leading_and_trailing_call():
    debouncer, scheduler, calls = make()

    for i in range(10):
        debouncer.trigger(i)
    assert calls == [(0,)]
    assert debouncer.pending

    scheduler.advance(100)

    # Only the latest call of the window survives
    assert calls == [(0,), (9,)]
    assert 1 <= len(calls) < 10


def test_at_most_one_call_per_window():
    debouncer, scheduler, calls = make()

    for _ in range(50):
        debouncer.trigger('x')
        scheduler.advance(10)

    scheduler.advance(1000)
    # 500 ms of activity plus the trailing call
    assert len(calls) <= 500 // 100 + 1


def test_quiet_window_resets_to_leading_edge():
    debouncer, scheduler, calls = make()

    debouncer.trigger(1)
    scheduler.advance(150)
    debouncer.trigger(2)

    assert calls == [(1,), (2,)]


def test_cancel_drops_pending_call():
    debouncer, scheduler, calls = make()

    debouncer.trigger(1)
    debouncer.trigger(2)
    debouncer.cancel()
    scheduler.advance(500)

    assert calls == [(1,)]
    assert scheduler.pending == 0


def test_callback_errors_do_not_break_debouncer(caplog):
    scheduler = FakeScheduler()
    seen = []

    def callback(value):
        seen.append(value)
        raise ValueError('boom')

    debouncer = Debouncer(callback, 10, scheduler)
    debouncer.trigger(1)
    scheduler.advance(20)
    debouncer.trigger(2)

    assert seen == [1, 2]
    assert 'boom' in caplog.text


def test_window_change_applies_to_next_window():
    debouncer, scheduler, calls = make(window_ms=100)

    debouncer.trigger(1)
    debouncer.window_ms = 10
    debouncer.trigger(2)
    scheduler.advance(50)
    assert calls == [(1,)]

    scheduler.advance(50)
    assert calls == [(1,), (2,)]
    debouncer.trigger(3)
    scheduler.advance(10)
    assert calls[-1] == (3,)
