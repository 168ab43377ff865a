from vocab_drill.core.drill import SessionTimer, TimerKind


def test_timer_fires_only_when_due(clock):
    timer = SessionTimer(clock)
    fired = []

    timer.schedule(TimerKind.MISMATCH_COOLDOWN, 800, lambda: fired.append("cooldown"))
    clock.advance_ms(799)

    assert timer.fire_if_due() is None
    assert timer.remaining_ms() == 1

    clock.advance_ms(5)

    assert timer.fire_if_due() is TimerKind.MISMATCH_COOLDOWN
    assert fired == ["cooldown"]
    assert timer.pending is None


def test_scheduling_replaces_pending_timer(clock):
    timer = SessionTimer(clock)
    fired = []

    timer.schedule(TimerKind.MISMATCH_COOLDOWN, 800, lambda: fired.append("first"))
    timer.schedule(TimerKind.PAGE_ADVANCE, 600, lambda: fired.append("second"))
    clock.advance(5)
    timer.fire_if_due()

    assert fired == ["second"]


def test_flush_runs_callback_early_and_cancel_drops_it(clock):
    timer = SessionTimer(clock)
    fired = []

    timer.schedule(TimerKind.DIALOGUE_ADVANCE, 800, lambda: fired.append("advance"))
    assert timer.flush() is TimerKind.DIALOGUE_ADVANCE
    assert fired == ["advance"]

    timer.schedule(TimerKind.DIALOGUE_ADVANCE, 800, lambda: fired.append("again"))
    assert timer.cancel() is TimerKind.DIALOGUE_ADVANCE
    clock.advance(5)

    assert timer.fire_if_due() is None
    assert fired == ["advance"]
    assert timer.remaining_ms() is None
