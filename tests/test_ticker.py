from pomo_app.services.ticker import ManualTicker


def test_manual_ticker_replaces_callback_and_stops() -> None:
    ticker = ManualTicker()
    calls: list[str] = []
    assert ticker.fire() == 0

    ticker.start(lambda: calls.append("a"))
    ticker.start(lambda: calls.append("b"))
    assert ticker.fire(2) == 2
    assert calls == ["b", "b"]

    ticker.stop()
    assert not ticker.active
    assert ticker.fire() == 0
    assert ticker.stop_count == 1


def test_manual_ticker_stops_mid_burst_when_callback_disarms() -> None:
    ticker = ManualTicker()
    count = {"n": 0}

    def _cb() -> None:
        count["n"] += 1
        if count["n"] == 3:
            ticker.stop()

    ticker.start(_cb)
    assert ticker.fire(10) == 3
