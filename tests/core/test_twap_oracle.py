"""Tests for src/core/oracle.py — the stateful TWAP oracle shell."""

import threading
from dataclasses import replace

import pytest

from src.core.oracle import TwapOracle
from src.core.pcw_twap import (
    AlreadyStarted,
    OracleParams,
    StaleTwap,
    TimestampRegression,
    TwapInvariantError,
    ZeroPeriod,
    state_from_dict,
)


def _oracle() -> TwapOracle:
    oracle = TwapOracle(10_000, 60_000, 1_000)
    oracle.set_start_time(1_000)
    return oracle


class TestAccessors:
    def test_initial(self):
        oracle = TwapOracle(10_000, 60_000, 1_000)
        assert oracle.config.cap_step == 10
        assert oracle.last_price == 10_000
        assert oracle.last_timestamp == 0
        assert oracle.market_start_time is None

    def test_after_activation(self):
        oracle = _oracle()
        assert oracle.market_start_time == 1_000
        assert oracle.last_timestamp == 1_000
        assert oracle.last_window_end == 1_000
        assert oracle.last_window_twap == 10_000
        assert oracle.total_cumulative_price == 0

    def test_from_params(self):
        oracle = TwapOracle.from_params(OracleParams(init_price=10_000, start_delay_ms=60_000, cap_ppm=1_000))
        assert oracle.config == TwapOracle(10_000, 60_000, 1_000).config


class TestOperations:
    def test_double_activation(self):
        oracle = _oracle()
        with pytest.raises(AlreadyStarted):
            oracle.set_start_time(2_000)

    def test_write_then_read(self):
        oracle = _oracle()
        oracle.write_observation(61_000, 10_000)
        oracle.write_observation(181_000, 10_500)
        assert oracle.last_price == 10_020
        assert oracle.get_twap(181_000) == 10_015

    def test_rejected_write_keeps_state(self, caplog):
        oracle = _oracle()
        oracle.write_observation(5_000, 10_000)
        before = oracle.state
        with caplog.at_level("WARNING", logger="src.core.oracle"):
            with pytest.raises(TimestampRegression):
                oracle.write_observation(4_000, 10_000)
        assert oracle.state == before
        assert "timestamp_regression" in caplog.text

    def test_stale_read(self):
        oracle = _oracle()
        oracle.write_observation(121_000, 10_000)
        with pytest.raises(StaleTwap):
            oracle.get_twap(122_000)

    def test_observe_and_read(self):
        oracle = _oracle()
        with pytest.raises(ZeroPeriod):
            oracle.observe_and_read(61_000, 10_000)
        assert oracle.observe_and_read(121_000, 10_000) == 10_000

    def test_snapshot_restore(self):
        oracle = _oracle()
        oracle.write_observation(100_000, 10_300)
        restored = TwapOracle.restore(oracle.config, state_from_dict(oracle.snapshot()))
        assert restored.state == oracle.state
        restored.write_observation(200_000, 10_300)
        assert restored.last_timestamp == 200_000

    def test_restore_rejects_window_end_ahead(self):
        oracle = _oracle()
        oracle.write_observation(100_000, 10_300)
        corrupt = replace(oracle.state, last_window_end=oracle.last_timestamp + 1)
        with pytest.raises(TwapInvariantError) as exc_info:
            TwapOracle.restore(oracle.config, corrupt)
        assert "inv_window_end_not_ahead" in exc_info.value.violations

    def test_restore_rejects_snapshot_above_total(self):
        oracle = _oracle()
        oracle.write_observation(100_000, 10_300)
        corrupt = replace(
            oracle.state,
            last_window_end_cumulative_price=oracle.total_cumulative_price + 1,
        )
        with pytest.raises(TwapInvariantError) as exc_info:
            TwapOracle.restore(oracle.config, corrupt)
        assert "inv_snapshot_le_total" in exc_info.value.violations


class TestNotifications:
    def test_listener_receives_events(self):
        oracle = _oracle()
        seen = []
        oracle.subscribe(seen.append)
        events = oracle.write_observation(61_000, 11_000)
        assert list(events) == seen
        assert seen[-1].timestamp == 61_000
        assert seen[-1].price == 10_010
        assert seen[-1].window_closed

    def test_noop_write_emits_nothing(self):
        oracle = _oracle()
        oracle.write_observation(10_000, 10_000)
        seen = []
        oracle.subscribe(seen.append)
        assert oracle.write_observation(10_000, 99_000) == ()
        assert seen == []

    def test_unsubscribe(self):
        oracle = _oracle()
        seen = []
        oracle.subscribe(seen.append)
        oracle.unsubscribe(seen.append)
        oracle.write_observation(10_000, 10_000)
        assert seen == []


class TestConcurrency:
    def test_concurrent_writers_keep_clock_monotone(self):
        oracle = TwapOracle(10_000, 0, 1_000)
        oracle.set_start_time(0)
        errors = []

        def writer(offset: int) -> None:
            for ts in range(offset, 50_000, 1_000):
                try:
                    oracle.write_observation(ts, 10_000)
                except TimestampRegression:
                    errors.append(ts)

        threads = [threading.Thread(target=writer, args=(i * 100,)) for i in range(1, 5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert oracle.last_timestamp >= 49_000
        assert oracle.state.last_window_end <= oracle.last_timestamp
        assert oracle.get_twap(oracle.last_timestamp) == 10_000
