"""Public operations for `pcw_twap`.

Functional core: every operation takes the current ``OracleState`` (and the
``OracleConfig``) and returns a new value or raises a ``TwapError``. A raise
never leaves a partially-updated state behind, because nothing is mutated.

The imperative shell (`src.core.oracle.TwapOracle`) owns the current state
and serializes calls.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import (
    AlreadyStarted,
    InvalidCapPpm,
    InvalidObservation,
    LongDelay,
    MarketNotStarted,
    MisalignedDelay,
    StaleTwap,
    TimestampRegression,
    TwapConfigError,
    TwapInvariantError,
    ZeroInitialization,
    ZeroPeriod,
    ZeroStep,
)
from .invariants import check_all
from .math import (
    ONE_WEEK_MS,
    PPM_DENOMINATOR,
    U64_MAX,
    U128_MAX,
    WINDOW,
    derive_cap_step,
)
from .types import OracleConfig, OracleState, WriteResult
from .updates import accumulate


def _require_type(name: str, value: object) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


def _require_int(name: str, value: object, hi: int) -> int:
    _require_type(name, value)
    if value < 0 or value > hi:
        raise InvalidObservation(f"{name} out of range [0, {hi}]: {value}")
    return value


def new_oracle(init_price: int, start_delay: int, cap_ppm: int) -> tuple[OracleConfig, OracleState]:
    """Validate parameters and return ``(config, initial_state)``.

    Every range rejection is a ``TwapConfigError``.

    Raises:
        ZeroInitialization: ``init_price <= 0``.
        TwapConfigError: ``init_price`` above the u128 price domain.
        ZeroStep: ``cap_ppm <= 0``.
        InvalidCapPpm: ``cap_ppm > 1_000_000``.
        LongDelay: ``start_delay`` negative or ``>= ONE_WEEK_MS``.
        MisalignedDelay: ``start_delay`` not a multiple of ``WINDOW``.
        StepOverflow: cap step derivation left the u256 domain.
    """
    _require_type("init_price", init_price)
    _require_type("start_delay", start_delay)
    _require_type("cap_ppm", cap_ppm)

    if init_price <= 0:
        raise ZeroInitialization(f"init_price must be positive: {init_price}")
    if init_price > U128_MAX:
        raise TwapConfigError(f"init_price exceeds {U128_MAX}: {init_price}")
    if cap_ppm <= 0:
        raise ZeroStep(f"cap_ppm must be positive: {cap_ppm}")
    if cap_ppm > PPM_DENOMINATOR:
        raise InvalidCapPpm(f"cap_ppm must be <= {PPM_DENOMINATOR}: {cap_ppm}")
    if start_delay < 0 or start_delay >= ONE_WEEK_MS:
        raise LongDelay(f"start_delay must be in [0, {ONE_WEEK_MS}): {start_delay}")
    if start_delay % WINDOW != 0:
        raise MisalignedDelay(f"start_delay must be a multiple of {WINDOW}: {start_delay}")

    config = OracleConfig(
        init_price=init_price,
        start_delay=start_delay,
        cap_ppm=cap_ppm,
        cap_step=derive_cap_step(init_price, cap_ppm),
    )
    state = OracleState(last_price=init_price, last_window_twap=init_price)
    return config, state


def set_start_time(state: OracleState, start_time: int) -> OracleState:
    """One-time activation: configured -> running."""
    _require_int("start_time", start_time, U64_MAX)
    if state.market_start_time is not None:
        raise AlreadyStarted(f"market already started at {state.market_start_time}")
    return replace(
        state,
        market_start_time=start_time,
        last_window_end=start_time,
        last_timestamp=start_time,
    )


def delay_threshold(state: OracleState, config: OracleConfig) -> int:
    if state.market_start_time is None:
        raise MarketNotStarted("market not started")
    return state.market_start_time + config.start_delay


def _check_post(state: OracleState) -> OracleState:
    violations = check_all(state)
    if violations:
        raise TwapInvariantError(violations)
    return state


def write_observation(
    state: OracleState, config: OracleConfig, timestamp: int, price: int,
) -> WriteResult:
    """Record ``price`` as the target over ``[last_timestamp, timestamp]``.

    Crossing ``market_start_time + start_delay`` resets the accumulators so the
    readable measurement period starts exactly at the threshold.
    """
    _require_int("timestamp", timestamp, U64_MAX)
    _require_int("price", price, U128_MAX)
    if state.market_start_time is None:
        raise MarketNotStarted("write before activation")
    if timestamp < state.last_timestamp:
        raise TimestampRegression(
            f"timestamp {timestamp} < last_timestamp {state.last_timestamp}"
        )
    if timestamp == state.last_timestamp:
        return WriteResult(state=state)

    threshold = delay_threshold(state, config)

    if state.last_timestamp >= threshold or timestamp < threshold:
        new_state, events = accumulate(state, config, timestamp, price)
        return WriteResult(state=_check_post(new_state), events=tuple(events))

    # last_timestamp < threshold <= timestamp
    warm_state, events = accumulate(state, config, threshold, price)
    reset_state = replace(
        warm_state,
        total_cumulative_price=0,
        last_window_end_cumulative_price=0,
        last_window_end=threshold,
    )
    if timestamp > threshold:
        reset_state, tail = accumulate(reset_state, config, timestamp, price)
        events.extend(tail)
    return WriteResult(
        state=_check_post(reset_state), events=tuple(events), threshold_crossed=True,
    )


def get_twap(state: OracleState, config: OracleConfig, now: int) -> int:
    """TWAP over ``[threshold, now]``; ``now`` must equal ``last_timestamp``.

    The quotient is not bounds-checked against the u128 price domain: with
    every sample capped to u128 the average of them cannot exceed it.
    """
    if state.market_start_time is None:
        raise MarketNotStarted("read before activation")
    if now != state.last_timestamp:
        raise StaleTwap(f"now {now} != last_timestamp {state.last_timestamp}")
    if state.last_timestamp == 0:
        raise MarketNotStarted("no observations recorded")
    if now < state.market_start_time:
        raise TimestampRegression(f"now {now} < market_start_time {state.market_start_time}")

    period = (now - state.market_start_time) - config.start_delay
    if period <= 0:
        raise ZeroPeriod(f"measurement period has not begun (period={period})")
    return state.total_cumulative_price // period
