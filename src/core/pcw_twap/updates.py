"""Accumulation transitions for `pcw_twap`.

Each function takes the PRE-state and returns ``(post_state, events)``.
Nothing here mutates; a raise leaves the caller's state untouched.

``accumulate()`` splits ``[last_timestamp, timestamp]`` into three stages:

1. finish the current partial window (intra-window step),
2. N whole windows in one closed-form step (never iterated),
3. the trailing partial window (intra-window step).
"""

from __future__ import annotations

from dataclasses import replace

from .errors import TimestampRegression, TwapInvariantError
from .math import (
    U64_MAX,
    WINDOW,
    cap_price,
    checked_add,
    checked_mul,
    checked_sub,
    full_window_price_sum,
)
from .types import OracleConfig, OracleState, PriceUpdated

Events = list[PriceUpdated]


def intra_window_accumulation(
    state: OracleState, config: OracleConfig, price: int, duration: int, end_ts: int,
) -> tuple[OracleState, Events]:
    """Accumulate ``duration`` (<= WINDOW) ms at the capped ``price``.

    Closes the window when ``end_ts`` lands exactly on its boundary.
    """
    if duration > WINDOW:
        raise TwapInvariantError(["intra_window_duration"])
    if checked_sub(end_ts, state.last_timestamp, what="intra_window_end") != duration:
        raise TwapInvariantError(["intra_window_end"])

    capped = cap_price(state.last_window_twap, price, config.cap_step)
    contribution = checked_mul(capped, duration, what="price_contribution")
    total = checked_add(state.total_cumulative_price, contribution, what="total_cumulative_price")

    window_end = state.last_window_end
    window_twap = state.last_window_twap
    snapshot = state.last_window_end_cumulative_price
    closed = end_ts - window_end == WINDOW
    if closed:
        window_end = end_ts
        window_twap = checked_sub(total, snapshot, what="window_sum") // WINDOW
        snapshot = total

    new_state = replace(
        state,
        last_price=capped,
        last_timestamp=end_ts,
        total_cumulative_price=total,
        last_window_end=window_end,
        last_window_twap=window_twap,
        last_window_end_cumulative_price=snapshot,
    )
    event = PriceUpdated(
        timestamp=end_ts,
        price=capped,
        last_window_twap=window_twap,
        total_cumulative_price=total,
        window_closed=closed,
    )
    return new_state, [event]


def multi_full_window_accumulation(
    state: OracleState, config: OracleConfig, price: int, n_windows: int, end_ts: int,
) -> tuple[OracleState, Events]:
    """Closed-form equivalent of ``n_windows`` intra-window steps at ``price``.

    Must start on a window boundary; every one of the N windows closes, so the
    snapshot ends equal to the total.
    """
    if n_windows < 1:
        raise TwapInvariantError(["multi_window_count"])
    if state.last_timestamp != state.last_window_end:
        raise TwapInvariantError(["multi_window_alignment"])
    span = checked_mul(n_windows, WINDOW, limit=U64_MAX, what="multi_window_span")
    if checked_sub(end_ts, state.last_timestamp, what="multi_window_end") != span:
        raise TwapInvariantError(["multi_window_end"])

    sum_prices, p_final = full_window_price_sum(
        state.last_window_twap, price, config.cap_step, n_windows,
    )
    contribution = checked_mul(sum_prices, WINDOW, what="multi_window_contribution")
    total = checked_add(state.total_cumulative_price, contribution, what="total_cumulative_price")

    new_state = replace(
        state,
        last_price=p_final,
        last_timestamp=end_ts,
        total_cumulative_price=total,
        last_window_end=end_ts,
        last_window_twap=p_final,
        last_window_end_cumulative_price=total,
    )
    event = PriceUpdated(
        timestamp=end_ts,
        price=p_final,
        last_window_twap=p_final,
        total_cumulative_price=total,
        window_closed=True,
    )
    return new_state, [event]


def accumulate(
    state: OracleState, config: OracleConfig, timestamp: int, price: int,
) -> tuple[OracleState, Events]:
    """Advance ``state`` to ``timestamp`` holding ``price`` as the target."""
    if timestamp < state.last_timestamp:
        raise TimestampRegression(f"timestamp {timestamp} < last_timestamp {state.last_timestamp}")
    if state.last_timestamp < state.last_window_end:
        raise TwapInvariantError(["inv_window_end_not_ahead"])

    events: Events = []
    remaining = timestamp - state.last_timestamp

    # Stage 1: finish the current partial window.
    to_boundary = state.last_window_end + WINDOW - state.last_timestamp
    stage1 = min(to_boundary, remaining)
    if stage1 > 0:
        state, emitted = intra_window_accumulation(
            state, config, price, stage1, state.last_timestamp + stage1,
        )
        events.extend(emitted)
        remaining -= stage1

    # Stage 2: whole windows in O(1).
    if remaining >= WINDOW:
        n_windows = remaining // WINDOW
        span = n_windows * WINDOW
        state, emitted = multi_full_window_accumulation(
            state, config, price, n_windows, state.last_timestamp + span,
        )
        events.extend(emitted)
        remaining -= span

    # Stage 3: trailing partial window.
    if remaining > 0:
        state, emitted = intra_window_accumulation(
            state, config, price, remaining, state.last_timestamp + remaining,
        )
        events.extend(emitted)

    if state.last_timestamp != timestamp:
        raise TwapInvariantError(["accumulate_postcondition"])
    return state, events
