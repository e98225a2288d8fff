"""Invariant checkers for `pcw_twap`.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable

from .math import U64_MAX, U128_MAX, U256_MAX
from .types import OracleState


def inv_window_end_not_ahead(s: OracleState) -> bool:
    return s.last_timestamp >= s.last_window_end


def inv_snapshot_le_total(s: OracleState) -> bool:
    return s.last_window_end_cumulative_price <= s.total_cumulative_price


def inv_prices_in_domain(s: OracleState) -> bool:
    return 0 <= s.last_price <= U128_MAX and 0 <= s.last_window_twap <= U128_MAX


def inv_accumulator_in_domain(s: OracleState) -> bool:
    return 0 <= s.last_window_end_cumulative_price and s.total_cumulative_price <= U256_MAX


def inv_timestamps_in_domain(s: OracleState) -> bool:
    return 0 <= s.last_window_end and s.last_timestamp <= U64_MAX


def inv_unstarted_is_pristine(s: OracleState) -> bool:
    if s.market_start_time is not None:
        return True
    return (
        s.last_timestamp == 0
        and s.last_window_end == 0
        and s.total_cumulative_price == 0
        and s.last_window_end_cumulative_price == 0
    )


def inv_window_end_after_start(s: OracleState) -> bool:
    if s.market_start_time is None:
        return True
    return s.last_window_end >= s.market_start_time


INVARIANT_REGISTRY: dict[str, Callable[[OracleState], bool]] = {
    "inv_window_end_not_ahead": inv_window_end_not_ahead,
    "inv_snapshot_le_total": inv_snapshot_le_total,
    "inv_prices_in_domain": inv_prices_in_domain,
    "inv_accumulator_in_domain": inv_accumulator_in_domain,
    "inv_timestamps_in_domain": inv_timestamps_in_domain,
    "inv_unstarted_is_pristine": inv_unstarted_is_pristine,
    "inv_window_end_after_start": inv_window_end_after_start,
}


def check_all(state: OracleState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
