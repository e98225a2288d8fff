"""Data types for the `pcw_twap` oracle.

All types are frozen dataclasses (immutable); transitions build new values
with ``dataclasses.replace()``.

Units/conventions:
- timestamps and durations are integer milliseconds (u64 domain),
- prices are unsigned integers (u128 domain),
- ``total_cumulative_price`` is price x milliseconds (u256 domain).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OracleConfig:
    """Immutable construction parameters. Build via ``new_oracle()``."""

    init_price: int
    start_delay: int
    cap_ppm: int
    cap_step: int


@dataclass(frozen=True)
class OracleState:
    """Mutable-by-replacement accumulator state."""

    last_price: int
    last_window_twap: int
    last_timestamp: int = 0
    total_cumulative_price: int = 0
    last_window_end: int = 0
    last_window_end_cumulative_price: int = 0
    market_start_time: int | None = None

    @property
    def started(self) -> bool:
        return self.market_start_time is not None


@dataclass(frozen=True)
class PriceUpdated:
    """Notification emitted by each accumulation stage."""

    timestamp: int
    price: int
    last_window_twap: int
    total_cumulative_price: int
    window_closed: bool = False


@dataclass(frozen=True)
class WriteResult:
    """Post-state plus the notifications produced by one write."""

    state: OracleState
    events: tuple[PriceUpdated, ...] = ()
    threshold_crossed: bool = False
