"""
TWAP oracle shell.

The functional core (`src.core.pcw_twap`) computes every transition
deterministically over immutable state. This module is the imperative shell:
- it owns the current `OracleState` for one venue,
- it serializes writes and reads with a lock (single-writer ownership),
- it delivers `PriceUpdated` notifications to registered listeners.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .pcw_twap import (
    OracleConfig,
    OracleParams,
    OracleState,
    PriceUpdated,
    TwapError,
    TwapInvariantError,
    build_oracle,
    get_twap,
    new_oracle,
    set_start_time,
    state_to_dict,
    write_observation,
)
from .pcw_twap.invariants import check_all

logger = logging.getLogger(__name__)

Listener = Callable[[PriceUpdated], None]


class TwapOracle:
    """Single-venue TWAP oracle holding its own state."""

    def __init__(self, init_price: int, start_delay: int, cap_ppm: int) -> None:
        self._config, self._state = new_oracle(init_price, start_delay, cap_ppm)
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    @classmethod
    def from_params(cls, params: OracleParams) -> "TwapOracle":
        config, _ = build_oracle(params)
        return cls(config.init_price, config.start_delay, config.cap_ppm)

    @classmethod
    def restore(cls, config: OracleConfig, state: OracleState) -> "TwapOracle":
        """Rehydrate from persisted config/state (see `pcw_twap.state`).

        Raises ``TwapInvariantError`` if ``state`` violates any registered
        invariant, so a corrupted snapshot is rejected before it is owned.
        """
        violations = check_all(state)
        if violations:
            logger.error(f"Refusing to restore state: {violations}")
            raise TwapInvariantError(violations)
        oracle = cls(config.init_price, config.start_delay, config.cap_ppm)
        oracle._state = state
        return oracle

    # -- Accessors -------------------------------------------------------------

    @property
    def config(self) -> OracleConfig:
        return self._config

    @property
    def state(self) -> OracleState:
        return self._state

    @property
    def last_price(self) -> int:
        return self._state.last_price

    @property
    def last_timestamp(self) -> int:
        return self._state.last_timestamp

    @property
    def market_start_time(self) -> int | None:
        return self._state.market_start_time

    @property
    def last_window_end(self) -> int:
        return self._state.last_window_end

    @property
    def last_window_twap(self) -> int:
        return self._state.last_window_twap

    @property
    def total_cumulative_price(self) -> int:
        return self._state.total_cumulative_price

    def snapshot(self) -> dict[str, int | None]:
        return state_to_dict(self._state)

    # -- Notifications -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    # -- Operations --------------------------------------------------------------

    def set_start_time(self, start_time: int) -> None:
        with self._lock:
            self._state = set_start_time(self._state, start_time)
        logger.info(f"TWAP oracle activated at {start_time} (delay={self._config.start_delay}ms)")

    def write_observation(self, timestamp: int, price: int) -> tuple[PriceUpdated, ...]:
        """Apply one observation; returns the notifications it produced."""
        with self._lock:
            try:
                result = write_observation(self._state, self._config, timestamp, price)
            except TwapError as exc:
                logger.warning(f"Rejected observation ({timestamp}, {price}): {exc.code}: {exc}")
                raise
            self._state = result.state

        if result.threshold_crossed:
            logger.debug(f"Start delay elapsed at {timestamp}; accumulators reset")
        for event in result.events:
            if event.window_closed:
                logger.debug(f"Window closed at {event.timestamp}: twap={event.last_window_twap}")
            for listener in list(self._listeners):
                listener(event)
        return result.events

    def get_twap(self, now: int) -> int:
        with self._lock:
            try:
                return get_twap(self._state, self._config, now)
            except TwapError as exc:
                logger.warning(f"Rejected TWAP read at {now}: {exc.code}: {exc}")
                raise

    def observe_and_read(self, timestamp: int, price: int) -> int:
        """Write then read in the same tick, as the freshness rule requires."""
        with self._lock:
            self.write_observation(timestamp, price)
            return self.get_twap(timestamp)
