"""`pcw_twap`: crankless, window-capped TWAP price oracle.

- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- idle periods of any length cost O(1) via a closed-form ramp sum,
- reads are only valid in the same tick as the last write.

Public API:
- `new_oracle(init_price, start_delay, cap_ppm) -> (OracleConfig, OracleState)`
- `set_start_time(state, t) -> OracleState`
- `write_observation(state, config, timestamp, price) -> WriteResult`
- `get_twap(state, config, now) -> int`
"""

from .config import OracleParams, build_oracle, load_params, params_from_mapping
from .engine import delay_threshold, get_twap, new_oracle, set_start_time, write_observation
from .errors import (
    AlreadyStarted,
    InvalidCapPpm,
    InvalidObservation,
    LongDelay,
    MarketNotStarted,
    MisalignedDelay,
    StaleTwap,
    StepOverflow,
    TimestampRegression,
    TwapConfigError,
    TwapError,
    TwapInvariantError,
    TwapOverflowError,
    ZeroInitialization,
    ZeroPeriod,
    ZeroStep,
)
from .math import ONE_WEEK_MS, PPM_DENOMINATOR, WINDOW, cap_price
from .state import config_from_dict, config_to_dict, state_from_dict, state_to_dict
from .types import OracleConfig, OracleState, PriceUpdated, WriteResult

__all__ = [
    "new_oracle",
    "set_start_time",
    "write_observation",
    "get_twap",
    "delay_threshold",
    "OracleParams",
    "load_params",
    "params_from_mapping",
    "build_oracle",
    "cap_price",
    "WINDOW",
    "PPM_DENOMINATOR",
    "ONE_WEEK_MS",
    "OracleConfig",
    "OracleState",
    "PriceUpdated",
    "WriteResult",
    "state_to_dict",
    "state_from_dict",
    "config_to_dict",
    "config_from_dict",
    "TwapError",
    "TwapConfigError",
    "ZeroInitialization",
    "ZeroStep",
    "InvalidCapPpm",
    "LongDelay",
    "MisalignedDelay",
    "StepOverflow",
    "AlreadyStarted",
    "MarketNotStarted",
    "TimestampRegression",
    "InvalidObservation",
    "StaleTwap",
    "ZeroPeriod",
    "TwapOverflowError",
    "TwapInvariantError",
]
