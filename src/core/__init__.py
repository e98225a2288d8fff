"""
Core oracle algorithms
"""

from .oracle import TwapOracle
from .pcw_twap import (
    OracleConfig,
    OracleParams,
    OracleState,
    PriceUpdated,
    TwapError,
    WriteResult,
    get_twap,
    load_params,
    new_oracle,
    set_start_time,
    write_observation,
)

__all__ = [
    "TwapOracle",
    "OracleConfig",
    "OracleParams",
    "OracleState",
    "PriceUpdated",
    "TwapError",
    "WriteResult",
    "get_twap",
    "load_params",
    "new_oracle",
    "set_start_time",
    "write_observation",
]
