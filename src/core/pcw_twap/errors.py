"""Exception types for the `pcw_twap` oracle.

Every rejection is a subclass of ``TwapError`` carrying a stable ``code``
string, so callers can either catch by class or switch on ``exc.code``.
"""

from __future__ import annotations


class TwapError(Exception):
    """Base class for all oracle rejections."""

    code: str = "twap_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


# -- Construction --------------------------------------------------------------

class TwapConfigError(TwapError, ValueError):
    """Raised when oracle parameters are rejected at construction."""

    code = "invalid_config"


class ZeroInitialization(TwapConfigError):
    code = "zero_initialization"


class ZeroStep(TwapConfigError):
    code = "zero_step"


class InvalidCapPpm(TwapConfigError):
    code = "invalid_cap_ppm"


class LongDelay(TwapConfigError):
    code = "long_delay"


class MisalignedDelay(TwapConfigError):
    code = "misaligned_delay"


class StepOverflow(TwapConfigError):
    code = "step_overflow"


# -- Lifecycle -----------------------------------------------------------------

class AlreadyStarted(TwapError):
    code = "already_started"


class MarketNotStarted(TwapError):
    code = "market_not_started"


# -- Write / read --------------------------------------------------------------

class TimestampRegression(TwapError):
    code = "timestamp_regression"


class InvalidObservation(TwapError, ValueError):
    """Timestamp or price outside its integer domain."""

    code = "invalid_observation"


class StaleTwap(TwapError):
    code = "stale_twap"


class ZeroPeriod(TwapError):
    code = "zero_period"


# -- Internal (should be unreachable with validated input) ---------------------

class TwapOverflowError(TwapError, ArithmeticError):
    """Raised when checked accumulator arithmetic leaves its domain."""

    code = "overflow"


class TwapInvariantError(TwapError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
