"""Pure integer arithmetic for the `pcw_twap` oracle.

Every function is stateless and operates on plain Python ints. Python ints
never wrap, so the fixed widths of the on-chain types (u64 timestamps, u128
prices, u256 accumulator) are enforced explicitly:

- ``checked_*`` helpers raise ``TwapOverflowError`` when a result leaves its
  domain. All accumulation arithmetic goes through them.
- ``cap_price`` is the only saturating operation.
"""

from __future__ import annotations

from .errors import StepOverflow, TwapOverflowError

# Domain constants
WINDOW: int = 60_000  # ms
PPM_DENOMINATOR: int = 1_000_000
ONE_WEEK_MS: int = 604_800_000

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
U256_MAX: int = (1 << 256) - 1


# -- Checked helpers -----------------------------------------------------------

def checked_add(a: int, b: int, *, limit: int = U256_MAX, what: str = "add") -> int:
    out = a + b
    if out < 0 or out > limit:
        raise TwapOverflowError(f"overflow in {what}: {a} + {b}")
    return out


def checked_sub(a: int, b: int, *, what: str = "sub") -> int:
    if b > a:
        raise TwapOverflowError(f"underflow in {what}: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int, *, limit: int = U256_MAX, what: str = "mul") -> int:
    out = a * b
    if out < 0 or out > limit:
        raise TwapOverflowError(f"overflow in {what}: {a} * {b}")
    return out


def abs_diff(a: int, b: int) -> int:
    """``|a - b|`` without leaving the unsigned domain."""
    return a - b if a >= b else b - a


def ceil_div(a: int, b: int) -> int:
    return -((-a) // b)


# -- Capping -------------------------------------------------------------------

def cap_price(baseline: int, target: int, step: int) -> int:
    """Move from ``baseline`` toward ``target`` by at most ``step``.

    Saturates at ``U128_MAX`` going up and at 0 going down.
    """
    if target > baseline:
        upper = min(baseline + step, U128_MAX)
        return min(target, upper)
    lower = baseline - step if baseline > step else 0
    return max(target, lower)


def derive_cap_step(init_price: int, cap_ppm: int) -> int:
    """``max(1, floor(init_price * cap_ppm / 1e6))`` saturated to ``U128_MAX``."""
    product = init_price * cap_ppm
    if product > U256_MAX:
        raise StepOverflow(f"cap step derivation overflow: {init_price} * {cap_ppm}")
    step = min(product // PPM_DENOMINATOR, U128_MAX)
    return max(1, step)


# -- Closed-form ramp ----------------------------------------------------------

def full_window_price_sum(baseline: int, target: int, step: int, n_windows: int) -> tuple[int, int]:
    """Sum of per-window capped prices over ``n_windows`` whole windows.

    With an absolute cap the sequence of closing prices is an arithmetic ramp
    ``baseline ± step, ± 2*step, ...`` until it reaches ``target``, then flat.

    Returns ``(sum_prices, final_price)``.
    """
    if n_windows < 1:
        raise ValueError(f"n_windows must be >= 1: {n_windows}")
    if step < 1:
        raise ValueError(f"step must be >= 1: {step}")

    gap = abs_diff(target, baseline)
    k_cap = 0 if gap == 0 else ceil_div(gap, step)
    n_ramp = min(n_windows, max(k_cap - 1, 0))
    n_flat = n_windows - n_ramp

    # n_ramp * (n_ramp + 1) is always even.
    tri = checked_mul(n_ramp, n_ramp + 1, what="ramp_terms") // 2
    v_ramp = checked_mul(step, tri, what="ramp_sum")
    v_flat = checked_mul(gap, n_flat, what="flat_sum")
    s_dev = checked_add(v_ramp, v_flat, what="deviation_sum")

    base_sum = checked_mul(baseline, n_windows, what="base_sum")
    final_move = min(checked_mul(step, n_windows, what="final_move"), gap)

    if target >= baseline:
        return checked_add(base_sum, s_dev, what="price_sum"), baseline + final_move
    return checked_sub(base_sum, s_dev, what="price_sum"), baseline - final_move
