"""State serialization for `pcw_twap`.

The storage layer persists the six accumulator fields plus the optional
start time; these helpers convert to and from plain dicts.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s`.
"""

from __future__ import annotations

from typing import Any, Mapping

from .engine import new_oracle
from .types import OracleConfig, OracleState

# Auto-derived from the dataclass field definitions (single source of truth).
STATE_VAR_NAMES: tuple[str, ...] = tuple(OracleState.__dataclass_fields__)
CONFIG_VAR_NAMES: tuple[str, ...] = tuple(OracleConfig.__dataclass_fields__)


def _as_int(name: str, val: Any) -> int:
    if isinstance(val, bool) or not isinstance(val, int):
        raise TypeError(f"{name!r} must be int, got {type(val).__name__}")
    return int(val)  # normalize int subclasses (e.g. numpy)


def state_to_dict(state: OracleState) -> dict[str, int | None]:
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def state_from_dict(d: Mapping[str, Any]) -> OracleState:
    """Deserialize a dict to an OracleState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if name == "market_start_time" and val is None:
            kwargs[name] = None
        else:
            kwargs[name] = _as_int(name, val)
    return OracleState(**kwargs)


def config_to_dict(config: OracleConfig) -> dict[str, int]:
    return {name: getattr(config, name) for name in CONFIG_VAR_NAMES}


def config_from_dict(d: Mapping[str, Any]) -> OracleConfig:
    """Rebuild a config through ``new_oracle()`` so it is re-validated.

    A stored ``cap_step`` that disagrees with the derived one is rejected.
    """
    config, _ = new_oracle(
        _as_int("init_price", d["init_price"]),
        _as_int("start_delay", d["start_delay"]),
        _as_int("cap_ppm", d["cap_ppm"]),
    )
    if "cap_step" in d and _as_int("cap_step", d["cap_step"]) != config.cap_step:
        raise ValueError(f"stored cap_step {d['cap_step']} != derived {config.cap_step}")
    return config
