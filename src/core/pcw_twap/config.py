"""Oracle parameter loading.

Parameters come from a YAML/JSON file or a plain mapping:

    init_price: 1000000
    start_delay_ms: 3600000
    cap_ppm: 1000

``validate()`` collects every problem; loaders log each one and raise.
The derived ``cap_step`` is never read from config.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .engine import new_oracle
from .math import ONE_WEEK_MS, PPM_DENOMINATOR, U128_MAX, WINDOW
from .types import OracleConfig, OracleState

logger = logging.getLogger(__name__)

_FIELDS = ("init_price", "start_delay_ms", "cap_ppm")


@dataclass(frozen=True)
class OracleParams:
    init_price: int
    start_delay_ms: int = 0
    cap_ppm: int = 1_000

    def validate(self) -> list[str]:
        errors = []
        for name in _FIELDS:
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int):
                errors.append(f"{name} must be an int")
        if errors:
            return errors
        if not 0 < self.init_price <= U128_MAX:
            errors.append("init_price must be in (0, 2**128)")
        if not 0 < self.cap_ppm <= PPM_DENOMINATOR:
            errors.append(f"cap_ppm must be in (0, {PPM_DENOMINATOR}]")
        if not 0 <= self.start_delay_ms < ONE_WEEK_MS:
            errors.append(f"start_delay_ms must be in [0, {ONE_WEEK_MS})")
        elif self.start_delay_ms % WINDOW != 0:
            errors.append(f"start_delay_ms must be a multiple of {WINDOW}")
        return errors

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def params_from_mapping(d: Mapping[str, Any]) -> OracleParams:
    """Build and validate params from a mapping. Unknown keys are rejected."""
    if not isinstance(d, Mapping):
        raise TypeError("oracle params must be a mapping")
    unknown = sorted(set(d) - set(_FIELDS))
    if unknown:
        raise ValueError(f"unknown oracle param(s): {', '.join(unknown)}")
    if "init_price" not in d:
        raise ValueError("init_price is required")

    params = OracleParams(**dict(d))
    errors = params.validate()
    if errors:
        for error in errors:
            logger.error(f"Oracle param validation error: {error}")
        raise ValueError(f"oracle params invalid ({len(errors)} errors): {'; '.join(errors)}")
    return params


def load_params(path: str | Path) -> OracleParams:
    """Load params from ``.yaml``/``.yml`` or ``.json``."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        obj = yaml.safe_load(text) or {}
    elif path.suffix == ".json":
        obj = json.loads(text)
    else:
        raise ValueError(f"Unsupported params file format: {path.suffix}")

    # Accept either a bare mapping or one nested under `oracle:`.
    if isinstance(obj, Mapping) and isinstance(obj.get("oracle"), Mapping):
        obj = obj["oracle"]
    params = params_from_mapping(obj)
    logger.info(f"Loaded oracle params from {path}")
    return params


def build_oracle(params: OracleParams) -> tuple[OracleConfig, OracleState]:
    return new_oracle(params.init_price, params.start_delay_ms, params.cap_ppm)
