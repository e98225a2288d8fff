#!/usr/bin/env python3
"""Replay an observation trace through the TWAP oracle.

Trace format (JSON):

    {"start_time": 1000,
     "observations": [[61000, 11000], [70000, 10000]],
     "read_at": [70000]}

Each timestamp in ``read_at`` is read right after the last observation at or
before it has been applied; a read that is not at a written tick reports the
rejection code (normally ``stale_twap``). A rejected observation is reported
as its own row, ``{"now", "price", "error"}``, and the replay continues with
the oracle state unchanged. Prints one JSON object per row.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.oracle import TwapOracle
from src.core.pcw_twap import OracleParams, TwapError, load_params


def replay(params: OracleParams, trace: Mapping[str, Any]) -> list[dict[str, Any]]:
    oracle = TwapOracle.from_params(params)
    oracle.set_start_time(int(trace["start_time"]))

    observations = sorted((int(ts), int(p)) for ts, p in trace.get("observations", []))
    reads = sorted(int(t) for t in trace.get("read_at", []))

    out: list[dict[str, Any]] = []
    i = 0
    for now in reads:
        while i < len(observations) and observations[i][0] <= now:
            ts, price = observations[i]
            i += 1
            try:
                oracle.write_observation(ts, price)
            except TwapError as exc:
                out.append({"now": ts, "price": price, "error": exc.code})
        row: dict[str, Any] = {"now": now, "last_price": oracle.last_price}
        try:
            row["twap"] = oracle.get_twap(now)
        except TwapError as exc:
            row["error"] = exc.code
        out.append(row)
    return out


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Replay (timestamp, price) observations through the TWAP oracle.")
    ap.add_argument("--params", required=True, help="Oracle params file (.yaml/.yml/.json)")
    ap.add_argument("--trace", required=True, help="Observation trace (.json)")
    args = ap.parse_args(argv)

    params = load_params(args.params)
    trace = json.loads(Path(args.trace).read_text(encoding="utf-8"))
    for row in replay(params, trace):
        print(json.dumps(row, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
