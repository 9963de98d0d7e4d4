# -*- coding: utf-8 -*-
"""observability.py

Structured logs for the mood core and its HTTP surface
------------------------------------------------------

- One JSON line per event so log tooling can filter on `event`.
- Journal text never goes into a log line; callers pass counts, labels
  and flags only.
- A logging failure must never break classification or aggregation.

Environment
- OBS_LOG_JSON=true/false (default true)
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

OBS_LOG_JSON = (os.getenv("OBS_LOG_JSON", "true").strip().lower() != "false")


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _safe_default(o: Any) -> str:
    try:
        return str(o)
    except Exception:
        return repr(o)


def _safe_json_dumps(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=_safe_default)


def log_event(logger: logging.Logger, event: str, *, level: str = "info", **fields: Any) -> None:
    """Write a structured event log.

    - level: info|warning|error|debug
    - event: stable identifier (e.g. emotion_classified, timeline_merged)
    """
    payload: Dict[str, Any] = {
        "ts": _iso_now(),
        "event": event,
        **fields,
    }

    msg = _safe_json_dumps(payload) if OBS_LOG_JSON else f"{event} {payload}"

    try:
        fn = getattr(logger, level, logger.info)
        fn(msg)
    except Exception:
        try:
            logger.info(msg)
        except Exception:
            pass


def new_run_id(prefix: str = "req") -> str:
    """Short id for correlating the log lines of one request."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def elapsed_ms(start_ms: float) -> int:
    try:
        return int(max(0.0, monotonic_ms() - float(start_ms)))
    except Exception:
        return 0
