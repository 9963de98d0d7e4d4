# -*- coding: utf-8 -*-
"""
ZenYourself Mood API
--------------------
- POST /mood/classify        : text -> emotion, confidence, mood tags
- POST /mood/stats           : entries -> series / average / active days / streak
- POST /mood/timeline/merge  : provider + legacy lists -> one deduplicated timeline
- GET  /healthz              : health check
Notes:
- Stateless; entries are read from the request and never stored
- Journal text is never written to logs
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mood_engine.observability import elapsed_ms, log_event, monotonic_ms, new_run_id

from .api_mood_classify import register_mood_classify_routes
from .api_mood_stats import register_mood_stats_routes
from .api_mood_timeline import register_mood_timeline_routes

APP_NAME = os.getenv("MOOD_APP_NAME", "ZenYourself Mood")
try:
    PORT = int(os.getenv("MOOD_PORT", "8765"))
except ValueError:
    PORT = 8765
HOST = os.getenv("MOOD_HOST", "0.0.0.0")
# For release, set MOOD_CORS_ORIGINS to a comma-separated list of allowed origins.
ALLOWED_ORIGINS_RAW = os.getenv("MOOD_CORS_ORIGINS", "*")
ALLOWED_ORIGINS = [o.strip() for o in ALLOWED_ORIGINS_RAW.split(",") if o.strip()] or ["*"]

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("mood_api")

# ---------- App ----------
app = FastAPI(title=APP_NAME, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _request_log(request: Request, call_next):
    rid = new_run_id("req")
    start = monotonic_ms()
    response = await call_next(request)
    log_event(
        logger,
        "http_request",
        request_id=rid,
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        elapsed_ms=elapsed_ms(start),
    )
    response.headers["X-Request-Id"] = rid
    return response


register_mood_classify_routes(app)
register_mood_stats_routes(app)
register_mood_timeline_routes(app)


@app.get("/healthz")
async def healthz():
    return {"status": "ok", "app": APP_NAME}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
