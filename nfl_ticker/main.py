from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query

from nfl_ticker.helper import ScoreboardHelper
from nfl_ticker.log_buffer import BufferHandler, attach, parse_level
from nfl_ticker.publisher import LatestValuePublisher
from nfl_ticker.settings import load_settings

app = FastAPI(title="NFL Ticker")
logger = logging.getLogger(__name__)
publisher = LatestValuePublisher()
helper = ScoreboardHelper(publisher)
log_buffer = BufferHandler(maxlen=500)


@app.on_event("startup")
async def start_poller() -> None:
    attach(log_buffer)
    config = load_settings()
    logger.info("App starting up, initializing scoreboard poller")
    helper.configure(config)


@app.on_event("shutdown")
async def stop_poller() -> None:
    await helper.shutdown()


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/schedule")
def api_schedule():
    return publisher.snapshot()


@app.get("/api/logs")
def api_logs(
    limit: int = 100,
    level: str = Query("DEBUG", description="Minimum level, e.g. WARNING"),
    cycle: int | None = Query(None, description="Only lines from this fetch cycle"),
):
    try:
        min_level = parse_level(level)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"entries": log_buffer.entries(limit, min_level=min_level, cycle=cycle)}
