import logging
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query

from online.api_schemas import (
    CheckResponse,
    ConfigResponse,
    ConnectivityStateResponse,
    HealthResponse,
    StatusEventResponse,
)
from online.checks.prober import check_async
from online.config import default_targets, settings
from online.errors import InvalidTimeout
from online.log_config import setup_logging
from online.runner import loop_forever
from online.state import StateStore

logger = logging.getLogger(__name__)
store = StateStore(max_events=settings.MONITOR_MAX_EVENTS)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging(settings.ONLINE_LOG_LEVEL)
    t = threading.Thread(
        target=loop_forever,
        args=(store, settings.MONITOR_INTERVAL),
        daemon=True,
    )
    t.start()
    logger.info("connectivity monitor started, interval=%ss", settings.MONITOR_INTERVAL)
    yield


app = FastAPI(
    title="Online",
    version="1.0.0",
    description=(
        "Internet connectivity monitor: probes a primary and a backup host over TCP, "
        "and exposes the current state and transition history."
    ),
    lifespan=lifespan,
)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["system"],
    summary="Health Check",
    description="Liveness endpoint used by probes and orchestration.",
)
def health():
    return {"status": "ok"}


@app.get(
    "/config",
    response_model=ConfigResponse,
    tags=["system"],
    summary="Current Effective Config",
    description="Probe targets, per-attempt timeout and monitor interval.",
)
def config():
    targets = default_targets()
    return {
        "primary": str(targets.primary),
        "backup": str(targets.backup),
        "timeout_s": settings.ONLINE_TIMEOUT_SECONDS,
        "interval": settings.MONITOR_INTERVAL,
    }


@app.get(
    "/api/status",
    response_model=ConnectivityStateResponse,
    tags=["status"],
    summary="Current Connectivity State",
    description="Result of the latest background check.",
)
def status():
    return store.snapshot()


@app.get(
    "/api/status/events",
    response_model=list[StatusEventResponse],
    tags=["status"],
    summary="Recent Connectivity Events",
    description="Recent INIT/UP/DOWN events, newest first.",
)
def status_events(
    limit: int = Query(default=50, ge=1, le=500, description="Max number of events to return")
):
    return store.events(limit=limit)


@app.post(
    "/api/check",
    response_model=CheckResponse,
    tags=["status"],
    summary="Run Check Now",
    description="Runs an on-demand check without touching the stored state.",
)
async def run_check(
    timeout: float | None = Query(
        default=None, description="Per-attempt timeout in seconds; omit to let the OS decide"
    )
):
    res = await check_async(timeout, targets=default_targets())
    if isinstance(res.error, InvalidTimeout):
        raise HTTPException(status_code=422, detail=str(res.error))
    return res.to_dict()
