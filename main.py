"""TripBrief: FastAPI entry point."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app import llm_client
from app.config import settings
from app.exceptions import LimitExceeded
from app.rate_limiter import RateLimiter, build_policies
from app.routers import briefs
from app.sweeper import ExpirySweeper
from app.window_store import create_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Policy errors are configuration errors: fail startup, not requests
    policies = build_policies(settings.rate_limit_per_minute, settings.rate_limit_per_hour)
    store = create_store(settings.redis_url, settings.rate_limit_prefix, settings.store_timeout_seconds)
    app.state.rate_limiter = RateLimiter(store, policies)
    if not await store.ping():
        logger.warning("Rate limit store unreachable at startup; requests will fail open until it recovers")

    sweeper = ExpirySweeper(store, settings.sweep_interval_seconds)
    sweeper.start()
    app.state.sweeper = sweeper

    llm_client.init_client()

    yield

    await sweeper.stop()
    await llm_client.close_client()
    try:
        await store.close()
    except Exception:
        logger.exception("Error closing rate limit store")


app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


@app.exception_handler(LimitExceeded)
async def limit_exceeded_handler(request: Request, exc: LimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"error": exc.message, "resetTime": int(exc.reset_at * 1000)},
        headers={
            "Retry-After": str(exc.retry_after_seconds()),
            "X-RateLimit-Remaining": "0",
        },
    )


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    if request.url.path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store"
    return response


app.include_router(briefs.router)


@app.get("/health")
async def health(request: Request):
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return JSONResponse(status_code=503, content={"status": "starting"})
    store_ok = await limiter.store.ping()
    return {
        "status": "ok" if store_ok else "degraded",
        "store": limiter.store.backend,
        "store_reachable": store_ok,
    }


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port)
