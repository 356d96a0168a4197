from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from globetrotter.core.config import Settings, settings
from globetrotter.core.logger import logger


def build_limiter(config: Settings = settings, storage_uri: str = None) -> Limiter:
    """Per-IP fixed-window limiter applied to every route through the middleware."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[f"{config.rate_limit_max} per {config.RATE_LIMIT_WINDOW_SECONDS} second"],
        storage_uri=storage_uri or config.REDIS_URL,
        headers_enabled=True,
        enabled=config.rate_limit_active,
    )


# Called synchronously by SlowAPIMiddleware, so this must stay a plain function
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}")
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": "Too many requests, please try again later."},
    )


def setup_rate_limit(app: FastAPI, limiter: Limiter = None) -> Limiter:
    app.state.limiter = limiter or build_limiter()
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return app.state.limiter
