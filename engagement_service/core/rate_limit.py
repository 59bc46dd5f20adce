"""Per-client rate limiting for the API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from engagement_service.core.config import settings
from engagement_service.utils.envelopes import api_error

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    storage_uri="memory://",
    headers_enabled=False,
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content=api_error(
            code="RATE_LIMITED",
            message="Too many requests from this IP, please try again later.",
            details={"limit": str(exc.detail)},
        ),
    )


def configure_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter, its middleware and the 429 handler to ``app``."""
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
