"""
Rate Limiting for Synexa-SIS API
================================
slowapi with in-memory storage.

- Every route: RATE_LIMIT_PER_MINUTE per client, applied by
  ``SlowAPIMiddleware`` (registered in ``synexa.main``)
- /auth/login and /auth/parent-login: LOGIN_RATE_LIMIT through
  ``login_rate_limit()``, which replaces the default for those routes
- /health is exempt
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from synexa.core.config import settings
from synexa.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key.

    Priority:
    1. Authenticated user ID (set on request.state by the auth dependency)
    2. IP address (anonymous users, and every check made by the middleware
       before authentication runs)
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """JSON 429 with a Retry-After header.

    Synchronous: SlowAPIMiddleware only calls synchronous handlers.
    """
    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": "Muitas requisições. Tente novamente em instantes.",
                "details": {"limit": str(exc.detail)},
            },
        },
        headers={"Retry-After": "60"},
    )


def login_rate_limit():
    """Rate limit for credential endpoints"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT)
