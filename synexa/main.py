"""
Synexa-SIS application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from synexa.core.config import settings
from synexa.core.database import init_db, close_db
from synexa.core.exceptions import SynexaError, error_response
from synexa.core.logging_config import logger
from synexa.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from synexa.core.rate_limiter import limiter, rate_limit_exceeded_handler
from synexa.api.v1.router import api_router
import synexa.models  # noqa: F401  register models on Base.metadata

APP_VERSION = "1.0.0"

_PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def check_startup_config() -> None:
    """Refuse to start without signing secrets; warn on risky settings"""
    missing = [
        name for name in ("SECRET_KEY", "JWT_SECRET_KEY")
        if getattr(settings, name) in _PLACEHOLDER_SECRETS
    ]
    if not settings.DATABASE_URL:
        missing.append("DATABASE_URL")
    if missing:
        for name in missing:
            logger.critical(f"[Startup] {name} em falta ou com valor por omissão")
        raise RuntimeError(f"Configuração obrigatória em falta: {', '.join(missing)}")

    if settings.ENVIRONMENT == "production" and settings.DATABASE_URL.startswith("sqlite"):
        logger.warning("[Startup] SQLite em produção; use PostgreSQL")
    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("[Startup] Rate limiting desativado; o login não tem proteção contra força bruta")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting {settings.APP_NAME} for {settings.SCHOOL_NAME} "
        f"(env={settings.ENVIRONMENT}, api={settings.API_VERSION})"
    )
    check_startup_config()

    await init_db()
    settings.documents_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"[Startup] Database ready, storage at {settings.storage_dir.resolve()}")

    yield

    await close_db()
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Gestão escolar: matrículas, presenças, notas, transporte, documentos e finanças",
    version=APP_VERSION,
    lifespan=lifespan,
    redirect_slashes=False
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS wraps size limit, security headers, logging, then the rate limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_UPLOAD_SIZE + 1024 * 1024)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time", "Content-Disposition"],
)


@app.exception_handler(SynexaError)
async def synexa_exception_handler(request: Request, exc: SynexaError):
    where = f"{request.method} {request.url.path}"
    if exc.status_code >= 500:
        logger.log_unhandled(exc, where)
    else:
        logger.info(f"[{exc.code}] {exc.message}", extra={"http_path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.log_unhandled(exc, f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_response(SynexaError(
            str(exc) if settings.DEBUG else "Ocorreu um erro interno"
        )),
    )


@app.get("/health", tags=["Health"])
@limiter.exempt
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "school": settings.SCHOOL_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Bem-vindo ao {settings.APP_NAME}",
        "school": settings.SCHOOL_NAME,
        "docs": "/docs",
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


def run():
    """Entry point for the ``synexa-sis`` console script"""
    import uvicorn
    uvicorn.run(
        "synexa.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
