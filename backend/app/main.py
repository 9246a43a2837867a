"""
Safar Air Admin Content API
FastAPI back-end for the travel site's admin panel. Packages, testimonials,
destination highlights and site settings are kept in a document store that
is opened once at startup and shared by every request.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import asyncio
import logging
import time
import uuid

from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.errors import ContentError, InternalError, ValidationFailed
from app.core.monitoring import configure_logging, request_id_var
from app.core.rate_limiting import limiter, rate_limit_handler
from app.store.factory import create_guard, create_store
from app.api import health, routes_destinations, routes_packages, routes_settings, routes_testimonials

configure_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

STORE_INIT_ATTEMPTS = 3
STORE_INIT_BACKOFF = 2.0  # seconds, doubled after each failed attempt


async def _open_store():
    delay = STORE_INIT_BACKOFF
    for attempt in range(1, STORE_INIT_ATTEMPTS + 1):
        try:
            return create_store(settings)
        except Exception as e:
            if attempt == STORE_INIT_ATTEMPTS:
                logger.critical(f"Giving up on {settings.store_backend} store after {attempt} attempts: {e}")
                raise RuntimeError(f"Content store init failed: {e}") from e
            logger.warning(f"Opening {settings.store_backend} store failed ({e}); attempt {attempt + 1} in {delay:g}s")
            await asyncio.sleep(delay)
            delay *= 2


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.app_name} v{settings.app_version} starting ({settings.environment})")

    store = await _open_store()
    app.state.store = store
    app.state.guard = create_guard(store, settings)
    logger.info(f"Content store ready: {store.name}")

    yield

    store.close()
    logger.info("Content store closed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Admin API for travel packages, testimonials, destination highlights and site settings.",
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Correlation ID, timing and hardening headers for every response."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    took = time.perf_counter() - started

    response.headers.update({
        "X-Request-ID": request_id,
        "X-Process-Time": f"{took:.3f}",
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
    })
    logger.info(f"[{request_id}] {request.method} {request.url.path} {response.status_code} {took * 1000:.0f}ms")
    return response


# ============================================================================
# ERROR RENDERING: {error, message, timestamp}
# ============================================================================

def _render(exc: ContentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(ContentError)
async def content_error_handler(request: Request, exc: ContentError):
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, f"{request.method} {request.url.path}: {exc.code}: {exc.message}")
    return _render(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return await content_error_handler(request, ValidationFailed.from_pydantic(exc, prefix="Invalid request"))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = f"{type(exc).__name__}: {exc}" if settings.debug else "An unexpected error occurred"
    return _render(InternalError(message))


for module in (health, routes_packages, routes_testimonials, routes_destinations, routes_settings):
    app.include_router(module.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "store": settings.store_backend,
        "api": settings.api_prefix,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
