import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from syllabus_hub import config
from syllabus_hub.admin.admin_router import router as admin_router
from syllabus_hub.auth.auth_router import router as auth_router
from syllabus_hub.catalog.catalog_router import router as catalog_router
from syllabus_hub.catalog.subject_router import router as subject_router
from syllabus_hub.database import close_client, create_indexes, get_db
from syllabus_hub.limiter import limiter
from syllabus_hub.logging_config import get_logger, setup_logging
from syllabus_hub.ratings.rating_router import router as rating_router
from syllabus_hub.resources.resource_router import router as resource_router
from syllabus_hub.roadmaps.roadmap_router import router as roadmap_router
from syllabus_hub.search.search_router import router as search_router
from syllabus_hub.system.health_router import router as health_router
from syllabus_hub.users.user_router import router as user_router

API_PREFIX = "/api/v1"

setup_logging(level=config.LOG_LEVEL, production=config.LOG_JSON)
logger = get_logger("http")


def _error_body(request: Request, detail, **extra) -> dict:
    return {"detail": detail, "request_id": getattr(request.state, "request_id", None), **extra}

# ==================== EXCEPTION HANDLERS ====================

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.detail),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=_error_body(request, "Validation failed", errors=errors))


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    return JSONResponse(status_code=409, content=_error_body(request, "Resource already exists"))


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content=_error_body(request, f"Too many requests: {exc.detail}")
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = "Internal server error" if config.is_production() else str(exc)
    return JSONResponse(status_code=500, content=_error_body(request, detail))

# ==================== APP FACTORY ====================

def create_app() -> FastAPI:
    app = FastAPI(title="Campus Syllabus Hub API", version="0.1.0")

    app.state.limiter = limiter

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Innermost middleware: 500s built here still pass through CORS
    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await unhandled_exception_handler(request, exc)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"]
    )

    @app.on_event("startup")
    async def startup_event():
        config.validate_settings()
        await create_indexes(await get_db())
        logger.info("Campus Syllabus Hub API started (%s)", config.ENVIRONMENT)

    @app.on_event("shutdown")
    async def shutdown_event():
        close_client()

    # ==================== ROUTER REGISTRATION ====================
    app.include_router(health_router)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
    app.include_router(subject_router, prefix=API_PREFIX)
    app.include_router(resource_router, prefix=API_PREFIX)
    app.include_router(rating_router, prefix=API_PREFIX)
    app.include_router(roadmap_router, prefix=API_PREFIX)
    app.include_router(search_router, prefix=API_PREFIX)
    app.include_router(user_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("syllabus_hub.main:app", host="0.0.0.0", port=config.PORT)
