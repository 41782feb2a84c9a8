"""FastAPI application entry point"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager

from bookgen.config import settings as config_settings
from bookgen.database import init_db, close_db, _session_stats
from bookgen.exceptions import BookGenError
from bookgen.logger import setup_logging, get_logger
from bookgen.middleware import RequestIDMiddleware
from bookgen.middleware.auth_middleware import AuthMiddleware

setup_logging(
    level=config_settings.log_level,
    log_to_file=config_settings.log_to_file,
    log_file_path=config_settings.log_file_path,
    max_bytes=config_settings.log_max_bytes,
    backup_count=config_settings.log_backup_count
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan"""
    await init_db()
    logger.info(f"🚀 {config_settings.app_name} {config_settings.app_version} started")

    yield

    await close_db()
    logger.info("Application shut down")


app = FastAPI(
    title=config_settings.app_name,
    version=config_settings.app_version,
    description="AI nonfiction book generator - from idea to publication-ready manuscript",
    lifespan=lifespan
)


@app.exception_handler(BookGenError)
async def bookgen_exception_handler(request: Request, exc: BookGenError):
    """Map domain errors to their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc}")
    else:
        logger.warning(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error": exc.error_code,
            "details": exc.details,
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request validation errors"""
    logger.error(f"Request validation failed: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_errors(exc)
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that are not JSON serializable
    return [
        {key: (str(value) if key == "ctx" else value) for key, value in error.items()}
        for error in exc.errors()
    ]


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything not handled elsewhere"""
    logger.error(f"Unhandled exception: {type(exc).__name__}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "message": str(exc) if config_settings.debug else "Please try again later"
        }
    )

app.add_middleware(AuthMiddleware)
app.add_middleware(RequestIDMiddleware)

if config_settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/health")
async def health_check():
    """Health check"""
    return {"status": "ok"}


@app.get("/health/db-sessions")
async def db_session_stats():
    """
    Database session statistics (connection leak monitoring)

    - created: sessions opened in total
    - closed: sessions closed in total
    - active: sessions currently open (should stay near 0)
    - errors: sessions that ended with an error
    - last_check: time of the last close
    """
    return {
        "status": "ok",
        "session_stats": _session_stats,
        "warning": "Too many active sessions" if _session_stats["active"] > 10 else None
    }


from bookgen.api import (
    users, settings, books, outlines, chapters, ideas, generation
)

app.include_router(users.router, prefix="/api")
app.include_router(settings.router, prefix="/api")
app.include_router(books.router, prefix="/api")
app.include_router(outlines.router, prefix="/api")
app.include_router(chapters.router, prefix="/api")
app.include_router(ideas.router, prefix="/api")
app.include_router(generation.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {config_settings.app_name}",
        "version": config_settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "bookgen.main:app",
        host=config_settings.app_host,
        port=config_settings.app_port,
        reload=config_settings.debug
    )
