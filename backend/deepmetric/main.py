"""
Application entry point for the Deepmetric backend.

Run with:
    uvicorn deepmetric.main:app --reload
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm.exc import StaleDataError
import logging

from deepmetric.core.config import settings
from deepmetric.core.database import DatabaseManager, SessionLocal, check_database_connection, init_db
from deepmetric.routers import api_router
from deepmetric.services.directory import SessionRequired


logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    DatabaseManager.create_all_tables()
    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info(f"{settings.PROJECT_NAME} v{settings.VERSION} started")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SessionRequired)
async def session_required_handler(request: Request, exc: SessionRequired) -> RedirectResponse:
    """Send callers without a session to the sign-in entry point."""
    logger.debug(f"No active session for {request.url.path}, redirecting to sign-in")
    return RedirectResponse(
        url=f"{settings.API_V1_STR}/auth/login",
        status_code=status.HTTP_303_SEE_OTHER
    )


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    logger.warning(f"Concurrent write rejected on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "The record was changed by another request, please retry"}
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root() -> dict:
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check() -> dict:
    database_ok = check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": database_ok
    }
