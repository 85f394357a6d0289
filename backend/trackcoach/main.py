# backend/trackcoach/main.py

import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trackcoach.config import settings
from trackcoach.logging_config import setup_logging

setup_logging()

# Import database
from trackcoach.db import Base, check_db_connection, engine  # noqa: E402
from trackcoach.exceptions import APIException  # noqa: E402

# Import routers
from trackcoach import auth as auth_router  # noqa: E402
from trackcoach.routers import (  # noqa: E402
    attendance,
    dashboard,
    events,
    parent_invites,
    performances,
    students,
)

logger = logging.getLogger(__name__)

# ---------------------------
# Create database tables
# ---------------------------
# This will create all tables from models.py if they don't exist
Base.metadata.create_all(bind=engine)

# ---------------------------
# FastAPI app initialization
# ---------------------------
app = FastAPI(
    title="Track Coach",
    description="Backend API for athletics coaches: roster, attendance, events, results and parent access.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ---------------------------
# CORS setup
# ---------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


# ---------------------------
# Error handlers
# ---------------------------
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
            }
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ---------------------------
# Include routers
# ---------------------------
routers = [
    auth_router.router,
    parent_invites.registration_router,
    dashboard.router,
    students.router,
    events.router,
    attendance.router,
    performances.router,
    parent_invites.router,
]

for r in routers:
    app.include_router(r)


# ---------------------------
# Root endpoints
# ---------------------------
@app.get("/", tags=["Root"])
def root():
    return {"message": "Welcome to Track Coach API"}


@app.get("/health", tags=["Root"])
def health():
    database_ok = check_db_connection()
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "healthy" if database_ok else "unhealthy", "database": database_ok},
    )


def run():
    uvicorn.run("trackcoach.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
