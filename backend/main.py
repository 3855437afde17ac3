"""
FastAPI main application entry point.

Architecture:
  Browser → Google OAuth (drive.file scope) → access token
  Browser → http://localhost:8000/api/...  with  Authorization: Bearer <token>
  Backend → Google Drive (notes as folders) and Gemini (summaries)

The backend keeps no state between requests: no database, no cache, no
sessions. Everything lives in the user's Drive.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from errors import (
    AdapterError,
    AuthError,
    MalformedDataError,
    NotebookError,
    NotFoundError,
    RemoteOperationError,
)

# Import routers
from routers import notes, files, uploads, summarize

# ============================================================
# Logging Configuration
# ============================================================
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# httpx logs every request line at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)


# ============================================================
# Application Lifespan (startup/shutdown)
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info("Starting up notebook service...")

    _settings = get_settings()
    if not _settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; summarization requests will fail")
    logger.info(f"Notes are stored under Drive folder {_settings.root_folder_name!r}")
    logger.info(f"CORS origins: {_settings.cors_origins_list}")

    yield  # Application runs here

    logger.info("Shutting down notebook service...")


# ============================================================
# Create FastAPI Application
# ============================================================
app = FastAPI(
    title="Drive Notebook API",
    description="Notes stored in Google Drive, summarized with Gemini",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

settings = get_settings()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# Error Handling
# ============================================================
# Users only ever see two messages: sign in again, or try again.
_STATUS_BY_ERROR = {
    NotFoundError: 404,
    MalformedDataError: 422,
    RemoteOperationError: 502,
    AdapterError: 502,
}


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": "Authentication required"})


@app.exception_handler(NotebookError)
async def notebook_error_handler(request: Request, exc: NotebookError) -> JSONResponse:
    status = _STATUS_BY_ERROR.get(type(exc), 500)
    logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=status, content={"detail": "Operation failed"})


# ============================================================
# API Routes, all mounted under /api
# ============================================================
app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])
app.include_router(files.router, prefix="/api/files", tags=["Files"])
app.include_router(uploads.router, prefix="/api/uploads", tags=["Uploads"])
app.include_router(summarize.router, prefix="/api/summarize", tags=["Summarize"])


# ============================================================
# Health Check Endpoints (under /api for consistency)
# ============================================================
@app.get("/api/health")
async def health_check() -> dict:
    """Liveness probe: confirms the process is running."""
    return {"status": "healthy", "version": "1.0.0"}


# ============================================================
# Run with Uvicorn (for development)
# ============================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
