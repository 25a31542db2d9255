"""
Main FastAPI application for the Wildcard fantasy league.

The API is a thin layer over the service modules:
- /api/lineup: lineup views, slot assignment, lock status
- /api/scores: standings, live scores, recompute
- /api/admin: rule sets, league settings, manual ingest

Service functions raise WildcardError subclasses; the handler below turns
them into JSON error responses with the matching status code. Precondition
failures (412) also carry the list of missing prerequisites in `details`.

Run with:
    uvicorn wildcard.api.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wildcard import __version__
from wildcard.api.routers import admin, lineup, scores
from wildcard.config import settings
from wildcard.exceptions import PreconditionFailedError, WildcardError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Wildcard League API",
    description="Lineups, lineup locks and milestone scoring for a Wildcard fantasy football league",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WildcardError)
async def wildcard_error_handler(request: Request, exc: WildcardError) -> JSONResponse:
    """Map service-layer errors to HTTP responses."""
    content = {"detail": str(exc)}
    if isinstance(exc, PreconditionFailedError):
        content["details"] = exc.details
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/")
async def root():
    return {
        "message": "Wildcard League API",
        "version": __version__,
        "docs": f"http://{settings.api_host}:{settings.api_port}/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "Wildcard League", "version": __version__}


app.include_router(lineup.router, prefix="/api")
app.include_router(scores.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
