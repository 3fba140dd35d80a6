import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ttleague.database import init_db
from ttleague.routes import (
    bracket,
    export,
    matches,
    players,
    recommendations,
    settings,
    standings,
)

logger = logging.getLogger(__name__)

APP_NAME = "Table Tennis League API"

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(players.router, prefix="/api", tags=["players"])
app.include_router(matches.router, prefix="/api", tags=["matches"])
app.include_router(standings.router, prefix="/api", tags=["standings"])
app.include_router(bracket.router, prefix="/api", tags=["bracket"])
app.include_router(recommendations.router, prefix="/api", tags=["recommendations"])
app.include_router(settings.router, prefix="/api", tags=["settings"])
app.include_router(export.router, prefix="/api", tags=["export"])


@app.on_event("startup")
def on_startup():
    init_db()
    route_count = sum(1 for r in app.routes if getattr(r, "path", None))
    logger.info(f"{APP_NAME} started with {route_count} routes")


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify the API is up"""
    return {"app_name": APP_NAME, "status": "healthy"}
