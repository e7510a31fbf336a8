import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from padel_manager.config import configure_logging
from padel_manager.database import engine, init_db
from padel_manager.db_schema_patch import ensure_version_columns
from padel_manager.routes import (
    categories,
    clubs,
    matches,
    players,
    pools,
    scores,
    teams,
    tournaments,
)

configure_logging()
logger = logging.getLogger(__name__)

APP_NAME = "Padel Tournament Manager API"

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
app.include_router(clubs.router, prefix="/api", tags=["clubs"])
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(categories.router, prefix="/api", tags=["categories"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
app.include_router(pools.router, prefix="/api", tags=["pools"])
app.include_router(matches.router, prefix="/api", tags=["matches"])

# Score entry (winner derivation + standings)
app.include_router(scores.router, prefix="/api", tags=["scores"])


@app.on_event("startup")
def on_startup():
    init_db()
    ensure_version_columns(engine)
    logger.info("%s started with %d routes", APP_NAME, len(app.routes))


@app.get("/api/health")
def health_check():
    """Health check for load balancers and uptime monitors"""
    return {"app_name": APP_NAME, "status": "healthy"}
