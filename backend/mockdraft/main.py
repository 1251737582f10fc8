"""FastAPI entry point for the NFL mock draft engine."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import boards, candidates, drafts, export

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from .services.candidate_catalog import load_persisted_candidates
    from .services.draft_session import load_persisted_drafts
    loaded = load_persisted_candidates()
    if loaded:
        logger.info(f"Auto-loaded {loaded} prospects from saved files")
    drafts = load_persisted_drafts()
    if drafts:
        logger.info(f"Restored {drafts} saved drafts")
    yield


app = FastAPI(
    title="NFL Mock Draft Engine",
    description="Mock drafts with CPU teams, pick trades and draft grades",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(candidates.router, prefix="/api/candidates", tags=["candidates"])
app.include_router(drafts.router, prefix="/api/drafts", tags=["drafts"])
app.include_router(boards.router, prefix="/api/boards", tags=["boards"])
app.include_router(export.router, prefix="/api/export", tags=["export"])

# WebSocket route for real-time draft updates
from .routers.drafts import websocket_endpoint
app.add_api_websocket_route("/ws/drafts", websocket_endpoint)


@app.get("/api/health")
def health():
    return {"status": "ok"}
