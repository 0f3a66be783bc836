"""
HoopCoach Backend API

FastAPI application for basketball dribbling and shooting form analysis.
Pose detection runs in the browser; this service turns landmark streams
into dribble cycles, biomechanical features and template scores.

Run with:
    uvicorn main:app --reload --host 0.0.0.0 --port 8000

API docs available at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as api_router
from api.websocket import websocket_endpoint
from core.config import settings

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Loads templates before the app starts accepting requests so that a
    malformed template fails startup instead of the first request.
    """
    # Startup
    logger.info(f"{settings.APP_NAME} starting up...")
    logger.info("API docs: http://localhost:8000/docs")
    logger.info("WebSocket: ws://localhost:8000/ws/session")

    from core.services import get_registry
    registry = get_registry()
    logger.info(f"{len(registry)} templates available")

    yield  # App runs here

    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down...")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    **Basketball Form Analyzer**

    Template-driven scoring of dribbling and shooting form from 2D pose landmarks.

    ## Features

    - **Dribble cycle segmentation** from wrist height rhythm
    - **Posture, execution and consistency** features per session
    - **Template scoring** with age-adjusted tolerances and coaching findings
    - **Live sessions** via WebSocket

    ## Endpoints

    - `GET /api/health` - Health check
    - `GET /api/templates` - List templates
    - `GET /api/templates/{template_id}` - Template details
    - `POST /api/analysis/frames` - Analyze recorded frames
    - `POST /api/analysis/score` - Score precomputed features
    - `WS /ws/session` - Live session stream

    ## WebSocket Protocol

    Connect to `/ws/session`, send `start_session`, then frames as JSON:
```json
    {
        "type": "frame",
        "data": {"landmarks": [...], "timestamp": 1.533, "frame_number": 46}
    }
```
    and finish with `end_session`.
    """,
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Routes
# =============================================================================

# Include REST API routes
app.include_router(api_router, prefix="/api")

# WebSocket endpoint
app.websocket("/ws/session")(websocket_endpoint)


# =============================================================================
# Root endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "description": "Basketball dribbling and shooting form analyzer",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "/ws/session"
    }


# =============================================================================
# Run directly (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
