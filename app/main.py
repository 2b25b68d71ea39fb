# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Campus Market API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import asyncio
import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.websocket import websocket_manager, WEBSOCKET_CHANNEL
from app.exceptions import (
    CampusMarketException,
    campus_market_exception_handler,
    validation_exception_handler,
)
from app.routers import health, tasks, profiles, assistant, research
from app.auth import routes as auth_routes
from app.websocket import routes as websocket_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Background Redis listener state
_redis_listener_task = None
_shutdown_event = None


async def redis_pubsub_listener():
    """
    Background task that forwards Redis pub/sub events to WebSockets.

    Every API process runs one listener, so a bid placed through one process
    reaches watchers connected to any other.
    """
    import redis.asyncio as aioredis

    logger.info("Starting Redis pub/sub listener for WebSocket broadcasts")

    redis_client = None
    pubsub = None
    try:
        redis_client = aioredis.from_url(settings.REDIS_URL)
        pubsub = redis_client.pubsub()
        await pubsub.subscribe(WEBSOCKET_CHANNEL)

        async for message in pubsub.listen():
            if _shutdown_event and _shutdown_event.is_set():
                break

            if message["type"] == "message":
                try:
                    data = json.loads(message["data"])
                    task_id = data.get("task_id")

                    if task_id:
                        await websocket_manager.broadcast(task_id, data)
                        logger.debug(f"Broadcast {data.get('type')} to task {task_id}")

                except json.JSONDecodeError as e:
                    logger.warning(f"Invalid JSON in Redis message: {e}")

    except asyncio.CancelledError:
        logger.info("Redis pub/sub listener cancelled")
    except Exception as e:
        logger.error(f"Redis pub/sub listener error: {e}")
    finally:
        if pubsub is not None:
            try:
                await pubsub.unsubscribe(WEBSOCKET_CHANNEL)
                await redis_client.aclose()
            except Exception as e:
                logger.debug(f"Error closing Redis listener: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log config, start the Redis listener
    - Shutdown: stop the listener
    """
    global _redis_listener_task, _shutdown_event

    # Startup
    logger.info(f"Starting Campus Market API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    _shutdown_event = asyncio.Event()
    _redis_listener_task = asyncio.create_task(redis_pubsub_listener())

    yield

    # Shutdown
    logger.info("Shutting down Campus Market API")

    if _shutdown_event:
        _shutdown_event.set()
    if _redis_listener_task:
        _redis_listener_task.cancel()
        try:
            await _redis_listener_task
        except asyncio.CancelledError:
            pass


# Create FastAPI application
app = FastAPI(
    title="Campus Market API",
    description="""
## Student Task Marketplace API

Students post paid tasks, other students bid on them, and the task owner
accepts exactly one bid.

### How It Works

1. **Post a Task** - Title, description, budget and deadline; the task opens for bids
2. **Bid** - Any other member offers an amount and a proposal (one bid per task)
3. **Accept** - The owner accepts one bid; the task moves to in progress and
   every other bid is rejected
4. **Follow Along** - Connect to `/ws/tasks/{id}` for live bid updates

### Quick Start

```bash
# 1. Post a task
curl -X POST http://localhost:8000/api/v1/tasks \\
  -H "Authorization: Bearer $TOKEN" -H "Content-Type: application/json" \\
  -d '{"title": "Essay", "description": "1500 words", "budget": "2000", "deadline": "2026-12-01T17:00:00Z"}'

# 2. Bid on it (as another user)
curl -X POST http://localhost:8000/api/v1/tasks/{id}/bids \\
  -H "Authorization: Bearer $OTHER_TOKEN" -H "Content-Type: application/json" \\
  -d '{"amount": "1800", "proposal": "I can do this by Friday"}'

# 3. Accept the bid (as the owner)
curl -X POST http://localhost:8000/api/v1/tasks/{id}/bids/{bid_id}/accept \\
  -H "Authorization: Bearer $TOKEN"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Authentication endpoints for verifying JWT tokens",
        },
        {
            "name": "Tasks",
            "description": "Post tasks, bid on them and accept bids",
        },
        {
            "name": "Profiles",
            "description": "Read and edit member profiles",
        },
        {
            "name": "Assistant",
            "description": "AI writing and matching helper",
        },
        {
            "name": "WebSocket",
            "description": "Real-time task updates",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(CampusMarketException)
async def handle_campus_market_exception(request: Request, exc: CampusMarketException):
    """Handle workflow and domain exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return await campus_market_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and parameters."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Task board, bidding and bid acceptance
app.include_router(
    tasks.router,
    prefix="/api/v1/tasks",
    tags=["Tasks"]
)

# Profile endpoints
app.include_router(
    profiles.router,
    prefix="/api/v1/profiles",
    tags=["Profiles"]
)

# AI assistant
app.include_router(
    assistant.router,
    prefix="/api/v1/assistant",
    tags=["Assistant"]
)

# Research sharing
app.include_router(
    research.router,
    prefix="/api/v1/research",
    tags=["Research"]
)

# WebSocket endpoints (Real-time updates)
app.include_router(
    websocket_routes.router,
    tags=["WebSocket"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Campus Market API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
