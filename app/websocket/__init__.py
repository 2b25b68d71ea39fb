# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Provides real-time updates for task events.
#
# Usage:
#   # Broadcast an event to all connections watching a task (from FastAPI)
#   from app.websocket import websocket_manager
#
#   await websocket_manager.broadcast(task_id, {
#       "type": "bid_submitted",
#       "bid_id": "..."
#   })
#
#   # Publish from any process after a change has committed
#   from app.websocket.broadcast import publish_bid_accepted
#
#   publish_bid_accepted(task_id, bid_id, freelancer_id, rejected_bid_ids)
# =============================================================================

from app.websocket.manager import websocket_manager
from app.websocket.broadcast import (
    publish_event,
    publish_task_created,
    publish_bid_submitted,
    publish_bid_accepted,
    publish_task_assigned,
    WEBSOCKET_CHANNEL,
)

__all__ = [
    "websocket_manager",
    "publish_event",
    "publish_task_created",
    "publish_bid_submitted",
    "publish_bid_accepted",
    "publish_task_assigned",
    "WEBSOCKET_CHANNEL",
]
