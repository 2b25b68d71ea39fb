# =============================================================================
# app/websocket/broadcast.py - Cross-Process Broadcasting
# =============================================================================
# Publishes committed workflow changes so every API process can forward them
# to its websocket clients.
#
# Uses Redis pub/sub for cross-process communication:
# - Route handlers call publish_event() after a change has committed
# - Each FastAPI process subscribes and broadcasts to its WebSocket clients
#
# Events:
#   - task_created: A new task was posted
#   - bid_submitted: A bid was placed on a task
#   - bid_accepted: The client accepted a bid; task is now in progress
#   - task_assigned: The task is in progress but bid updates did not finish
# =============================================================================

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Redis channel for WebSocket events
WEBSOCKET_CHANNEL = "campusmarket:websocket:events"


def get_redis_client():
    """Get a Redis client for pub/sub operations."""
    import redis
    from app.config import settings
    return redis.from_url(settings.REDIS_URL)


def publish_event(task_id: str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Publish an event that will be broadcast to WebSocket clients.

    Failing to publish never undoes the change that triggered it; the
    error is logged and False is returned.

    Args:
        task_id: The task whose watchers should receive the event
        event_type: Event type (task_created, bid_submitted, bid_accepted)
        data: Event data to include

    Returns:
        bool: True if published successfully
    """
    try:
        client = get_redis_client()

        message = json.dumps({
            "task_id": str(task_id),
            "type": event_type,
            **data
        }, default=str)

        client.publish(WEBSOCKET_CHANNEL, message)

        logger.debug(f"Published {event_type} event for task {task_id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish event: {e}")
        return False


def publish_task_created(task_id: str, title: str, budget: Any) -> bool:
    """Publish a task_created event."""
    return publish_event(
        task_id=task_id,
        event_type="task_created",
        data={"title": title, "budget": budget},
    )


def publish_bid_submitted(task_id: str, bid_id: str, amount: Any) -> bool:
    """Publish a bid_submitted event."""
    return publish_event(
        task_id=task_id,
        event_type="bid_submitted",
        data={"bid_id": bid_id, "amount": amount},
    )


def publish_bid_accepted(
    task_id: str,
    bid_id: str,
    freelancer_id: str,
    rejected_bid_ids: list[str],
) -> bool:
    """Publish a bid_accepted event."""
    return publish_event(
        task_id=task_id,
        event_type="bid_accepted",
        data={
            "bid_id": bid_id,
            "freelancer_id": freelancer_id,
            "status": "in_progress",
            "rejected_bid_ids": rejected_bid_ids,
        },
    )


def publish_task_assigned(task_id: str, freelancer_id: str | None) -> bool:
    """
    Publish a task_assigned event.

    Sent when accepting a bid assigned the task but the bid updates stopped
    part way, so watchers stop treating the task as open.
    """
    return publish_event(
        task_id=task_id,
        event_type="task_assigned",
        data={"freelancer_id": freelancer_id, "status": "in_progress"},
    )
