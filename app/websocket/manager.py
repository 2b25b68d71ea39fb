# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Manages WebSocket connections per task and handles broadcasting.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   await websocket_manager.connect(task_id, websocket)
#   await websocket_manager.broadcast(task_id, {"type": "bid_submitted", ...})
#   websocket_manager.disconnect(task_id, websocket)
# =============================================================================

import logging
from typing import Dict, Set
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages WebSocket connections organized by task ID.

    Several clients can watch one task (the client and every bidder, each
    possibly with multiple tabs).
    """

    def __init__(self):
        # task_id -> set of WebSocket connections
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._total_connections = 0

    async def connect(self, task_id: str, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection and track it."""
        await websocket.accept()

        if task_id not in self.connections:
            self.connections[task_id] = set()

        self.connections[task_id].add(websocket)
        self._total_connections += 1

        logger.info(
            f"WebSocket connected to task {task_id}. "
            f"Total connections: {self._total_connections}"
        )

    def disconnect(self, task_id: str, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from tracking."""
        watchers = self.connections.get(task_id)
        if watchers is not None and websocket in watchers:
            watchers.discard(websocket)
            self._total_connections -= 1

            if not watchers:
                del self.connections[task_id]

        logger.info(
            f"WebSocket disconnected from task {task_id}. "
            f"Total connections: {self._total_connections}"
        )

    async def broadcast(self, task_id: str, message: dict) -> int:
        """
        Broadcast a message to all connections watching a task.

        Returns:
            int: Number of clients the message was sent to
        """
        if task_id not in self.connections:
            logger.debug(f"No connections for task {task_id}, skipping broadcast")
            return 0

        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in list(self.connections[task_id]):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        for ws in dead_connections:
            self.connections[task_id].discard(ws)
            self._total_connections -= 1

        if dead_connections:
            logger.info(f"Cleaned up {len(dead_connections)} dead connections")

        if task_id in self.connections and not self.connections[task_id]:
            del self.connections[task_id]

        logger.debug(
            f"Broadcast to task {task_id}: "
            f"type={message.get('type')}, sent to {sent_count} clients"
        )

        return sent_count

    def get_connection_count(self, task_id: str = None) -> int:
        """Number of connections for one task, or in total."""
        if task_id:
            return len(self.connections.get(task_id, set()))
        return self._total_connections

    def get_active_tasks(self) -> list[str]:
        """Task IDs with at least one connection."""
        return list(self.connections.keys())


# Global singleton instance
websocket_manager = ConnectionManager()
