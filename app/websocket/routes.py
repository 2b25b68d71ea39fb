# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# WebSocket endpoint for real-time task updates.
#
# Connect: ws://host/ws/tasks/{task_id}?token={jwt}
#
# Events:
#   - {"type": "bid_submitted", "task_id": "...", "bid_id": "...", "amount": "..."}
#   - {"type": "bid_accepted", "task_id": "...", "bid_id": "...", "freelancer_id": "..."}
# =============================================================================

import logging
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from jose import JWTError

from app.auth.dependencies import decode_token
from app.websocket.manager import websocket_manager
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/tasks/{task_id}")
async def task_websocket(
    websocket: WebSocket,
    task_id: str,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    WebSocket endpoint for real-time task updates.

    Any signed-in user may watch a task; the board is public to members.

    Connection URL:
        ws://localhost:8000/ws/tasks/{task_id}?token={jwt}
    """
    # 1. Verify JWT token
    try:
        user_id = decode_token(token).id
    except JWTError as e:
        logger.warning(f"WebSocket auth failed: {e}")
        await websocket.close(code=4001, reason="Invalid token")
        return

    # 2. Verify the task exists
    try:
        task_id = str(UUID(task_id))
    except ValueError:
        logger.warning(f"WebSocket: malformed task id {task_id!r}")
        await websocket.close(code=4004, reason="Task not found")
        return

    try:
        task = SupabaseClient.fetch_task(task_id)

        if not task:
            logger.warning(f"WebSocket: task {task_id} not found")
            await websocket.close(code=4004, reason="Task not found")
            return

    except SupabaseClientError as e:
        logger.error(f"WebSocket: error fetching task: {e}")
        await websocket.close(code=4000, reason="Server error")
        return

    # 3. Accept connection and add to manager
    await websocket_manager.connect(task_id, websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "task_id": task_id,
            "status": task.get("status"),
            "message": "Connected to task updates"
        })

        while True:
            try:
                data = await websocket.receive_text()

                # Handle ping/pong for keepalive
                if data == "ping":
                    await websocket.send_text("pong")
                else:
                    logger.debug(f"WebSocket received: {data[:100]}")

            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.warning(f"WebSocket receive error: {e}")
                break

    except WebSocketDisconnect:
        logger.info(f"WebSocket client {user_id} disconnected from task {task_id}")
    finally:
        websocket_manager.disconnect(task_id, websocket)


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection statistics.
    """
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "active_tasks": websocket_manager.get_active_tasks(),
        "task_count": len(websocket_manager.get_active_tasks())
    }
