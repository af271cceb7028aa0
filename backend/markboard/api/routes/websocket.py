"""WebSocket endpoint for the live-update channel."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from markboard.services.websocket_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_marks(websocket: WebSocket):
    """
    WebSocket endpoint for real-time mark updates.

    Messages format:
    {"type": "mark.created", "data": {"id": "...", "lat": 50.45, ...}}
    {"type": "mark.expired", "data": {"id": "..."}}

    Clients should reload GET /api/marks after (re)connecting; missed
    events are not replayed.
    """
    manager: ConnectionManager = websocket.app.state.broadcaster
    await manager.connect(websocket)

    try:
        # Send connection confirmation
        await websocket.send_json({"type": "connected"})

        # Keep connection alive and handle incoming messages
        while True:
            data = await websocket.receive_text()

            # Handle ping/pong for keepalive
            if data == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected gracefully")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)

    finally:
        await manager.disconnect(websocket)
