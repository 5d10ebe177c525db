"""
WebSocket route for the shared dashboard channel.

Clients connect to ``/ws`` and receive every server event as
``{"event": ..., "data": ..., "timestamp": ...}``. Clients may send:
- ``{"type": "join-kitchen"}``: acknowledged with a ``joined`` event
- ``{"type": "ping"}``: answered with ``pong``
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ..websocket.connection_manager import connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def dashboard_websocket(
    websocket: WebSocket,
    role: Optional[str] = Query(None),
):
    await connection_manager.connect(websocket, role=role)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json(
                    {"event": "error", "data": {"message": "Invalid JSON format"}}
                )
                continue

            if not isinstance(message, dict):
                await websocket.send_json(
                    {"event": "error", "data": {"message": "Expected a JSON object"}}
                )
                continue

            await connection_manager.handle_client_message(websocket, message)

    except WebSocketDisconnect:
        logger.info("Dashboard WebSocket disconnected")
    finally:
        connection_manager.disconnect(websocket)
