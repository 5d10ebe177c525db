# backend/modules/realtime/websocket/connection_manager.py

from typing import Any, Dict, Optional
import logging

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from core.mixins import utcnow
from ..events import RealtimeEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Single broadcast channel shared by every dashboard.

    There is no per-room partitioning: kitchen, delivery and admin views all
    receive every event and filter on their side. Delivery is best effort
    while connected; a client that reconnects is expected to re-fetch.
    """

    def __init__(self):
        self.connection_metadata: Dict[WebSocket, Dict[str, Any]] = {}

    @property
    def connection_count(self) -> int:
        return len(self.connection_metadata)

    async def connect(self, websocket: WebSocket, role: Optional[str] = None):
        """Accept new connection"""
        await websocket.accept()
        self.connection_metadata[websocket] = {
            "role": role,
            "connected_at": utcnow(),
        }
        logger.info(f"Dashboard connected ({self.connection_count} active)")

    def disconnect(self, websocket: WebSocket):
        """Remove connection"""
        if self.connection_metadata.pop(websocket, None) is not None:
            logger.info(f"Dashboard disconnected ({self.connection_count} active)")

    @staticmethod
    def build_message(event: RealtimeEvent, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "event": event.value,
            "data": jsonable_encoder(payload),
            "timestamp": utcnow().isoformat(),
        }

    async def publish(self, event: RealtimeEvent, payload: Dict[str, Any]) -> None:
        """Broadcast an event to all connected clients"""
        if not self.connection_metadata:
            logger.debug(f"No dashboards connected, {event.value} not delivered")
            return

        message = self.build_message(event, payload)
        disconnected = set()

        for websocket in list(self.connection_metadata):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.error(f"Error broadcasting {event.value} to websocket: {e}")
                disconnected.add(websocket)

        # Clean up disconnected websockets
        for websocket in disconnected:
            self.disconnect(websocket)

    async def handle_client_message(self, websocket: WebSocket, message: Dict[str, Any]):
        """Handle incoming message from client"""
        metadata = self.connection_metadata.get(websocket)
        if metadata is None:
            return

        message_type = message.get("type")

        if message_type == "join-kitchen":
            metadata["role"] = "kitchen"
            await websocket.send_json(
                {
                    "event": "joined",
                    "data": {"room": "kitchen"},
                    "timestamp": utcnow().isoformat(),
                }
            )

        elif message_type == "ping":
            await websocket.send_json(
                {"event": "pong", "timestamp": utcnow().isoformat()}
            )

        else:
            await websocket.send_json(
                {
                    "event": "error",
                    "data": {"message": f"Unknown message type: {message_type}"},
                    "timestamp": utcnow().isoformat(),
                }
            )


# Global connection manager instance
connection_manager = ConnectionManager()


def get_event_publisher() -> ConnectionManager:
    """FastAPI dependency returning the process-wide publisher"""
    return connection_manager
