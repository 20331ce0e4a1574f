import json
import uuid
from datetime import datetime
from typing import Dict, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from logging_config import get_logger

logger = get_logger(__name__)


class Connection:
    """One client's WebSocket plus the room it joined, if any."""

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = connection_id or uuid.uuid4().hex
        self.connected_at = datetime.now()
        self.room_key: Optional[str] = None
        self.seat_number: Optional[int] = None

    def bind(self, room_key: str, seat_number: int):
        self.room_key = room_key
        self.seat_number = seat_number

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, message: dict) -> bool:
        """Best-effort send. Closed sockets are skipped and failures are only logged."""
        if not self.is_open:
            logger.debug(f"Skipping {message.get('type')} for closed connection {self.connection_id}")
            return False
        try:
            await self.websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Error sending {message.get('type')} to connection {self.connection_id}: {e}")
            return False
        return True


class ConnectionManager:
    """Live connections by id. Rooms hold ids, never the sockets themselves."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def register(self, websocket: WebSocket) -> Connection:
        connection = Connection(websocket)
        self._connections[connection.connection_id] = connection
        logger.debug(f"Registered connection {connection.connection_id} ({len(self._connections)} open)")
        return connection

    def unregister(self, connection_id: str):
        if self._connections.pop(connection_id, None) is not None:
            logger.debug(f"Unregistered connection {connection_id} ({len(self._connections)} open)")

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)
