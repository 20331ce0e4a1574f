from typing import Iterable, Union

from connections import Connection, ConnectionManager
from game import is_valid_choice
from logging_config import get_logger
from registry import Delivery, RoomError, RoomRegistry
from schemas.messages import (
    DisconnectMessage,
    JoinRoomMessage,
    MakeChoiceMessage,
    MalformedMessageError,
    ResetGameMessage,
    UnknownMessage,
    parse_message,
)

logger = get_logger(__name__)


class SessionRouter:
    """Turns inbound frames into registry calls and sends what the registry returns."""

    def __init__(self, registry: RoomRegistry, connections: ConnectionManager):
        self.registry = registry
        self.connections = connections
        self._handlers = {
            JoinRoomMessage: self._join_room,
            MakeChoiceMessage: self._make_choice,
            ResetGameMessage: self._reset_game,
            DisconnectMessage: self._disconnect,
            UnknownMessage: self._ignore,
        }

    async def handle_message(self, connection: Connection, raw: Union[str, bytes]):
        try:
            message = parse_message(raw)
        except MalformedMessageError as e:
            logger.warning(f"Dropping malformed message from connection {connection.connection_id}: {e}")
            return

        logger.debug(f"Received {message.type} from connection {connection.connection_id}")
        await self._handlers[type(message)](connection, message)

    async def handle_disconnect(self, connection: Connection):
        """Shared by the disconnect message and the socket closing; safe to call twice."""
        deliveries = self.registry.leave(connection.room_key, connection.connection_id)
        await self.deliver(deliveries)

    async def deliver(self, deliveries: Iterable[Delivery]):
        for connection_id, message in deliveries:
            connection = self.connections.get(connection_id)
            if connection is None:
                logger.debug(f"Skipping {message['type']} for unknown connection {connection_id}")
                continue
            await connection.send(message)

    async def _join_room(self, connection: Connection, message: JoinRoomMessage):
        if self.registry.seat_of(connection.room_key, connection.connection_id) is not None:
            await connection.send({"type": "error", "message": "已在房间中"})
            return

        try:
            seat_number, deliveries = self.registry.join(message.roomKey, connection.connection_id)
        except RoomError as e:
            await connection.send({"type": "error", "message": str(e)})
            return

        connection.bind(message.roomKey, seat_number)
        await self.deliver(deliveries)

    async def _make_choice(self, connection: Connection, message: MakeChoiceMessage):
        if self.registry.seat_of(connection.room_key, connection.connection_id) is None:
            logger.debug(f"Ignoring makeChoice from unbound connection {connection.connection_id}")
            return
        if not is_valid_choice(message.choice):
            logger.info(f"Rejected choice {message.choice!r} from connection {connection.connection_id}")
            await connection.send({"type": "error", "message": "无效的选择"})
            return
        if self.registry.get_room(connection.room_key).resolved:
            logger.debug(f"Rejected makeChoice from connection {connection.connection_id}: round not reset yet")
            await connection.send({"type": "error", "message": "请先重置"})
            return

        await self.deliver(self.registry.make_choice(connection.room_key, connection.connection_id, message.choice))

    async def _reset_game(self, connection: Connection, message: ResetGameMessage):
        await self.deliver(self.registry.reset(connection.room_key, connection.connection_id))

    async def _disconnect(self, connection: Connection, message: DisconnectMessage):
        await self.handle_disconnect(connection)

    async def _ignore(self, connection: Connection, message: UnknownMessage):
        logger.debug(f"Ignoring unknown message type {message.type!r} from connection {connection.connection_id}")
