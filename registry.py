from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from game import resolve
from logging_config import get_logger

logger = get_logger(__name__)

SEAT_NUMBERS = (1, 2)

# (connection_id, message) pairs; the session router does the actual sending
Delivery = Tuple[str, dict]


class RoomError(Exception):
    """A join was refused; the message is shown to the client as-is."""


class MissingRoomKeyError(RoomError):
    def __init__(self):
        super().__init__("请输入房间密钥")


class RoomFullError(RoomError):
    def __init__(self, room_key: str):
        self.room_key = room_key
        super().__init__("房间已满")


@dataclass
class Seat:
    connection_id: Optional[str] = None
    choice: Optional[str] = None
    ready: bool = False

    @property
    def occupied(self) -> bool:
        return self.connection_id is not None


@dataclass
class Room:
    key: str
    seats: Dict[int, Seat] = field(default_factory=lambda: {number: Seat() for number in SEAT_NUMBERS})
    created_at: datetime = field(default_factory=datetime.now)
    last_activity_at: datetime = field(default_factory=datetime.now)
    # set once a result is broadcast, cleared when both players have reset
    resolved: bool = False

    @property
    def player_count(self) -> int:
        return sum(1 for seat in self.seats.values() if seat.occupied)

    @property
    def is_full(self) -> bool:
        return self.player_count == len(SEAT_NUMBERS)

    def seat_of(self, connection_id: str) -> Optional[int]:
        for number, seat in self.seats.items():
            if seat.connection_id == connection_id:
                return number
        return None

    def opponent_of(self, seat_number: int) -> Seat:
        return self.seats[2 if seat_number == 1 else 1]

    def touch(self):
        self.last_activity_at = datetime.now()

    def broadcast(self, message: dict) -> List[Delivery]:
        return [(seat.connection_id, message) for seat in self.seats.values() if seat.occupied]


class RoomRegistry:
    """In-memory room table.

    Methods never await, so under a single event loop each call is atomic with
    respect to every other room mutation. Running several workers against one
    registry would need a per-key lock around each method.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_key) -> bool:
        return room_key in self._rooms

    def get_room(self, room_key: str) -> Optional[Room]:
        return self._rooms.get(room_key)

    def list_rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def seat_of(self, room_key: Optional[str], connection_id: str) -> Optional[int]:
        room = self._rooms.get(room_key) if room_key else None
        if room is None:
            return None
        return room.seat_of(connection_id)

    def _seated(self, room_key: Optional[str], connection_id: str, action: str):
        room = self._rooms.get(room_key) if room_key else None
        if room is None:
            logger.debug(f"Ignoring {action} from {connection_id}: room {room_key} does not exist")
            return None, None
        seat_number = room.seat_of(connection_id)
        if seat_number is None:
            logger.debug(f"Ignoring {action} from {connection_id}: not seated in room {room_key}")
            return None, None
        return room, seat_number

    def join(self, room_key, connection_id: str) -> Tuple[int, List[Delivery]]:
        """Seat a connection in the room called room_key, creating the room if needed.

        Returns the seat number and the messages to deliver. Raises
        MissingRoomKeyError for an empty or non-string key and RoomFullError
        when both seats are taken.
        """
        if not isinstance(room_key, str) or not room_key:
            raise MissingRoomKeyError()

        room = self._rooms.get(room_key)
        if room is None:
            room = Room(key=room_key)
            room.seats[1].connection_id = connection_id
            self._rooms[room_key] = room
            logger.info(f"Room {room_key} created by {connection_id}, waiting for player 2")
            return 1, [(connection_id, {
                "type": "roomJoined",
                "roomKey": room_key,
                "playerNumber": 1,
                "message": "已创建房间，等待对手加入...",
            })]

        if room.seats[2].occupied:
            logger.info(f"Join rejected for {connection_id}: room {room_key} is full")
            raise RoomFullError(room_key)

        room.seats[2].connection_id = connection_id
        room.touch()
        logger.info(f"Player 2 ({connection_id}) joined room {room_key}")
        return 2, [
            (room.seats[1].connection_id, {
                "type": "opponentJoined",
                "playerNumber": 2,
                "message": "对手已加入，游戏开始！",
            }),
            (connection_id, {
                "type": "roomJoined",
                "roomKey": room_key,
                "playerNumber": 2,
                "message": "已加入房间，游戏开始！",
            }),
        ]

    def make_choice(self, room_key: Optional[str], connection_id: str, choice: str) -> List[Delivery]:
        room, seat_number = self._seated(room_key, connection_id, "makeChoice")
        if room is None:
            return []
        if room.resolved:
            logger.debug(f"Ignoring makeChoice from player {seat_number} in room {room_key}: round already resolved")
            return []

        seat = room.seats[seat_number]
        seat.choice = choice
        seat.ready = True
        room.touch()

        player1, player2 = room.seats[1], room.seats[2]
        if not (player1.ready and player2.ready):
            opponent = room.opponent_of(seat_number)
            logger.debug(f"Player {seat_number} is ready in room {room_key}")
            if not opponent.occupied:
                return []
            # the choice itself stays private until both players commit
            return [(opponent.connection_id, {"type": "opponentReady"})]

        result = resolve(player1.choice, player2.choice)
        room.resolved = True
        logger.info(f"Room {room_key} round finished: {player1.choice} vs {player2.choice} -> {result}")
        return room.broadcast({
            "type": "gameResult",
            "player1Choice": player1.choice,
            "player2Choice": player2.choice,
            "result": result,
        })

    def reset(self, room_key: Optional[str], connection_id: str) -> List[Delivery]:
        """Withdraw the caller's ready flag; the round resets once both have done so."""
        room, seat_number = self._seated(room_key, connection_id, "resetGame")
        if room is None:
            return []

        room.seats[seat_number].ready = False
        room.touch()

        if any(seat.ready for seat in room.seats.values()):
            logger.debug(f"Player {seat_number} requested reset in room {room_key}, waiting for opponent")
            return []

        for seat in room.seats.values():
            seat.choice = None
        room.resolved = False
        logger.info(f"Room {room_key} reset")
        return room.broadcast({"type": "gameReset"})

    def leave(self, room_key: Optional[str], connection_id: str) -> List[Delivery]:
        """Remove the room the connection sits in and tell the opponent, if any."""
        room, seat_number = self._seated(room_key, connection_id, "disconnect")
        if room is None:
            return []

        del self._rooms[room.key]
        logger.info(f"Player {seat_number} left room {room.key}, room removed")

        opponent = room.opponent_of(seat_number)
        if not opponent.occupied:
            return []
        return [(opponent.connection_id, {"type": "opponentDisconnected"})]

    def evict_idle(self, max_idle_seconds: int, now: Optional[datetime] = None) -> List[Delivery]:
        """Drop rooms still waiting for player 2 that have been idle longer than max_idle_seconds."""
        now = now or datetime.now()
        cutoff = now - timedelta(seconds=max_idle_seconds)
        deliveries = []
        for room in list(self._rooms.values()):
            if room.seats[2].occupied or room.last_activity_at > cutoff:
                continue
            del self._rooms[room.key]
            logger.info(f"Room {room.key} evicted after waiting more than {max_idle_seconds}s for player 2")
            deliveries.extend(room.broadcast({
                "type": "roomExpired",
                "roomKey": room.key,
                "message": "等待对手超时，房间已关闭",
            }))
        return deliveries
