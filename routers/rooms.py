from fastapi import APIRouter, HTTPException, Request

from logging_config import get_logger
from registry import Room
from schemas.rooms import RoomDetailsResponse, SeatStatus

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


def room_details(room: Room) -> RoomDetailsResponse:
    # choices stay server-side; only occupancy and ready flags are exposed
    return RoomDetailsResponse(
        room_key=room.key,
        player_count=room.player_count,
        is_full=room.is_full,
        players=[
            SeatStatus(player_number=number, occupied=seat.occupied, ready=seat.ready)
            for number, seat in sorted(room.seats.items())
        ],
        created_at=room.created_at.isoformat(),
        last_activity_at=room.last_activity_at.isoformat(),
    )


@rooms_router.get("", response_model=list[RoomDetailsResponse])
async def list_rooms(request: Request):
    rooms = request.app.state.registry.list_rooms()
    logger.debug(f"Listing {len(rooms)} rooms")
    return [room_details(room) for room in rooms]


@rooms_router.get("/{room_key}", response_model=RoomDetailsResponse)
async def get_room_details(room_key: str, request: Request):
    """
    Get a room's occupancy.

    Returns:
    - room_key: the key both players joined with
    - player_count: seated players (0-2)
    - is_full: whether a third join would be rejected
    - players: per-seat occupancy and ready flag
    - created_at / last_activity_at: ISO timestamps
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_key} from {client_host}")

    room = request.app.state.registry.get_room(room_key)
    if not room:
        logger.warning(f"Room details failed: Room {room_key} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return room_details(room)
