from pydantic import BaseModel


class SeatStatus(BaseModel):
    player_number: int
    occupied: bool
    ready: bool


class RoomDetailsResponse(BaseModel):
    room_key: str
    player_count: int
    is_full: bool
    players: list[SeatStatus]
    created_at: str
    last_activity_at: str
