import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

JOIN_ROOM = "joinRoom"
MAKE_CHOICE = "makeChoice"
RESET_GAME = "resetGame"
DISCONNECT = "disconnect"


class JoinRoomMessage(BaseModel):
    type: Literal["joinRoom"]
    # left untyped so bad keys and choices get an error reply instead of being dropped
    roomKey: Any = None


class MakeChoiceMessage(BaseModel):
    type: Literal["makeChoice"]
    choice: Any = None


class ResetGameMessage(BaseModel):
    type: Literal["resetGame"]


class DisconnectMessage(BaseModel):
    type: Literal["disconnect"]


class UnknownMessage(BaseModel):
    """Any well-formed object whose type the server does not handle."""
    type: Optional[str] = None


InboundMessage = Annotated[
    Union[JoinRoomMessage, MakeChoiceMessage, ResetGameMessage, DisconnectMessage],
    Field(discriminator="type"),
]

inbound_message_adapter = TypeAdapter(InboundMessage)

KNOWN_TYPES = {JOIN_ROOM, MAKE_CHOICE, RESET_GAME, DISCONNECT}


class MalformedMessageError(ValueError):
    pass


def parse_message(raw: Union[str, bytes]):
    """Decode one WebSocket frame into a message model.

    Raises MalformedMessageError if the frame is not a JSON object or a known
    message type carries fields of the wrong type.
    """
    try:
        payload = json.loads(raw)
    except ValueError as e:
        # covers JSONDecodeError and UnicodeDecodeError from bytes frames
        raise MalformedMessageError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedMessageError(f"Expected a JSON object, got {type(payload).__name__}")

    message_type = payload.get("type")
    if not isinstance(message_type, str) or message_type not in KNOWN_TYPES:
        return UnknownMessage(type=message_type if isinstance(message_type, str) else None)

    try:
        return inbound_message_adapter.validate_python(payload)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid {message_type} message: {e.errors()}") from e
