from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    # Python names in code, camelCase names on the wire.
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_unset=True)


class CreateRoomRequest(_WireModel):
    player_name: str = Field(..., alias="playerName")
    password_protected: bool = Field(False, alias="passwordProtected")


class JoinRoomRequest(_WireModel):
    room_id: str = Field(..., alias="roomId")
    player_name: str = Field(..., alias="playerName")
    password: str | None = None
    # Rejoining with a known id keeps the seat.
    player_id: str | None = Field(None, alias="playerId")


class SeatRequest(_WireModel):
    """Identifies an authenticated seat in a room."""

    room_id: str = Field(..., alias="roomId")
    player_id: str = Field(..., alias="playerId")
    auth_token: str = Field(..., alias="authToken")


class SetLoadoutRequest(SeatRequest):
    # Only fields that were explicitly set are sent; `character=None` clears the pick.
    character: str | None = None
    stage: str | None = None
    difficulty: str | None = None
    ignition_mode: bool | None = Field(None, alias="ignitionMode")


class SetReadyRequest(SeatRequest):
    ready: bool


class PostEventRequest(SeatRequest):
    event: dict[str, Any]
