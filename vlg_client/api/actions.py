from __future__ import annotations

from typing import Any, Literal

from vlg_client.api.models import (
    CreateRoomRequest,
    JoinRoomRequest,
    PostEventRequest,
    SeatRequest,
    SetLoadoutRequest,
    SetReadyRequest,
    _WireModel,
)
from vlg_client.core.cancellation import CancelToken
from vlg_client.core.errors import ErrorKind, VlgClientError
from vlg_client.core.executor import RequestExecutor
from vlg_client.core.models import Failure, RequestDescriptor

ActionName = Literal[
    "listRooms",
    "listGallery",
    "createRoom",
    "joinRoom",
    "leaveRoom",
    "setLoadout",
    "startGame",
    "setReady",
    "postEvent",
    "disbandRoom",
]

API_ENDPOINT = "api.php"

_JSON_HEADERS = {"Content-Type": "application/json"}


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class ApiError(VlgClientError):
    """A lobby/gameplay action failed; carries the classified failure."""

    def __init__(self, kind: ErrorKind, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    @classmethod
    def from_failure(cls, failure: Failure) -> "ApiError":
        return cls(failure.kind, failure.message, failure.status)


def _normalize_character(character: object) -> str | None:
    if not isinstance(character, str):
        return None
    trimmed = character.strip()
    # "-" is the UI placeholder for "no pick".
    if not trimmed or trimmed == "-":
        return None
    return trimmed


class GameApi:
    """Named lobby and gameplay actions.

    Each call builds one descriptor for `api.php?action=<name>` and hands it to the
    executor. Successful calls return the decoded JSON; failures raise `ApiError`.
    Every call accepts an optional `cancel` token.
    """

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    async def _call(self, action: ActionName, payload: _WireModel | None = None, *, cancel: CancelToken | None) -> Any:
        path = f"{API_ENDPOINT}?action={action}"
        if payload is None:
            descriptor = RequestDescriptor(path=path, cancel=cancel)
        else:
            descriptor = RequestDescriptor(
                path=path,
                method="POST",
                headers=_JSON_HEADERS,
                body=payload.to_json(),
                cancel=cancel,
            )

        outcome = await self._executor.execute(descriptor)
        if isinstance(outcome, Failure):
            raise ApiError.from_failure(outcome)
        return outcome.value

    async def list_rooms(self, *, cancel: CancelToken | None = None) -> Any:
        return await self._call("listRooms", cancel=cancel)

    async def list_gallery(self, *, cancel: CancelToken | None = None) -> Any:
        return await self._call("listGallery", cancel=cancel)

    async def create_room(
        self, player_name: str, password_protected: bool, *, cancel: CancelToken | None = None
    ) -> Any:
        payload = CreateRoomRequest(player_name=player_name, password_protected=password_protected)
        return await self._call("createRoom", payload, cancel=cancel)

    async def join_room(
        self,
        room_id: str,
        player_name: str,
        password: str | None = None,
        player_id: str | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> Any:
        fields: dict[str, Any] = {"room_id": room_id, "player_name": player_name}
        if password is not None:
            fields["password"] = password
        if player_id:
            fields["player_id"] = player_id
        return await self._call("joinRoom", JoinRoomRequest(**fields), cancel=cancel)

    async def leave_room(
        self, room_id: str, player_id: str, auth_token: str, *, cancel: CancelToken | None = None
    ) -> Any:
        payload = SeatRequest(room_id=room_id, player_id=player_id, auth_token=auth_token)
        return await self._call("leaveRoom", payload, cancel=cancel)

    async def set_loadout(
        self,
        room_id: str,
        player_id: str,
        auth_token: str,
        character: Any = UNSET,
        stage: Any = UNSET,
        difficulty: Any = UNSET,
        *,
        ignition_mode: Any = UNSET,
        cancel: CancelToken | None = None,
    ) -> Any:
        """Change any subset of the loadout; arguments left as UNSET are not sent."""

        fields: dict[str, Any] = {"room_id": room_id, "player_id": player_id, "auth_token": auth_token}
        if character is not UNSET:
            fields["character"] = _normalize_character(character)
        if stage is not UNSET:
            fields["stage"] = stage
        if difficulty is not UNSET:
            fields["difficulty"] = difficulty
        if ignition_mode is not UNSET:
            fields["ignition_mode"] = bool(ignition_mode)
        return await self._call("setLoadout", SetLoadoutRequest(**fields), cancel=cancel)

    async def start_game(
        self, room_id: str, player_id: str, auth_token: str, *, cancel: CancelToken | None = None
    ) -> Any:
        payload = SeatRequest(room_id=room_id, player_id=player_id, auth_token=auth_token)
        return await self._call("startGame", payload, cancel=cancel)

    async def set_ready(
        self, room_id: str, player_id: str, auth_token: str, ready: bool, *, cancel: CancelToken | None = None
    ) -> Any:
        payload = SetReadyRequest(room_id=room_id, player_id=player_id, auth_token=auth_token, ready=ready)
        return await self._call("setReady", payload, cancel=cancel)

    async def post_event(
        self,
        room_id: str,
        player_id: str,
        auth_token: str,
        event: dict[str, Any],
        *,
        cancel: CancelToken | None = None,
    ) -> Any:
        payload = PostEventRequest(room_id=room_id, player_id=player_id, auth_token=auth_token, event=event)
        return await self._call("postEvent", payload, cancel=cancel)

    async def return_to_room(
        self, room_id: str, player_id: str, auth_token: str, *, cancel: CancelToken | None = None
    ) -> Any:
        return await self.post_event(room_id, player_id, auth_token, {"type": "backToRoom"}, cancel=cancel)

    async def disband_room(
        self, room_id: str, player_id: str, auth_token: str, *, cancel: CancelToken | None = None
    ) -> Any:
        payload = SeatRequest(room_id=room_id, player_id=player_id, auth_token=auth_token)
        return await self._call("disbandRoom", payload, cancel=cancel)
