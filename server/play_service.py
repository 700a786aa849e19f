"""Real-time service to play Bisca in rooms over WebSockets."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from bisca.rules_schema import RoomConfig, RuleSet, ServerSettings
from bisca.state import MAX_PLAYERS, MIN_PLAYERS

from .rooms import STATE, Outbound, Room, RoomRegistry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class CreateRoomRequest(BaseModel):
    capacity: int = Field(MAX_PLAYERS, ge=MIN_PLAYERS, le=MAX_PLAYERS)
    total_hands: Optional[int] = Field(None, ge=1)


class ConnectionManager:
    """Track the open sockets of every room."""

    def __init__(self) -> None:
        self.connections: Dict[str, Dict[str, WebSocket]] = {}

    def register(self, room_id: str, player_id: str, websocket: WebSocket) -> None:
        self.connections.setdefault(room_id, {})[player_id] = websocket

    def unregister(self, room_id: str, player_id: str) -> None:
        sockets = self.connections.get(room_id, {})
        sockets.pop(player_id, None)
        if not sockets:
            self.connections.pop(room_id, None)

    def count(self, room_id: str) -> int:
        return len(self.connections.get(room_id, {}))

    async def dispatch(self, room: Room, events: Iterable[Outbound]) -> None:
        sockets = dict(self.connections.get(room.id, {}))
        for event in events:
            if event.target is None:
                recipients = list(sockets.items())
            elif event.target in sockets:
                recipients = [(event.target, sockets[event.target])]
            else:
                recipients = []
            for player_id, websocket in recipients:
                if event.kind == STATE:
                    message = {"type": STATE, "state": room.view_for(player_id), "room": room.meta()}
                else:
                    message = event.message()
                try:
                    await websocket.send_json(message)
                except (RuntimeError, WebSocketDisconnect) as exc:
                    logger.debug("Dropping message to %s in room %s: %s", player_id, room.id, exc)


def create_app(settings: Optional[ServerSettings] = None, registry: Optional[RoomRegistry] = None) -> FastAPI:
    settings = settings or ServerSettings()
    if registry is None:
        rules = RuleSet(room=RoomConfig(trick_pause_seconds=settings.trick_pause_seconds))
        registry = RoomRegistry(rules)
    connections = ConnectionManager()

    app = FastAPI(title="Bisca Play Service")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.registry = registry
    app.state.connections = connections

    def ensure_room(room_id: str) -> Room:
        room = registry.get(room_id)
        if room is None:
            raise HTTPException(status_code=404, detail="Room not found")
        return room

    async def resolve_later(room: Room, generation: int) -> None:
        await asyncio.sleep(room.config.trick_pause_seconds)
        async with room.lock:
            events = room.resolve_pending(generation)
            await connections.dispatch(room, events)

    def schedule_resolution(room: Room) -> None:
        task = asyncio.create_task(resolve_later(room, room.generation))
        room.pending_tasks.add(task)
        task.add_done_callback(room.pending_tasks.discard)

    async def handle_message(room: Room, player_id: str, message: dict) -> None:
        kind = message.get("type")
        async with room.lock:
            if kind == "join":
                nickname = message.get("nickname")
                if not isinstance(nickname, str):
                    events = [Outbound("error", {"message": "Invalid nickname"}, target=player_id)]
                else:
                    events = room.join(player_id, nickname)
            elif kind == "start":
                events = room.start(player_id)
            elif kind == "play":
                card = message.get("card")
                if not isinstance(card, str):
                    events = [Outbound("error", {"message": "Invalid card"}, target=player_id)]
                else:
                    events, trick_full = room.play(player_id, card)
                    if trick_full:
                        schedule_resolution(room)
            elif kind == "leave":
                events = room.leave(player_id)
            else:
                events = [Outbound("error", {"message": f"Unknown message type: {kind!r}"}, target=player_id)]
            await connections.dispatch(room, events)

    @app.get("/")
    def index() -> Dict[str, str]:
        return {"status": "ok", "message": "Bisca backend is running"}

    @app.get("/health")
    def health() -> Dict[str, object]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "rooms": len(registry.rooms),
        }

    @app.post("/rooms")
    def create_room(request: CreateRoomRequest) -> Dict[str, object]:
        try:
            room = registry.create(capacity=request.capacity, total_hands=request.total_hands)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"room": room.meta()}

    @app.get("/rooms")
    def list_rooms() -> Dict[str, object]:
        return {"rooms": [room.meta() for room in registry.list()]}

    @app.get("/rooms/{room_id}")
    def get_room(room_id: str) -> Dict[str, object]:
        return {"room": ensure_room(room_id).meta()}

    @app.websocket("/rooms/{room_id}/ws")
    async def room_socket(websocket: WebSocket, room_id: str) -> None:
        await websocket.accept()
        room = registry.get(room_id)
        if room is None:
            await websocket.send_json({"type": "error", "message": "Room not found"})
            await websocket.close(code=4404)
            return

        player_id = uuid.uuid4().hex
        connections.register(room_id, player_id, websocket)
        logger.info("Connection %s opened on room %s", player_id, room_id)
        await websocket.send_json({"type": "connected", "playerId": player_id, "room": room.meta()})
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_json({"type": "error", "message": "Malformed message"})
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json({"type": "error", "message": "Malformed message"})
                    continue
                await handle_message(room, player_id, message)
        except WebSocketDisconnect as exc:
            logger.info("Connection %s closed on room %s (code %s)", player_id, room_id, exc.code)
        finally:
            connections.unregister(room_id, player_id)
            async with room.lock:
                events = room.leave(player_id)
                await connections.dispatch(room, events)
                registry.discard_if_empty(room_id, connected=connections.count(room_id))

    return app


app = create_app(ServerSettings.from_env())


def main() -> None:
    import uvicorn

    settings = ServerSettings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logger.info("Allowed origins: %s", settings.allowed_origins)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
