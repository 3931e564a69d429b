from __future__ import annotations
import asyncio, logging
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

log = logging.getLogger("presence")


class Presence:
    """Live viewer count, pushed to every open WebSocket on each join/leave."""

    def __init__(self):
        self._connections: dict[int, WebSocket] = {}
        self._active = 0
        # a count change and its broadcast run as one step, so pushes arrive in order
        self._lock = asyncio.Lock()

    @property
    def active(self) -> int:
        return self._active

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        async with self._lock:
            self._connections[id(websocket)] = websocket
            self._active += 1
            log.info("New user connected. Active: %s", self._active)
            await self._broadcast()

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            if self._connections.pop(id(websocket), None) is None:
                return
            self._active = max(0, self._active - 1)
            log.info("User disconnected. Active: %s", self._active)
            await self._broadcast()

    async def broadcast(self):
        async with self._lock:
            await self._broadcast()

    async def _broadcast(self):
        payload = {"type": "userCount", "count": self._active}
        for ws in list(self._connections.values()):
            if ws.client_state != WebSocketState.CONNECTED or ws.application_state != WebSocketState.CONNECTED:
                continue
            try:
                await ws.send_json(payload)
            except (WebSocketDisconnect, RuntimeError) as e:
                # closed between the state check and the send; its own disconnect will follow
                log.debug("Skipping user count push to closed socket: %s", e)
