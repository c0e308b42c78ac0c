"""
Gateway WebSocket endpoint.

Lifecycle of one socket:
1. Accept, then authenticate the token (no token = guest). Failure closes
   with 4001 before any room operation.
2. Register a Connection whose outbox wakes this endpoint's writer.
3. Run a reader task (client frames) and a writer task (outbox -> socket)
   until either ends.
4. Leave every room and unregister.

The writer is the only task that sends on the socket; acks, errors and
pongs are enqueued on the outbox like broadcasts.

Client frames:
    {"event": "join_room", "data": "<tenantId>"}
    {"event": "join_guest_room", "data": "<tenantId>"}
    ping
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from shared.config.constants import ClientEvent, EventType
from shared.config.logging import audit_ws_connection, connection_id_var, get_logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    AppException,
    AuthError,
    CapacityError,
    InternalError,
    ValidationError,
)

from ws_gateway.components.connection.connection import Connection, Identity
from ws_gateway.components.core.constants import MSG_PING_PLAIN, WSCloseCode, WSConstants

if TYPE_CHECKING:
    from ws_gateway.connection_manager import ConnectionManager

logger = get_logger(__name__)


class GatewayEndpoint:
    """
    Handles one WebSocket from accept to close.

    Usage:
        endpoint = GatewayEndpoint(websocket, manager, token)
        await endpoint.run()
    """

    def __init__(
        self,
        websocket: WebSocket,
        manager: "ConnectionManager",
        token: str | None = None,
        max_message_size: int | None = None,
        lookup_timeout: float = WSConstants.DB_LOOKUP_TIMEOUT,
        send_timeout: float = WSConstants.WS_SEND_TIMEOUT,
    ):
        self.websocket = websocket
        self.manager = manager
        self.token = token
        self.max_message_size = (
            max_message_size if max_message_size is not None else settings.ws_max_message_size
        )
        self.lookup_timeout = lookup_timeout
        self.send_timeout = send_timeout

        self.connection: Connection | None = None
        self._wakeup = asyncio.Event()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def run(self) -> None:
        await self.websocket.accept()

        identity = await self._authenticate()
        if identity is None:
            return

        loop = asyncio.get_running_loop()

        def notify() -> None:
            loop.call_soon_threadsafe(self._wakeup.set)

        try:
            self.connection = self.manager.connect(identity, notify=notify)
        except CapacityError:
            await self._close_socket(WSCloseCode.SERVER_OVERLOADED, "Server at capacity")
            return

        context_token = connection_id_var.set(self.connection.id)
        tasks = (
            asyncio.create_task(self._read_loop(), name=f"ws-reader-{self.connection.id}"),
            asyncio.create_task(self._write_loop(), name=f"ws-writer-{self.connection.id}"),
        )
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # Also reached when run() itself is cancelled mid-wait
            for task in tasks:
                task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, Exception):
                    logger.warning(
                        "Connection task failed",
                        task=task.get_name(),
                        error=str(result),
                    )

            self.manager.leave(self.connection)
            await self._close_socket(self.connection.close_code or WSCloseCode.NORMAL)
            connection_id_var.reset(context_token)

    async def _authenticate(self) -> Identity | None:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.manager.authenticate, self.token),
                timeout=self.lookup_timeout,
            )
        except AuthError as e:
            await self._close_socket(WSCloseCode.AUTH_FAILED, str(e.detail))
        except asyncio.TimeoutError:
            audit_ws_connection("AUTH_FAILED", reason="lookup_timeout")
            await self._close_socket(WSCloseCode.SERVER_ERROR, "Authentication unavailable")
        except Exception as e:
            logger.error("Authentication error", error=str(e), exc_info=True)
            await self._close_socket(WSCloseCode.SERVER_ERROR, "Authentication unavailable")
        return None

    async def _close_socket(self, code: int, reason: str = "") -> None:
        if (
            self.websocket.application_state != WebSocketState.CONNECTED
            or self.websocket.client_state != WebSocketState.CONNECTED
        ):
            return
        try:
            await self.websocket.close(code=int(code), reason=reason)
        except RuntimeError as e:
            # Peer went away between the state check and the close frame
            logger.debug("Close after disconnect", error=str(e))

    # =========================================================================
    # Reader
    # =========================================================================

    async def _read_loop(self) -> None:
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

            text = message.get("text")
            if text is None:
                self._send_error(ValidationError("Binary frames are not supported"))
                continue

            await self.handle_message(text)

    async def handle_message(self, raw: str) -> None:
        """Dispatch one text frame from the client."""
        connection = self.connection
        assert connection is not None

        if len(raw.encode("utf-8")) > self.max_message_size:
            self._send_error(
                ValidationError(
                    f"Message too large (max {self.max_message_size} bytes)",
                    size=len(raw),
                )
            )
            return

        if raw.strip() == MSG_PING_PLAIN:
            connection.send_event(EventType.PONG)
            return

        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            self._send_error(ValidationError("Malformed message"))
            return

        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            self._send_error(ValidationError("Malformed message"))
            return

        event = frame["event"]
        if event == ClientEvent.PING:
            connection.send_event(EventType.PONG)
            return

        if event not in ClientEvent.ALL:
            self._send_error(ValidationError(f"Unknown event '{event[:50]}'"))
            return

        await self._join(event, frame.get("data"))

    async def _join(self, event: str, tenant_id: Any) -> None:
        connection = self.connection
        assert connection is not None

        try:
            if event == ClientEvent.JOIN_ROOM:
                self.manager.join_tenant_room(connection, tenant_id)
            else:
                # Only the lookup runs off-loop; an abandoned lookup joins nothing
                await asyncio.wait_for(
                    asyncio.to_thread(self.manager.check_guest_room, tenant_id),
                    timeout=self.lookup_timeout,
                )
                self.manager.join_guest_room(connection, tenant_id, tenant_checked=True)
        except AppException as e:
            self._send_error(e)
        except asyncio.TimeoutError:
            self._send_error(InternalError("Room join timed out", tenant_id=str(tenant_id)))

    def _send_error(self, error: AppException) -> None:
        if self.connection is not None:
            self.connection.send_event(EventType.ERROR, error.to_payload())

    # =========================================================================
    # Writer
    # =========================================================================

    async def _write_loop(self) -> None:
        connection = self.connection
        assert connection is not None

        while True:
            await self._wakeup.wait()
            self._wakeup.clear()

            if connection.is_closed:
                return

            for message in connection.drain():
                await asyncio.wait_for(
                    self.websocket.send_json(message),
                    timeout=self.send_timeout,
                )
