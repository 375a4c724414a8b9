"""Socket.IO server and inbound event handlers.

Frontend convention:
- Socket.IO path: ``/ws/socket.io`` (``SOCKETIO_PATH``)
- Auth: ``auth.token`` on the handshake, or ``query.token`` as fallback
- Inbound events: ``join-ticket``, ``leave-ticket``, ``send-message``,
  ``update-ticket-status``
- Outbound payload keys are camelCase; inbound accepts ``ticketId`` and
  ``ticket_id``.

Handlers never let an exception escape: domain errors are reported back to
the originating connection as an ``error`` event and the connection stays
usable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from urllib.parse import parse_qs

import socketio
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import APIException

from helpdesk.realtime.events.tickets import ERROR
from helpdesk.realtime.events.tickets import build_error_payload
from helpdesk.tickets.exceptions import InvalidPayload
from helpdesk.users.identity import AuthError
from helpdesk.users.identity import verify

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Awaitable

    from helpdesk.realtime.broadcaster import EventBroadcaster
    from helpdesk.realtime.rooms import RoomRouter

logger = logging.getLogger(__name__)


def create_server() -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.SOCKETIO_CORS_ALLOWED_ORIGINS,
        logger=False,
        engineio_logger=False,
    )


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract the access token from the handshake.

    ``auth.token`` wins; the ``token`` query parameter is the fallback for
    clients that cannot send an auth payload.
    """

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


def _ticket_id_from(data: Any) -> int:
    """Accept a bare id or an object carrying ``ticket_id`` / ``ticketId``."""

    value = data
    if isinstance(data, dict):
        value = data.get("ticket_id", data.get("ticketId"))
    if isinstance(value, bool):
        value = None
    try:
        ticket_id = int(value)
    except (TypeError, ValueError) as exc:
        msg = "A valid ticket id is required"
        raise InvalidPayload(msg) from exc
    if ticket_id < 1:
        msg = "A valid ticket id is required"
        raise InvalidPayload(msg)
    return ticket_id


def register_handlers(
    server: Any,
    router: RoomRouter,
    broadcaster: EventBroadcaster,
) -> None:
    """Bind the inbound events of ``server`` to the router and broadcaster."""

    async def report(sid: str, message: Any) -> None:
        await server.emit(ERROR, build_error_payload(message), to=sid)

    async def guarded(sid: str, failure: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except APIException as exc:
            await report(sid, exc.detail)
        except Exception:
            logger.exception("Socket.IO handler failed for %s", sid)
            await report(sid, failure)
        return None

    @server.on("connect")
    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
        token = _extract_token(environ, auth)
        try:
            identity = await database_sync_to_async(verify)(token)
        except AuthError as exc:
            logger.info("Socket.IO connection refused: %s", exc)
            raise ConnectionRefusedError(exc.reason) from exc
        except Exception as exc:
            logger.exception("Socket.IO connect error")
            msg = "server_error"
            raise ConnectionRefusedError(msg) from exc

        await router.connect(sid, identity)
        logger.info("User %s connected", identity.email)

    @server.on("disconnect")
    async def disconnect(sid: str, reason: Any = None):
        await router.disconnect(sid)

    @server.on("join-ticket")
    async def join_ticket(sid: str, data: Any):
        try:
            ticket_id = _ticket_id_from(data)
        except InvalidPayload:
            logger.warning("Ignoring join-ticket with bad payload: %r", data)
            return
        await guarded(sid, "Failed to join ticket", router.join_ticket(sid, ticket_id))

    @server.on("leave-ticket")
    async def leave_ticket(sid: str, data: Any):
        try:
            ticket_id = _ticket_id_from(data)
        except InvalidPayload:
            logger.warning("Ignoring leave-ticket with bad payload: %r", data)
            return
        await router.leave_ticket(sid, ticket_id)

    @server.on("send-message")
    async def send_message(sid: str, data: Any):
        identity = router.identity_for(sid)
        if identity is None:
            await report(sid, "unauthorized")
            return
        content = data.get("content") if isinstance(data, dict) else None
        try:
            ticket_id = _ticket_id_from(data)
        except InvalidPayload:
            await report(sid, "Content and ticketId are required")
            return
        await guarded(
            sid,
            "Failed to send message",
            broadcaster.send_message(identity, ticket_id, content),
        )

    @server.on("update-ticket-status")
    async def update_ticket_status(sid: str, data: Any):
        identity = router.identity_for(sid)
        if identity is None:
            await report(sid, "unauthorized")
            return
        new_status = data.get("status") if isinstance(data, dict) else None
        try:
            ticket_id = _ticket_id_from(data)
        except InvalidPayload:
            await report(sid, "Ticket ID and status are required")
            return
        await guarded(
            sid,
            "Failed to update ticket status",
            broadcaster.update_ticket_status(identity, ticket_id, new_status),
        )
