"""Room membership for live Socket.IO connections.

Rooms:
- ``user:<id>``: personal notifications, joined on connect.
- ``role:ADMIN``: every admin connection, joined on connect.
- ``ticket:<id>``: per-ticket conversation, joined when a ticket view opens.

The router is the only writer of membership. It keeps its own table (which
connection holds which rooms) and mirrors every change into the Socket.IO
server so emits to a room reach exactly the current members. All mutation
happens on the event loop thread, so no locking is needed; the only await
inside ``join_ticket`` is the store lookup, after which the connection is
re-checked because it may have closed in the meantime.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any

from django.db import DatabaseError

from helpdesk.tickets.exceptions import AccessDenied
from helpdesk.tickets.exceptions import StoreFailure
from helpdesk.tickets.policy import can_view_ticket

if TYPE_CHECKING:  # import for type checking only
    from helpdesk.tickets.store import TicketStore
    from helpdesk.users.identity import IdentityClaim

logger = logging.getLogger(__name__)

ROOM_ADMINS = "role:ADMIN"


def room_for_user(user_id: int) -> str:
    return f"user:{int(user_id)}"


def room_for_ticket(ticket_id: int) -> str:
    return f"ticket:{int(ticket_id)}"


@dataclass
class Connection:
    sid: str
    identity: IdentityClaim
    rooms: set[str] = field(default_factory=set)


class RoomRouter:
    def __init__(self, server: Any, store: TicketStore) -> None:
        self._server = server
        self._store = store
        self._connections: dict[str, Connection] = {}
        self._members: dict[str, set[str]] = defaultdict(set)

    # Introspection ---------------------------------------------------------
    def identity_for(self, sid: str) -> IdentityClaim | None:
        conn = self._connections.get(sid)
        return conn.identity if conn else None

    def rooms_for(self, sid: str) -> frozenset[str]:
        conn = self._connections.get(sid)
        return frozenset(conn.rooms) if conn else frozenset()

    def members(self, room: str) -> frozenset[str]:
        return frozenset(self._members.get(room, ()))

    def is_connected(self, sid: str) -> bool:
        return sid in self._connections

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # Lifecycle -------------------------------------------------------------
    async def connect(self, sid: str, identity: IdentityClaim) -> None:
        self._connections[sid] = Connection(sid=sid, identity=identity)
        # A user always owns their personal room; no check needed.
        await self._enter(sid, room_for_user(identity.user_id))
        if identity.is_admin:
            await self._enter(sid, ROOM_ADMINS)

    async def join_ticket(self, sid: str, ticket_id: int) -> bool:
        """Subscribe ``sid`` to a ticket room.

        Returns ``False`` when the ticket does not exist or the connection is
        gone; raises ``AccessDenied`` when the identity may not view it.
        Joining a room already held is a no-op.
        """

        conn = self._connections.get(sid)
        if conn is None:
            return False
        try:
            ticket = await self._store.get_ticket(ticket_id)
        except DatabaseError as exc:
            logger.exception("Ticket lookup failed for join-ticket %s", ticket_id)
            raise StoreFailure from exc
        if sid not in self._connections:
            return False
        if ticket is None:
            logger.warning(
                "User %s tried to join missing ticket %s",
                conn.identity.email,
                ticket_id,
            )
            return False
        if not can_view_ticket(conn.identity, ticket):
            logger.warning(
                "User %s denied access to ticket %s",
                conn.identity.email,
                ticket_id,
            )
            raise AccessDenied
        await self._enter(sid, room_for_ticket(ticket_id))
        logger.info("User %s joined ticket %s", conn.identity.email, ticket_id)
        return True

    async def leave_ticket(self, sid: str, ticket_id: int) -> None:
        await self._leave(sid, room_for_ticket(ticket_id))
        conn = self._connections.get(sid)
        if conn is not None:
            logger.info("User %s left ticket %s", conn.identity.email, ticket_id)

    async def disconnect(self, sid: str) -> None:
        conn = self._connections.pop(sid, None)
        if conn is None:
            return
        for room in sorted(conn.rooms):
            self._discard_member(room, sid)
            await self._server.leave_room(sid, room)
        conn.rooms.clear()
        logger.info("User %s disconnected", conn.identity.email)

    # Internals -------------------------------------------------------------
    async def _enter(self, sid: str, room: str) -> None:
        conn = self._connections.get(sid)
        if conn is None or room in conn.rooms:
            return
        conn.rooms.add(room)
        self._members[room].add(sid)
        await self._server.enter_room(sid, room)

    async def _leave(self, sid: str, room: str) -> None:
        conn = self._connections.get(sid)
        if conn is None or room not in conn.rooms:
            return
        conn.rooms.discard(room)
        self._discard_member(room, sid)
        await self._server.leave_room(sid, room)

    def _discard_member(self, room: str, sid: str) -> None:
        members = self._members.get(room)
        if members is None:
            return
        members.discard(sid)
        if not members:
            del self._members[room]
