"""In-memory stand-ins for the Socket.IO server and the ticket store."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

from django.db import DatabaseError


@dataclass
class Emit:
    event: str
    data: Any
    target: str
    recipients: frozenset[str]


class FakeSocketServer:
    """Records handlers, room membership and emits like ``AsyncServer``.

    Recipients are resolved at emit time, so a connection that joins a room
    after an emit never sees it.
    """

    def __init__(self, journal: list | None = None) -> None:
        self.handlers: dict[str, Any] = {}
        self.rooms: dict[str, set[str]] = defaultdict(set)
        self.emits: list[Emit] = []
        self.journal = journal if journal is not None else []

    def on(self, event, handler=None, namespace=None):
        def set_handler(fn):
            self.handlers[event] = fn
            return fn

        if handler is None:
            return set_handler
        return set_handler(handler)

    async def trigger(self, event: str, *args):
        return await self.handlers[event](*args)

    async def enter_room(self, sid, room, namespace=None):
        self.rooms[room].add(sid)

    async def leave_room(self, sid, room, namespace=None):
        self.rooms[room].discard(sid)

    async def emit(self, event, data=None, to=None, room=None, **kwargs):
        target = to or room
        recipients = set(self.rooms.get(target, ()))
        if to is not None:
            recipients.add(to)
        self.emits.append(Emit(event, data, target, frozenset(recipients)))
        self.journal.append(("emit", event))

    def received(self, sid: str, event: str | None = None) -> list[Any]:
        return [
            e.data
            for e in self.emits
            if sid in e.recipients and (event is None or e.event == event)
        ]

    def events(self) -> list[str]:
        return [e.event for e in self.emits]


class FakeTicketStore:
    """Ticket store over plain objects; ``fail_on`` names methods that raise."""

    def __init__(self, journal: list | None = None) -> None:
        self.tickets: dict[int, SimpleNamespace] = {}
        self.messages: list[dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.journal = journal if journal is not None else []

    def add_ticket(
        self,
        ticket_id: int,
        owner_id: int,
        *,
        status: str = "OPEN",
        title: str = "Printer on fire",
    ) -> SimpleNamespace:
        ticket = SimpleNamespace(
            id=ticket_id,
            owner_id=owner_id,
            status=status,
            title=title,
            assigned_admin_id=None,
        )
        self.tickets[ticket_id] = ticket
        return ticket

    def _check(self, name: str) -> None:
        if name in self.fail_on:
            msg = f"{name} failed"
            raise DatabaseError(msg)

    async def get_ticket(self, ticket_id):
        self._check("get_ticket")
        ticket = self.tickets.get(int(ticket_id))
        # Callers get a snapshot, as they would from a fresh query.
        return SimpleNamespace(**vars(ticket)) if ticket else None

    async def get_ticket_detail(self, ticket_id):
        self._check("get_ticket_detail")
        ticket = self.tickets.get(int(ticket_id))
        return dict(vars(ticket)) if ticket else None

    async def update_ticket_status(self, ticket_id, status, admin_id):
        self._check("update_ticket_status")
        ticket = self.tickets[int(ticket_id)]
        ticket.status = status
        ticket.assigned_admin_id = admin_id
        self.journal.append(("write", "update_ticket_status"))

    async def create_message(self, ticket_id, sender_id, content):
        self._check("create_message")
        message = {
            "id": len(self.messages) + 1,
            "ticket": int(ticket_id),
            "sender": sender_id,
            "content": content,
        }
        self.messages.append(message)
        self.journal.append(("write", "create_message"))
        return SimpleNamespace(id=message["id"])

    async def get_message_detail(self, message_id):
        self._check("get_message_detail")
        for message in self.messages:
            if message["id"] == message_id:
                return dict(message)
        return None

    async def list_messages(self, ticket_id):
        return [dict(m) for m in self.messages if m["ticket"] == int(ticket_id)]
