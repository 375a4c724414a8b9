"""Client-side view state for one open ticket.

Reference model of how a client merges fetched state with pushed events:

- ticket snapshots overwrite, they never merge field by field;
- messages are keyed by id, so a duplicate delivery is harmless;
- a local echo shown before the server confirms is replaced by the stored
  message once it arrives (same sender and content), or dropped if the send
  fails;
- ``reconcile`` folds a fresh fetch in, so a missed push is recovered by the
  next poll.

Messages and tickets use the camelCase wire keys, the same from REST and
from pushes.

Pushes are not replayed after a reconnect, so the client polls as well; with
both channels a message may arrive more than once, never zero times. Join the
ticket room, load, then keep reconciling on an interval while the view is
open.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime
from typing import Any
from uuid import uuid4

from django.utils.dateparse import parse_datetime
from django.utils.timezone import is_naive
from django.utils.timezone import make_aware

LOCAL_ID_PREFIX = "local-"
_EARLIEST = datetime.min.replace(tzinfo=UTC)


def _created_at(message: dict[str, Any]) -> datetime:
    value = message.get("createdAt")
    if isinstance(value, str):
        value = parse_datetime(value)
    if value is None:
        return _EARLIEST
    if is_naive(value):
        return make_aware(value, UTC)
    return value


def _message_sort_key(message: dict[str, Any]) -> tuple[datetime, int]:
    return (_created_at(message), int(message["id"]))


@dataclass
class TicketView:
    ticket_id: int
    ticket: dict[str, Any] | None = None
    _messages: dict[int, dict[str, Any]] = field(default_factory=dict)
    _pending: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def messages(self) -> list[dict[str, Any]]:
        """Stored messages ordered by (createdAt, id), then pending echoes."""

        stored = sorted(self._messages.values(), key=_message_sort_key)
        return stored + list(self._pending.values())

    @property
    def pending(self) -> list[dict[str, Any]]:
        return list(self._pending.values())

    def load(self, ticket: dict[str, Any], messages: list[dict[str, Any]]) -> None:
        self.apply_ticket(ticket)
        self.reconcile(messages)

    def apply_ticket(self, snapshot: dict[str, Any]) -> bool:
        if snapshot.get("id") != self.ticket_id:
            return False
        self.ticket = dict(snapshot)
        return True

    def apply_message(self, message: dict[str, Any]) -> bool:
        """Fold in a pushed message. Returns ``True`` if it was new."""

        if message.get("ticket") != self.ticket_id:
            return False
        message_id = int(message["id"])
        is_new = message_id not in self._messages
        if is_new:
            self._claim_echo(message)
        self._messages[message_id] = dict(message)
        return is_new

    def add_local_echo(self, sender_id: int, content: str) -> str:
        local_id = f"{LOCAL_ID_PREFIX}{uuid4().hex}"
        self._pending[local_id] = {
            "id": local_id,
            "content": content,
            "ticket": self.ticket_id,
            "sender": sender_id,
            "createdAt": None,
            "pending": True,
        }
        return local_id

    def discard_local_echo(self, local_id: str) -> None:
        self._pending.pop(local_id, None)

    def reconcile(self, messages: list[dict[str, Any]]) -> None:
        # Messages are append-only, so anything already held stays; the
        # fetched copy wins where both exist.
        for message in messages:
            self.apply_message(message)

    def _claim_echo(self, message: dict[str, Any]) -> str | None:
        for local_id, echo in self._pending.items():
            if echo["sender"] == message.get("sender") and echo["content"] == message.get(
                "content",
            ):
                del self._pending[local_id]
                return local_id
        return None
