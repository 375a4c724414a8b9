"""Async data-access interface over tickets and messages.

Every method is a suspend point: it runs the ORM call in a worker thread via
``database_sync_to_async`` and may interleave with other connections'
handling. Concurrent writes to the same ticket are serialized by the
database (``select_for_update``); the last write wins.
"""

from __future__ import annotations

from typing import Any

from channels.db import database_sync_to_async
from django.db import transaction
from django.utils import timezone

from helpdesk.tickets.api.serializers import MessageSerializer
from helpdesk.tickets.api.serializers import TicketSerializer
from helpdesk.tickets.models import Message
from helpdesk.tickets.models import Ticket


def _ticket_detail_queryset():
    return Ticket.objects.select_related("owner", "organization", "assigned_admin")


def _message_detail_queryset():
    return Message.objects.select_related("sender")


class TicketStore:
    @database_sync_to_async
    def get_ticket(self, ticket_id: int) -> Ticket | None:
        return Ticket.objects.filter(pk=ticket_id).first()

    @database_sync_to_async
    def get_ticket_detail(self, ticket_id: int) -> dict[str, Any] | None:
        ticket = _ticket_detail_queryset().filter(pk=ticket_id).first()
        if ticket is None:
            return None
        return dict(TicketSerializer(ticket).data)

    @database_sync_to_async
    def update_ticket_status(self, ticket_id: int, status: str, admin_id: int) -> None:
        with transaction.atomic():
            ticket = Ticket.objects.select_for_update().get(pk=ticket_id)
            ticket.status = status
            ticket.assigned_admin_id = admin_id
            ticket.updated_at = timezone.now()
            ticket.save(update_fields=["status", "assigned_admin", "updated_at"])

    @database_sync_to_async
    def create_message(self, ticket_id: int, sender_id: int, content: str) -> Message:
        return Message.objects.create(
            ticket_id=ticket_id,
            sender_id=sender_id,
            content=content,
        )

    @database_sync_to_async
    def get_message_detail(self, message_id: int) -> dict[str, Any] | None:
        message = _message_detail_queryset().filter(pk=message_id).first()
        if message is None:
            return None
        return dict(MessageSerializer(message).data)

    @database_sync_to_async
    def list_messages(self, ticket_id: int) -> list[dict[str, Any]]:
        messages = _message_detail_queryset().filter(ticket_id=ticket_id)
        return [dict(row) for row in MessageSerializer(messages, many=True).data]
