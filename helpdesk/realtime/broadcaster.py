"""Persist-then-publish for ticket mutations.

Both operations follow the same shape: fetch a fresh ticket, authorize
against it, write, re-read the enriched row and only then emit. A failure
at any step before the emit leaves nothing on the wire, so a client that
hears about a change can always fetch it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from django.conf import settings
from django.db import DatabaseError

from helpdesk.realtime.events.tickets import NEW_MESSAGE
from helpdesk.realtime.events.tickets import NEW_TICKET_MESSAGE
from helpdesk.realtime.events.tickets import TICKET_STATUS_NOTIFICATION
from helpdesk.realtime.events.tickets import TICKET_STATUS_UPDATED
from helpdesk.realtime.events.tickets import build_message_payload
from helpdesk.realtime.events.tickets import build_new_ticket_message_payload
from helpdesk.realtime.events.tickets import build_status_notification_payload
from helpdesk.realtime.events.tickets import build_ticket_payload
from helpdesk.realtime.rooms import ROOM_ADMINS
from helpdesk.realtime.rooms import room_for_ticket
from helpdesk.realtime.rooms import room_for_user
from helpdesk.tickets.exceptions import AccessDenied
from helpdesk.tickets.exceptions import InvalidPayload
from helpdesk.tickets.exceptions import InvalidStatus
from helpdesk.tickets.exceptions import StoreFailure
from helpdesk.tickets.exceptions import TicketNotFound
from helpdesk.tickets.models import STATUS_ORDER
from helpdesk.tickets.models import Ticket
from helpdesk.tickets.policy import can_mutate_status
from helpdesk.tickets.policy import can_post_message
from helpdesk.users.models import User

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Awaitable

    from helpdesk.tickets.store import TicketStore
    from helpdesk.users.identity import IdentityClaim

logger = logging.getLogger(__name__)


class EventBroadcaster:
    def __init__(self, server: Any, store: TicketStore) -> None:
        self._server = server
        self._store = store

    async def _call_store(self, action: str, awaitable: Awaitable[Any]) -> Any:
        try:
            return await awaitable
        except DatabaseError as exc:
            logger.exception("Ticket store failed while trying to %s", action)
            raise StoreFailure from exc

    async def send_message(
        self,
        identity: IdentityClaim,
        ticket_id: int,
        content: str,
    ) -> dict[str, Any]:
        """Store a message and fan it out.

        ``new-message`` goes to everyone viewing the ticket, the sender
        included. Messages from an org user also raise ``new-ticket-message``
        in the admin room.
        """

        if not isinstance(content, str) or not content.strip():
            msg = "Content and ticketId are required"
            raise InvalidPayload(msg)

        ticket = await self._call_store("load ticket", self._store.get_ticket(ticket_id))
        if ticket is None:
            raise TicketNotFound
        if not can_post_message(identity, ticket):
            logger.warning(
                "User %s may not post on ticket %s",
                identity.email,
                ticket_id,
            )
            raise AccessDenied

        message = await self._call_store(
            "create message",
            self._store.create_message(ticket.id, identity.user_id, content),
        )
        detail = await self._call_store(
            "load message",
            self._store.get_message_detail(message.id),
        )
        if detail is None:
            # Removed along with its ticket after the write.
            raise TicketNotFound

        await self._server.emit(
            NEW_MESSAGE,
            build_message_payload(detail),
            room=room_for_ticket(ticket.id),
        )
        if identity.role == User.Role.ORG_USER:
            await self._server.emit(
                NEW_TICKET_MESSAGE,
                build_new_ticket_message_payload(ticket, detail),
                room=ROOM_ADMINS,
            )
        logger.info("Message %s sent to ticket %s", detail["id"], ticket.id)
        return detail

    async def update_ticket_status(
        self,
        identity: IdentityClaim,
        ticket_id: int,
        new_status: str,
    ) -> dict[str, Any]:
        """Move a ticket to ``new_status`` and record the acting admin.

        The ticket room receives the enriched ticket; the owner's personal
        room receives a short notification even when no ticket view is open.
        """

        if not can_mutate_status(identity):
            logger.warning(
                "Non-admin %s tried to change status of ticket %s",
                identity.email,
                ticket_id,
            )
            raise AccessDenied
        if new_status not in Ticket.Status.values:
            raise InvalidStatus

        ticket = await self._call_store("load ticket", self._store.get_ticket(ticket_id))
        if ticket is None:
            raise TicketNotFound
        if (
            not getattr(settings, "TICKET_ALLOW_REOPEN", True)
            and STATUS_ORDER[new_status] < STATUS_ORDER[ticket.status]
        ):
            msg = f"Cannot move ticket from {ticket.status} back to {new_status}"
            raise InvalidStatus(msg)

        await self._call_store(
            "update status",
            self._store.update_ticket_status(ticket.id, new_status, identity.user_id),
        )
        detail = await self._call_store(
            "load ticket detail",
            self._store.get_ticket_detail(ticket.id),
        )
        if detail is None:
            raise TicketNotFound

        await self._server.emit(
            TICKET_STATUS_UPDATED,
            build_ticket_payload(detail),
            room=room_for_ticket(ticket.id),
        )
        await self._server.emit(
            TICKET_STATUS_NOTIFICATION,
            build_status_notification_payload(ticket, new_status, identity.email),
            room=room_for_user(ticket.owner_id),
        )
        logger.info(
            "Ticket %s status updated to %s by %s",
            ticket.id,
            new_status,
            identity.email,
        )
        return detail
