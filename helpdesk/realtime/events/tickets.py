from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from djangorestframework_camel_case.util import camelize

if TYPE_CHECKING:  # import for type checking only
    from helpdesk.tickets.models import Ticket

# Outbound event names. Clients subscribe to these exact strings.
NEW_MESSAGE = "new-message"
NEW_TICKET_MESSAGE = "new-ticket-message"
TICKET_STATUS_UPDATED = "ticket-status-updated"
TICKET_STATUS_NOTIFICATION = "ticket-status-notification"
ERROR = "error"


def build_message_payload(detail: dict[str, Any]) -> dict[str, Any]:
    """Enriched message with the keys the REST renderer sends."""

    return camelize(detail)


def build_ticket_payload(detail: dict[str, Any]) -> dict[str, Any]:
    return camelize(detail)


def build_new_ticket_message_payload(
    ticket: Ticket,
    message: dict[str, Any],
) -> dict[str, Any]:
    return {
        "ticketId": ticket.id,
        "ticketTitle": ticket.title,
        "message": build_message_payload(message),
    }


def build_status_notification_payload(
    ticket: Ticket,
    new_status: str,
    updated_by: str,
) -> dict[str, Any]:
    return {
        "ticketId": ticket.id,
        "ticketTitle": ticket.title,
        "newStatus": new_status,
        "updatedBy": updated_by,
    }


def build_error_payload(message: Any) -> dict[str, Any]:
    return {"message": str(message)}
