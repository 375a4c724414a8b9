from __future__ import annotations

from django.contrib.auth import get_user_model

from helpdesk.org.models import Organization
from helpdesk.tickets.models import Message
from helpdesk.tickets.models import Ticket

User = get_user_model()

PASSWORD = "TestPass123!"  # noqa: S105


def create_organization(name: str = "Acme") -> Organization:
    return Organization.objects.create(
        name=name,
        contact_email=f"support@{name.lower()}.example.com",
    )


def create_user_with_role(
    username: str,
    *,
    role: str = User.Role.ORG_USER,
    organization: Organization | None = None,
    password: str = PASSWORD,
) -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=password,
        role=role,
        organization=organization,
    )


def create_ticket(
    owner: User,
    *,
    title: str = "Printer on fire",
    status: str = Ticket.Status.OPEN,
    priority: str = Ticket.Priority.MEDIUM,
) -> Ticket:
    return Ticket.objects.create(
        title=title,
        description="It started smoking after the update.",
        status=status,
        priority=priority,
        owner=owner,
        organization=owner.organization,
    )


def create_message(ticket: Ticket, sender: User, content: str = "Any news?") -> Message:
    return Message.objects.create(ticket=ticket, sender=sender, content=content)
