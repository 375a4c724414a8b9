"""Ticket authorization rules.

Pure decision functions over an identity claim and a ticket. They never hit
the database; callers fetch a fresh ticket and turn a ``False`` into an
explicit ``AccessDenied``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from helpdesk.users.identity import IdentityClaim


def _is_owner(identity: IdentityClaim, ticket: Any) -> bool:
    owner_id = getattr(ticket, "owner_id", None)
    return owner_id is not None and int(owner_id) == identity.user_id


def can_view_ticket(identity: IdentityClaim, ticket: Any) -> bool:
    return identity.is_admin or _is_owner(identity, ticket)


def can_mutate_status(identity: IdentityClaim) -> bool:
    return identity.is_admin


def can_post_message(identity: IdentityClaim, ticket: Any) -> bool:
    return can_view_ticket(identity, ticket)
