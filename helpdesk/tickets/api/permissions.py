"""Permission classes for the helpdesk API.

Thin DRF adapters over ``helpdesk.tickets.policy`` so HTTP and Socket.IO
share one set of rules.
"""

from typing import Any

from rest_framework.permissions import BasePermission

from helpdesk.tickets.policy import can_view_ticket
from helpdesk.users.identity import IdentityClaim


def _identity(request) -> IdentityClaim | None:
    user = getattr(request, "user", None)
    if not (user and getattr(user, "is_authenticated", False)):
        return None
    return IdentityClaim.from_user(user)


class IsAdminRole(BasePermission):
    message = "Admin access required"

    def has_permission(self, request, view) -> bool:
        identity = _identity(request)
        return bool(identity and identity.is_admin)


class CanViewTicket(BasePermission):
    """Object-level check: admins see every ticket, org users their own."""

    message = "Access denied"

    def has_object_permission(self, request, view, obj: Any) -> bool:
        identity = _identity(request)
        return bool(identity and can_view_ticket(identity, obj))
