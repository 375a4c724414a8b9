"""Error taxonomy for ticket operations.

These are DRF exceptions so the HTTP views can let them propagate; the
Socket.IO handlers catch ``APIException`` and report ``detail`` back to the
originating connection instead.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException


class AccessDenied(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Access denied")
    default_code = "access_denied"


class TicketNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Ticket not found")
    default_code = "not_found"


class InvalidStatus(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Invalid status")
    default_code = "invalid_status"


class InvalidPayload(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Invalid payload")
    default_code = "invalid_payload"


class StoreFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("Internal server error")
    default_code = "store_failure"
