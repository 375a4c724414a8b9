"""Views for the tickets and messages API.

Ticket reads go straight to the ORM; the message list is read through the ticket
store. Status changes and new messages go through the
realtime broadcaster so an HTTP client triggers the same fan-out as a
Socket.IO client.
"""

import logging

from asgiref.sync import async_to_sync
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import CreateModelMixin
from rest_framework.mixins import ListModelMixin
from rest_framework.mixins import RetrieveModelMixin
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from helpdesk.realtime.hub import get_hub
from helpdesk.tickets.exceptions import TicketNotFound
from helpdesk.tickets.models import Message
from helpdesk.tickets.models import Ticket
from helpdesk.users.identity import IdentityClaim
from helpdesk.users.models import User

from .filters import TicketFilter
from .permissions import CanViewTicket
from .serializers import MessageCreateSerializer
from .serializers import MessageSerializer
from .serializers import TicketCreateSerializer
from .serializers import TicketSerializer
from .serializers import TicketStatusSerializer

logger = logging.getLogger(__name__)


def _tickets():
    return Ticket.objects.select_related("owner", "organization", "assigned_admin")


def get_viewable_ticket(view, ticket_id) -> Ticket:
    """Load a ticket for ``view.request`` or raise 404 / 403."""

    ticket = _tickets().filter(pk=ticket_id).first()
    if ticket is None:
        raise TicketNotFound
    view.check_object_permissions(view.request, ticket)
    return ticket


@extend_schema_view(
    list=extend_schema(tags=["Tickets"]),
    retrieve=extend_schema(tags=["Tickets"]),
    create=extend_schema(
        tags=["Tickets"],
        request=TicketCreateSerializer,
        responses={201: TicketSerializer},
    ),
)
class TicketViewSet(
    CreateModelMixin,
    ListModelMixin,
    RetrieveModelMixin,
    GenericViewSet,
):
    serializer_class = TicketSerializer
    permission_classes = [IsAuthenticated, CanViewTicket]
    filter_backends = [DjangoFilterBackend]
    filterset_class = TicketFilter
    lookup_value_regex = r"\d+"
    pagination_class = None

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Ticket.objects.none()
        user = self.request.user
        if user.role == User.Role.ADMIN:
            return _tickets()
        return _tickets().filter(owner=user)

    def get_object(self):
        return get_viewable_ticket(self, self.kwargs[self.lookup_field])

    def create(self, request, *args, **kwargs):
        serializer = TicketCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user
        organization = user.organization if user.role == User.Role.ORG_USER else None
        ticket = serializer.save(owner=user, organization=organization)
        logger.info("Ticket %s created by %s", ticket.id, user.email)
        ticket = _tickets().get(pk=ticket.pk)
        return Response(TicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Tickets"],
        request=TicketStatusSerializer,
        responses=TicketSerializer,
    )
    @action(detail=True, methods=["patch"], url_path="status", url_name="status")
    def update_status(self, request, pk=None):
        serializer = TicketStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        broadcaster = get_hub().broadcaster
        detail = async_to_sync(broadcaster.update_ticket_status)(
            IdentityClaim.from_user(request.user),
            int(pk),
            serializer.validated_data.get("status"),
        )
        return Response(detail)


@extend_schema_view(
    create=extend_schema(
        tags=["Messages"],
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
    ),
)
class MessageViewSet(GenericViewSet):
    serializer_class = MessageSerializer
    queryset = Message.objects.select_related("sender")
    permission_classes = [IsAuthenticated, CanViewTicket]
    pagination_class = None

    def create(self, request, *args, **kwargs):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        broadcaster = get_hub().broadcaster
        detail = async_to_sync(broadcaster.send_message)(
            IdentityClaim.from_user(request.user),
            serializer.validated_data["ticket_id"],
            serializer.validated_data["content"],
        )
        return Response(detail, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Messages"], responses=MessageSerializer(many=True))
    @action(
        detail=False,
        methods=["get"],
        url_path=r"ticket/(?P<ticket_id>\d+)",
        url_name="ticket",
    )
    def for_ticket(self, request, ticket_id=None):
        ticket = get_viewable_ticket(self, ticket_id)
        messages = async_to_sync(get_hub().store.list_messages)(ticket.id)
        return Response(messages)
