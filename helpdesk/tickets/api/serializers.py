from rest_framework import serializers

from helpdesk.tickets.models import Message
from helpdesk.tickets.models import Ticket


class TicketSerializer(serializers.ModelSerializer):
    """Enriched ticket: the row plus owner/organization/admin display fields.

    The same shape is returned by the REST API and pushed over Socket.IO so a
    client can overwrite fetched state with pushed state.
    """

    owner_email = serializers.EmailField(source="owner.email", read_only=True)
    organization_name = serializers.CharField(
        source="organization.name",
        read_only=True,
        default=None,
    )
    assigned_admin_email = serializers.EmailField(
        source="assigned_admin.email",
        read_only=True,
        default=None,
    )

    class Meta:
        model = Ticket
        fields = (
            "id",
            "title",
            "description",
            "status",
            "priority",
            "owner",
            "owner_email",
            "organization",
            "organization_name",
            "assigned_admin",
            "assigned_admin_email",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class TicketCreateSerializer(serializers.ModelSerializer):
    priority = serializers.ChoiceField(
        choices=Ticket.Priority.choices,
        required=False,
        default=Ticket.Priority.MEDIUM,
    )

    class Meta:
        model = Ticket
        fields = ("title", "description", "priority")


class TicketStatusSerializer(serializers.Serializer):
    # Checked by the broadcaster after the admin check.
    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class MessageSerializer(serializers.ModelSerializer):
    """Message joined with its sender's email and role."""

    sender_email = serializers.EmailField(source="sender.email", read_only=True)
    sender_role = serializers.CharField(source="sender.role", read_only=True)

    class Meta:
        model = Message
        fields = (
            "id",
            "content",
            "ticket",
            "sender",
            "sender_email",
            "sender_role",
            "created_at",
        )
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField()
    ticket_id = serializers.IntegerField(min_value=1)
