from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from helpdesk.users.identity import add_identity_claims
from helpdesk.users.models import User
from helpdesk.users.models import UserSettings


class UserSerializer(serializers.ModelSerializer[User]):
    full_name = serializers.CharField(source="name", read_only=True)
    id = serializers.IntegerField(read_only=True)
    organization_name = serializers.CharField(
        source="organization.name",
        read_only=True,
        default=None,
    )

    # Role and organization are managed by admins only
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    role = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "role",
            "organization",
            "organization_name",
            "created_at",
        ]
        read_only_fields = ["organization", "created_at"]


class UserListSerializer(UserSerializer):
    """Admin directory row; `ticket_count` comes from a queryset annotation."""

    ticket_count = serializers.IntegerField(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = [*UserSerializer.Meta.fields, "ticket_count"]


class UserSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserSettings
        fields = (
            "email_notifications",
            "push_notifications",
            "weekly_digest",
            "ticket_updates",
            "new_messages",
            "theme",
            "language",
            "timezone",
            "updated_at",
        )
        read_only_fields = ("updated_at",)


class LoginSerializer(TokenObtainPairSerializer):
    """Email + password login issuing tokens that carry identity claims."""

    username_field = "email"

    @classmethod
    def get_token(cls, user):
        return add_identity_claims(super().get_token(user), user)

    def validate(self, attrs):
        data = super().validate(attrs)
        data["user"] = UserSerializer(self.user).data
        return data
