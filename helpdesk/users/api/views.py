from django.db.models import Count
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet
from rest_framework_simplejwt.views import TokenObtainPairView

from helpdesk.tickets.api.permissions import IsAdminRole
from helpdesk.users.models import User
from helpdesk.users.models import UserSettings

from .serializers import LoginSerializer
from .serializers import UserListSerializer
from .serializers import UserSerializer
from .serializers import UserSettingsSerializer


@extend_schema_view(post=extend_schema(tags=["Authentication"]))
class LoginView(TokenObtainPairView):
    serializer_class = LoginSerializer


@extend_schema_view(list=extend_schema(tags=["Users"]))
class UserViewSet(ListModelMixin, GenericViewSet):
    serializer_class = UserListSerializer
    queryset = User.objects.all()
    # Plain list (no pagination) for the admin directory
    pagination_class = None

    def get_queryset(self, *args, **kwargs):  # type: ignore[override]
        return (
            User.objects.select_related("organization")
            .annotate(ticket_count=Count("tickets"))
            .order_by("-created_at", "-id")
        )

    def get_permissions(self):
        if self.action == "list":
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    @extend_schema(tags=["Users"], responses=UserSerializer)
    @action(detail=False)
    def me(self, request):
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(status=status.HTTP_200_OK, data=serializer.data)

    @extend_schema(
        tags=["Users"],
        request=UserSettingsSerializer,
        responses=UserSettingsSerializer,
    )
    @action(
        detail=False,
        methods=["get", "put"],
        url_path="settings",
        url_name="settings",
        serializer_class=UserSettingsSerializer,
    )
    def user_settings(self, request):
        # Defaults are materialized on first access
        instance, _ = UserSettings.objects.get_or_create(user=request.user)
        if request.method == "GET":
            return Response(UserSettingsSerializer(instance).data)
        serializer = UserSettingsSerializer(
            instance,
            data=request.data,
            partial=True,
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
