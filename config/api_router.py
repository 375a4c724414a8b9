from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from helpdesk.tickets.api.views import MessageViewSet
from helpdesk.tickets.api.views import TicketViewSet
from helpdesk.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("tickets", TicketViewSet, basename="tickets")
router.register("messages", MessageViewSet, basename="messages")


app_name = "api"
urlpatterns = router.urls
