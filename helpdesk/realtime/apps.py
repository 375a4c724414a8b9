from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RealtimeConfig(AppConfig):
    name = "helpdesk.realtime"
    verbose_name = _("Realtime")
    hub = None

    def ready(self):
        from helpdesk.realtime.hub import build_hub  # noqa: PLC0415

        self.hub = build_hub()
