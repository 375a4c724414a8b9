from django.db import models
from django.utils.translation import gettext_lazy as _


class Organization(models.Model):
    """Customer organization that ORG_USER accounts belong to."""

    name = models.CharField(_("Name"), max_length=255)
    contact_email = models.EmailField(_("Contact email"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name
