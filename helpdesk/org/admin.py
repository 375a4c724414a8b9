from django.contrib import admin

from helpdesk.org import models


@admin.register(models.Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "contact_email", "created_at"]
    search_fields = ["name", "contact_email"]
