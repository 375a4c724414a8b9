from django.contrib import admin

from helpdesk.tickets import models


class MessageInline(admin.TabularInline):
    model = models.Message
    extra = 0
    readonly_fields = ["sender", "content", "created_at"]


@admin.register(models.Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["id", "title", "status", "priority", "owner", "assigned_admin"]
    search_fields = ["title", "description", "owner__email"]
    list_filter = ["status", "priority", "created_at"]
    inlines = [MessageInline]


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["id", "ticket", "sender", "created_at"]
    search_fields = ["content"]
