import django_filters

from helpdesk.tickets.models import Ticket


class TicketFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Ticket.Status.choices)
    priority = django_filters.ChoiceFilter(choices=Ticket.Priority.choices)

    class Meta:
        model = Ticket
        fields = ["status", "priority"]
