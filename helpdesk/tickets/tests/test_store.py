import pytest
from asgiref.sync import async_to_sync

from helpdesk.tickets.models import Ticket
from helpdesk.tickets.store import TicketStore
from tests.factories import create_message
from tests.factories import create_ticket

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def store():
    return TicketStore()


def test_get_ticket(store, org_user):
    ticket = create_ticket(org_user)
    fetched = async_to_sync(store.get_ticket)(ticket.id)
    assert fetched.id == ticket.id
    assert fetched.owner_id == org_user.id
    assert async_to_sync(store.get_ticket)(ticket.id + 100) is None


def test_ticket_detail_is_enriched(store, org_user):
    ticket = create_ticket(org_user)
    detail = async_to_sync(store.get_ticket_detail)(ticket.id)
    assert detail["owner_email"] == "alice@example.com"
    assert detail["organization_name"] == "Acme"
    assert detail["assigned_admin"] is None
    assert detail["assigned_admin_email"] is None


def test_update_status_records_admin(store, org_user, admin_user):
    ticket = create_ticket(org_user)
    before = ticket.updated_at

    async_to_sync(store.update_ticket_status)(
        ticket.id,
        Ticket.Status.IN_PROGRESS,
        admin_user.id,
    )

    ticket.refresh_from_db()
    assert ticket.status == Ticket.Status.IN_PROGRESS
    assert ticket.assigned_admin_id == admin_user.id
    assert ticket.updated_at >= before


def test_messages_in_creation_order(store, org_user, admin_user):
    ticket = create_ticket(org_user)
    first = async_to_sync(store.create_message)(ticket.id, org_user.id, "hello")
    create_message(ticket, admin_user, "on it")

    listed = async_to_sync(store.list_messages)(ticket.id)

    assert [m["content"] for m in listed] == ["hello", "on it"]
    assert listed[0]["id"] == first.id
    assert listed[1]["sender_role"] == "ADMIN"
    detail = async_to_sync(store.get_message_detail)(first.id)
    assert detail["sender_email"] == "alice@example.com"
    assert detail["ticket"] == ticket.id
