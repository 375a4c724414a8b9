import pytest
from asgiref.sync import async_to_sync
from djangorestframework_camel_case.util import camelize

from helpdesk.realtime.broadcaster import EventBroadcaster
from helpdesk.realtime.rooms import RoomRouter
from helpdesk.tickets.exceptions import AccessDenied
from helpdesk.tickets.exceptions import InvalidPayload
from helpdesk.tickets.exceptions import InvalidStatus
from helpdesk.tickets.exceptions import StoreFailure
from helpdesk.tickets.exceptions import TicketNotFound
from helpdesk.users.identity import IdentityClaim

OWNER = IdentityClaim(user_id=1, email="owner@example.com", role="ORG_USER")
STRANGER = IdentityClaim(user_id=3, email="other@example.com", role="ORG_USER")
ADMIN = IdentityClaim(user_id=2, email="admin@example.com", role="ADMIN")
OTHER_ADMIN = IdentityClaim(user_id=4, email="ops@example.com", role="ADMIN")


@pytest.fixture
def router(fake_server, fake_store):
    fake_store.add_ticket(7, owner_id=1, title="Printer on fire")
    return RoomRouter(fake_server, fake_store)


@pytest.fixture
def broadcaster(fake_server, fake_store):
    return EventBroadcaster(fake_server, fake_store)


@pytest.fixture
def sessions(router):
    """Owner viewing ticket 7, an admin viewing it, an idle admin, a stranger."""
    for sid, identity in [
        ("owner", OWNER),
        ("admin", ADMIN),
        ("idle-admin", OTHER_ADMIN),
        ("stranger", STRANGER),
    ]:
        async_to_sync(router.connect)(sid, identity)
    async_to_sync(router.join_ticket)("owner", 7)
    async_to_sync(router.join_ticket)("admin", 7)
    return router


def send(broadcaster, identity, content, ticket_id=7):
    return async_to_sync(broadcaster.send_message)(identity, ticket_id, content)


def update(broadcaster, identity, new_status, ticket_id=7):
    return async_to_sync(broadcaster.update_ticket_status)(identity, ticket_id, new_status)


@pytest.mark.usefixtures("sessions")
class TestSendMessage:
    def test_org_user_message_reaches_room_and_admins(self, broadcaster, fake_server):
        detail = send(broadcaster, OWNER, "hello")
        pushed = camelize(detail)

        assert detail["content"] == "hello"
        assert fake_server.received("owner", "new-message") == [pushed]
        assert fake_server.received("admin", "new-message") == [pushed]
        assert fake_server.received("idle-admin", "new-message") == []
        assert fake_server.received("stranger") == []
        notice = {"ticketId": 7, "ticketTitle": "Printer on fire", "message": pushed}
        assert fake_server.received("admin", "new-ticket-message") == [notice]
        assert fake_server.received("idle-admin", "new-ticket-message") == [notice]
        assert fake_server.received("owner", "new-ticket-message") == []

    def test_admin_message_only_reaches_ticket_room(self, broadcaster, fake_server):
        detail = send(broadcaster, ADMIN, "on it")

        assert fake_server.events() == ["new-message"]
        assert fake_server.received("owner") == [camelize(detail)]
        assert fake_server.received("idle-admin") == []

    def test_messages_arrive_in_commit_order(self, broadcaster, fake_server):
        first = send(broadcaster, OWNER, "one")
        second = send(broadcaster, ADMIN, "two")
        assert fake_server.received("owner", "new-message") == [
            camelize(first),
            camelize(second),
        ]
        assert first["id"] < second["id"]

    def test_write_happens_before_emit(self, broadcaster, fake_server):
        send(broadcaster, OWNER, "hello")
        assert fake_server.journal[0] == ("write", "create_message")
        assert fake_server.journal[1:] == [
            ("emit", "new-message"),
            ("emit", "new-ticket-message"),
        ]

    def test_stranger_denied_without_side_effects(self, broadcaster, fake_server, fake_store):
        with pytest.raises(AccessDenied):
            send(broadcaster, STRANGER, "let me in")
        assert fake_store.messages == []
        assert fake_server.emits == []

    def test_missing_ticket(self, broadcaster, fake_server):
        with pytest.raises(TicketNotFound):
            send(broadcaster, OWNER, "hello", ticket_id=404)
        assert fake_server.emits == []

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_blank_content(self, broadcaster, fake_server, content):
        with pytest.raises(InvalidPayload):
            send(broadcaster, OWNER, content)
        assert fake_server.emits == []

    @pytest.mark.parametrize("failing", ["get_ticket", "create_message", "get_message_detail"])
    def test_store_failure_emits_nothing(self, broadcaster, fake_server, fake_store, failing):
        fake_store.fail_on.add(failing)
        with pytest.raises(StoreFailure):
            send(broadcaster, OWNER, "hello")
        assert fake_server.emits == []

    def test_vanished_message_emits_nothing(self, broadcaster, fake_server, fake_store):
        async def vanished(message_id):
            return None

        fake_store.get_message_detail = vanished
        with pytest.raises(TicketNotFound):
            send(broadcaster, OWNER, "hello")
        assert fake_server.emits == []


@pytest.mark.usefixtures("sessions")
class TestUpdateTicketStatus:
    def test_status_update_fan_out(self, broadcaster, fake_server, fake_store):
        detail = update(broadcaster, ADMIN, "IN_PROGRESS")

        assert fake_store.tickets[7].status == "IN_PROGRESS"
        assert fake_store.tickets[7].assigned_admin_id == ADMIN.user_id
        assert detail["status"] == "IN_PROGRESS"
        pushed = camelize(detail)
        assert pushed["assignedAdminId"] == ADMIN.user_id
        assert fake_server.received("owner", "ticket-status-updated") == [pushed]
        assert fake_server.received("admin", "ticket-status-updated") == [pushed]
        assert fake_server.received("idle-admin") == []
        assert fake_server.received("owner", "ticket-status-notification") == [
            {
                "ticketId": 7,
                "ticketTitle": "Printer on fire",
                "newStatus": "IN_PROGRESS",
                "updatedBy": "admin@example.com",
            },
        ]

    def test_owner_notified_without_open_view(self, router, broadcaster, fake_server):
        async_to_sync(router.leave_ticket)("owner", 7)
        update(broadcaster, ADMIN, "RESOLVED")
        assert fake_server.received("owner", "ticket-status-updated") == []
        assert len(fake_server.received("owner", "ticket-status-notification")) == 1

    def test_org_user_denied_and_status_unchanged(self, broadcaster, fake_server, fake_store):
        with pytest.raises(AccessDenied):
            update(broadcaster, OWNER, "RESOLVED")
        assert fake_store.tickets[7].status == "OPEN"
        assert fake_server.emits == []

    @pytest.mark.parametrize("new_status", ["CLOSED", "", None, "open"])
    def test_invalid_status(self, broadcaster, fake_server, new_status):
        with pytest.raises(InvalidStatus):
            update(broadcaster, ADMIN, new_status)
        assert fake_server.emits == []

    def test_missing_ticket(self, broadcaster):
        with pytest.raises(TicketNotFound):
            update(broadcaster, ADMIN, "RESOLVED", ticket_id=404)

    def test_reopen_allowed_by_default(self, broadcaster, fake_store):
        fake_store.tickets[7].status = "RESOLVED"
        update(broadcaster, ADMIN, "OPEN")
        assert fake_store.tickets[7].status == "OPEN"

    def test_reopen_rejected_when_disabled(self, settings, broadcaster, fake_server, fake_store):
        settings.TICKET_ALLOW_REOPEN = False
        fake_store.tickets[7].status = "RESOLVED"
        with pytest.raises(InvalidStatus):
            update(broadcaster, ADMIN, "IN_PROGRESS")
        assert fake_store.tickets[7].status == "RESOLVED"
        assert fake_server.emits == []

    def test_forward_move_allowed_when_reopen_disabled(self, settings, broadcaster, fake_store):
        settings.TICKET_ALLOW_REOPEN = False
        update(broadcaster, ADMIN, "RESOLVED")
        assert fake_store.tickets[7].status == "RESOLVED"

    def test_write_failure_emits_nothing(self, broadcaster, fake_server, fake_store):
        fake_store.fail_on.add("update_ticket_status")
        with pytest.raises(StoreFailure):
            update(broadcaster, ADMIN, "RESOLVED")
        assert fake_store.tickets[7].status == "OPEN"
        assert fake_server.emits == []

    def test_vanished_ticket_emits_nothing(self, broadcaster, fake_server, fake_store):
        async def vanished(ticket_id):
            return None

        fake_store.get_ticket_detail = vanished
        with pytest.raises(TicketNotFound):
            update(broadcaster, ADMIN, "RESOLVED")
        assert fake_server.emits == []

    def test_last_write_wins(self, broadcaster, fake_store):
        update(broadcaster, ADMIN, "IN_PROGRESS")
        update(broadcaster, OTHER_ADMIN, "RESOLVED")
        assert fake_store.tickets[7].status == "RESOLVED"
        assert fake_store.tickets[7].assigned_admin_id == OTHER_ADMIN.user_id
