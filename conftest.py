import pytest
from django.apps import apps
from rest_framework.test import APIClient

from helpdesk.realtime.hub import build_hub
from helpdesk.realtime.tests.fakes import FakeSocketServer
from helpdesk.realtime.tests.fakes import FakeTicketStore
from helpdesk.users.models import User
from tests.factories import create_organization
from tests.factories import create_user_with_role


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def fake_server():
    return FakeSocketServer()


@pytest.fixture
def fake_store(fake_server):
    # Share one journal so tests can check write/emit ordering.
    return FakeTicketStore(journal=fake_server.journal)


@pytest.fixture
def realtime_hub(fake_server, monkeypatch):
    """Hub over the real Django store, emitting into a fake server."""
    hub = build_hub(server=fake_server)
    monkeypatch.setattr(apps.get_app_config("realtime"), "hub", hub)
    return hub


@pytest.fixture
def fake_hub(fake_server, fake_store):
    """Hub with no database behind it."""
    return build_hub(server=fake_server, store=fake_store)


@pytest.fixture
def organization(db):
    return create_organization()


@pytest.fixture
def org_user(organization):
    return create_user_with_role("alice", organization=organization)


@pytest.fixture
def other_org_user(organization):
    return create_user_with_role("bob", organization=organization)


@pytest.fixture
def admin_user(db):
    return create_user_with_role("root", role=User.Role.ADMIN)
