import pytest
from drf_spectacular.generators import SchemaGenerator
from rest_framework import status

from config.spectacular_hooks import assign_group_tag

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    ("path", "tag"),
    [
        ("/api/auth/jwt/refresh/", "JWT Authentication"),
        ("/api/auth/login/", "Authentication"),
        ("/api/tickets/{id}/status/", "Tickets"),
        ("/api/messages/ticket/{ticket_id}/", "Messages"),
        ("/api/users/settings/", "Users"),
        ("/health/", None),
    ],
)
def test_assign_group_tag(path, tag):
    assert assign_group_tag(path) == tag


def test_schema_tag_grouping():
    schema = SchemaGenerator().get_schema(request=None, public=True)
    paths = schema["paths"]
    expected = {
        "/api/auth/login/": "Authentication",
        "/api/auth/jwt/verify/": "JWT Authentication",
        "/api/tickets/": "Tickets",
        "/api/tickets/{id}/status/": "Tickets",
        "/api/messages/": "Messages",
        "/api/users/": "Users",
    }
    for path, tag in expected.items():
        for operation in paths[path].values():
            assert operation["tags"] == [tag]


def test_docs_are_admin_only(api_client, org_user, admin_user):
    api_client.force_authenticate(org_user)
    assert api_client.get("/api/schema/").status_code == status.HTTP_403_FORBIDDEN
    api_client.force_authenticate(admin_user)
    assert api_client.get("/api/schema/").status_code == status.HTTP_200_OK
