"""Identity verification shared by the HTTP API and the Socket.IO handshake.

A verified identity is immutable for the lifetime of a connection. Anything
that depends on mutable state (ticket ownership, the ticket itself) is
re-checked against the database at action time by the callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from helpdesk.users.models import User

if TYPE_CHECKING:  # import for type checking only
    from rest_framework_simplejwt.tokens import Token


class AuthError(Exception):
    """Credential missing or rejected. No side effects have happened."""

    reason = "unauthorized"


class MissingToken(AuthError):
    pass


class InvalidOrExpiredToken(AuthError):
    def __init__(self, message: str, *, expired: bool = False) -> None:
        super().__init__(message)
        self.expired = expired

    @property
    def reason(self) -> str:  # type: ignore[override]
        return "jwt_expired" if self.expired else "unauthorized"


@dataclass(frozen=True)
class IdentityClaim:
    user_id: int
    email: str
    role: str
    org_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN

    @classmethod
    def from_user(cls, user: User) -> IdentityClaim:
        return cls(
            user_id=int(user.pk),
            email=user.email,
            role=user.role,
            org_id=user.organization_id,
        )


def add_identity_claims(token: Token, user: User) -> Token:
    """Embed the identity claims the realtime layer reads back in `verify`."""

    token["email"] = user.email
    token["role"] = user.role
    token["org_id"] = user.organization_id
    return token


def _claims_from_token(validated: Any) -> IdentityClaim:
    role = validated.get("role")
    if role not in User.Role.values:
        msg = "Token is missing a valid role claim."
        raise InvalidOrExpiredToken(msg)
    try:
        user_id = int(validated[api_settings.USER_ID_CLAIM])
    except (KeyError, TypeError, ValueError) as exc:
        msg = "Token is missing a valid user id claim."
        raise InvalidOrExpiredToken(msg) from exc
    org_id = validated.get("org_id")
    return IdentityClaim(
        user_id=user_id,
        email=str(validated.get("email") or ""),
        role=role,
        org_id=int(org_id) if org_id is not None else None,
    )


def verify(token: str | None) -> IdentityClaim:
    """Validate an access token and return the identity it carries.

    Raises ``MissingToken`` when no credential is supplied and
    ``InvalidOrExpiredToken`` when the signature, expiry or claims are bad,
    or when the user is gone or inactive. Reads the user row, so async
    callers wrap it in ``database_sync_to_async``.
    """

    if not token:
        msg = "No credential supplied."
        raise MissingToken(msg)
    try:
        validated = AccessToken(token)
    except TokenError as exc:
        message = str(exc)
        raise InvalidOrExpiredToken(
            message,
            expired="expired" in message.lower(),
        ) from exc
    identity = _claims_from_token(validated)
    try:
        JWTAuthentication().get_user(validated)
    except AuthenticationFailed as exc:
        raise InvalidOrExpiredToken(str(exc.detail)) from exc
    return identity
