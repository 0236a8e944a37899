from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.auth import SessionClaims, TokenService
from app.domain_errors import ForbiddenError, InvalidTokenError, UnauthenticatedError
from app.models import Role
from app.security import (
    RoleChecker,
    authenticate_request,
    extract_bearer_token,
    is_role_allowed,
    require_admin,
    require_dispatcher,
    require_engineer,
)


def _claims(role: Role) -> SessionClaims:
    moment = datetime(2026, 3, 1, tzinfo=timezone.utc)
    return SessionClaims(subject="acc-1", email="a@x.com", role=role, issued_at=moment, expires_at=moment)


def test_options_requests_pass_without_credentials() -> None:
    tokens = TokenService("secret", 60)

    assert authenticate_request("OPTIONS", None, tokens) is None
    assert authenticate_request("options", "garbage", tokens) is None


def test_missing_header_is_unauthenticated() -> None:
    with pytest.raises(UnauthenticatedError, match="Authorization header is required"):
        authenticate_request("GET", None, TokenService("secret", 60))


@pytest.mark.parametrize("header", ["Basic abc", "bearer abc", "Bearer", "Bearer ", "Token a b", "Bearer a b"])
def test_malformed_header_is_unauthenticated(header: str) -> None:
    with pytest.raises(UnauthenticatedError, match="Invalid authorization header format"):
        extract_bearer_token(header)


def test_bearer_token_is_extracted() -> None:
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


def test_invalid_token_is_reported_separately_from_missing_header() -> None:
    with pytest.raises(InvalidTokenError):
        authenticate_request("GET", "Bearer abc.def.ghi", TokenService("secret", 60))


@pytest.mark.parametrize(
    ("checker", "role", "admitted"),
    [
        (require_admin, Role.ADMIN, True),
        (require_admin, Role.ENGINEER, False),
        (require_admin, Role.DISPATCHER, False),
        (require_engineer, Role.ENGINEER, True),
        (require_engineer, Role.ADMIN, True),
        (require_engineer, Role.DISPATCHER, False),
        (require_dispatcher, Role.DISPATCHER, True),
        (require_dispatcher, Role.ENGINEER, True),
        (require_dispatcher, Role.ADMIN, True),
    ],
)
def test_role_checker_admits_only_members_of_accepted_set(checker: RoleChecker, role: Role, admitted: bool) -> None:
    identity = _claims(role)

    if admitted:
        assert checker(identity) is identity
    else:
        with pytest.raises(ForbiddenError, match="Insufficient permissions"):
            checker(identity)


def test_role_membership_is_not_transitive() -> None:
    assert not is_role_allowed("admin", {Role.ENGINEER})
    assert not is_role_allowed("unknown", {Role.ENGINEER})


def test_role_checker_requires_roles() -> None:
    with pytest.raises(ValueError):
        RoleChecker()
