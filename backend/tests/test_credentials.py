from __future__ import annotations

import base64
import json
from types import SimpleNamespace

import pytest
from jose import jwt

from app.auth import (
    TokenService,
    hash_password,
    parse_role,
    validate_password_policy,
    verify_password,
)
from app.domain_errors import InvalidInputError, InvalidRoleError, InvalidTokenError
from app.models import Role

SECRET = "unit-test-secret"
ISSUED_AT = 1_750_000_000


def _account(role: str = "engineer"):
    return SimpleNamespace(id="acc-1", email="a@x.com", role=role)


def _service(**kwargs) -> TokenService:
    return TokenService(SECRET, 3600, **kwargs)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def test_verify_accepts_own_hash_and_rejects_other_password() -> None:
    hashed = hash_password("Secret!1")

    assert hashed != "Secret!1"
    assert verify_password("Secret!1", hashed)
    assert not verify_password("Secret!2", hashed)


def test_verify_returns_false_for_malformed_hash() -> None:
    assert verify_password("Secret!1", "not-a-bcrypt-hash") is False


def test_policy_rejects_password_without_special_character() -> None:
    with pytest.raises(InvalidInputError, match="special character") as exc:
        validate_password_policy("abc123")

    assert exc.value.code == "WEAK_PASSWORD"
    assert exc.value.http_status == 400


def test_policy_accepts_password_with_special_character() -> None:
    validate_password_policy("abc123!")


def test_policy_rejects_short_and_oversized_passwords() -> None:
    with pytest.raises(InvalidInputError, match="at least 6 characters"):
        validate_password_policy("a!b")
    with pytest.raises(InvalidInputError, match="at most 72 bytes"):
        validate_password_policy("!" + "ж" * 40)


def test_parse_role_is_closed_set() -> None:
    assert parse_role("dispatcher") is Role.DISPATCHER
    with pytest.raises(InvalidRoleError) as exc:
        parse_role("superuser")
    assert exc.value.code == "INVALID_ROLE"


def test_issue_then_validate_returns_issued_identity() -> None:
    tokens = _service()
    token = tokens.issue(_account("admin"), now=ISSUED_AT)

    claims = tokens.validate(token, now=ISSUED_AT + 10)

    assert claims.subject == "acc-1"
    assert claims.email == "a@x.com"
    assert claims.role is Role.ADMIN
    assert int(claims.expires_at.timestamp()) - int(claims.issued_at.timestamp()) == 3600


def test_token_is_valid_up_to_expiry_and_rejected_after() -> None:
    tokens = _service()
    token = tokens.issue(_account(), now=ISSUED_AT)

    tokens.validate(token, now=ISSUED_AT + 3600)
    with pytest.raises(InvalidTokenError) as exc:
        tokens.validate(token, now=ISSUED_AT + 3601)
    assert exc.value.code == "TOKEN_EXPIRED"


def test_leeway_extends_acceptance_window() -> None:
    tokens = _service(leeway_seconds=30)
    token = tokens.issue(_account(), now=ISSUED_AT)

    tokens.validate(token, now=ISSUED_AT + 3630)
    with pytest.raises(InvalidTokenError):
        tokens.validate(token, now=ISSUED_AT + 3631)


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = TokenService("other-secret", 3600).issue(_account(), now=ISSUED_AT)

    with pytest.raises(InvalidTokenError) as exc:
        _service().validate(token, now=ISSUED_AT)
    assert exc.value.code == "INVALID_TOKEN"


def test_token_with_different_hmac_algorithm_is_rejected() -> None:
    claims = {"sub": "acc-1", "email": "a@x.com", "role": "admin", "iat": ISSUED_AT, "exp": ISSUED_AT + 60}
    token = jwt.encode(claims, SECRET, algorithm="HS512")

    with pytest.raises(InvalidTokenError):
        _service().validate(token, now=ISSUED_AT)


def test_unsigned_token_is_rejected() -> None:
    claims = {"sub": "acc-1", "email": "a@x.com", "role": "admin", "iat": ISSUED_AT, "exp": ISSUED_AT + 60}
    token = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64(claims)}."

    with pytest.raises(InvalidTokenError):
        _service().validate(token, now=ISSUED_AT)


def test_token_with_unknown_role_is_rejected() -> None:
    claims = {"sub": "acc-1", "email": "a@x.com", "role": "root", "iat": ISSUED_AT, "exp": ISSUED_AT + 60}
    token = jwt.encode(claims, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        _service().validate(token, now=ISSUED_AT)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_garbled_tokens_are_rejected(token: str) -> None:
    with pytest.raises(InvalidTokenError):
        _service().validate(token, now=ISSUED_AT)


def test_service_refuses_non_hmac_algorithm_and_bad_ttl() -> None:
    with pytest.raises(ValueError):
        TokenService(SECRET, 60, algorithm="RS256")
    with pytest.raises(ValueError):
        TokenService(SECRET, 0)
