"""Access control gate: bearer extraction, token validation and role checks."""

from __future__ import annotations

from collections.abc import Iterable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth import SessionClaims, TokenService, get_token_service
from .domain_errors import ForbiddenError, UnauthenticatedError
from .models import Role

# Cross-origin pre-flight carries no credentials and does no work.
PASS_THROUGH_METHODS = frozenset({"OPTIONS"})
BEARER_SCHEME = "Bearer"

# Registers the bearer scheme in OpenAPI; rejection stays with the gate below.
bearer_scheme = HTTPBearer(auto_error=False)


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise UnauthenticatedError("Authorization header is required")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != BEARER_SCHEME or not token or " " in token:
        raise UnauthenticatedError("Invalid authorization header format")
    return token


def authenticate_request(
    method: str,
    authorization: str | None,
    tokens: TokenService,
) -> SessionClaims | None:
    """Run the gate for one request; ``None`` means the request passes unauthenticated."""
    if method.upper() in PASS_THROUGH_METHODS:
        return None
    token = extract_bearer_token(authorization)
    return tokens.validate(token)


def _authorization_value(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    if credentials is None:
        # HTTPBearer drops malformed headers; keep them so they fail as malformed.
        return request.headers.get("authorization")
    return f"{credentials.scheme} {credentials.credentials}"


def authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> SessionClaims | None:
    """Router-level dependency: bind the caller's claims to the request state."""
    claims = authenticate_request(
        request.method,
        _authorization_value(request, credentials),
        tokens,
    )
    request.state.identity = claims
    return claims


def get_current_identity(
    request: Request,
    _claims: SessionClaims | None = Depends(authenticate),
) -> SessionClaims:
    """Claims bound by the gate for this request."""
    claims = getattr(request.state, "identity", None)
    if claims is None:
        raise UnauthenticatedError("User not authenticated")
    return claims


def is_role_allowed(role: Role | str, allowed: Iterable[Role]) -> bool:
    """Plain membership; no role implies another."""
    try:
        return Role(role) in set(allowed)
    except ValueError:
        return False


class RoleChecker:
    """Admit the request only when the bound role is in the accepted set."""

    def __init__(self, *roles: Role):
        if not roles:
            raise ValueError("RoleChecker needs at least one role")
        self.allowed_roles = frozenset(Role(role) for role in roles)

    def __call__(self, identity: SessionClaims = Depends(get_current_identity)) -> SessionClaims:
        if not is_role_allowed(identity.role, self.allowed_roles):
            raise ForbiddenError("Insufficient permissions")
        return identity


require_admin = RoleChecker(Role.ADMIN)
require_engineer = RoleChecker(Role.ENGINEER, Role.ADMIN)
require_dispatcher = RoleChecker(Role.DISPATCHER, Role.ENGINEER, Role.ADMIN)
