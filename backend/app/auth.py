"""Authentication: password hashing, password policy and session tokens."""
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
import logging
import re
import time
from jose import JWTError, jwt
from passlib.context import CryptContext
from .config import Settings, settings
from .domain_errors import InvalidInputError, InvalidRoleError, InvalidTokenError
from .models import Account, Role

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)
logger = logging.getLogger(__name__)


PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
_SPECIAL_CHARACTER_RE = re.compile("[" + re.escape(PASSWORD_SPECIAL_CHARACTERS) + "]")

# Only the HMAC family is ever accepted, whatever the token header claims.
HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})


def validate_password_policy(password: str) -> None:
    """Server-side password policy validation; messages go to the caller verbatim."""
    if password is None or len(password) < settings.PASSWORD_MIN_LENGTH:
        raise InvalidInputError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
            code="WEAK_PASSWORD",
        )
    if len(password.encode("utf-8")) > settings.PASSWORD_MAX_LENGTH:
        raise InvalidInputError(
            f"Password must be at most {settings.PASSWORD_MAX_LENGTH} bytes",
            code="WEAK_PASSWORD",
        )
    if not _SPECIAL_CHARACTER_RE.search(password):
        raise InvalidInputError(
            "Password must contain at least one special character (!@#$%^&* etc.)",
            code="WEAK_PASSWORD",
        )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        # Invalid/corrupted hash should not crash login flow.
        logger.exception("Password verification failed due to invalid hash format")
        return False


def hash_password(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


def parse_role(value: str) -> Role:
    """Map a role string onto the closed role set."""
    try:
        return Role(value)
    except ValueError:
        raise InvalidRoleError(f"Invalid role: {value!r}")


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried by a session token. Never persisted."""

    subject: str
    email: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issue and validate HMAC-signed JWT session tokens."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int,
        *,
        algorithm: str = "HS256",
        leeway_seconds: int = 0,
    ):
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported token algorithm: {algorithm}")
        if ttl_seconds <= 0:
            raise ValueError("Token TTL must be positive")
        self._secret = secret
        self.ttl_seconds = int(ttl_seconds)
        self.algorithm = algorithm
        self.leeway_seconds = int(leeway_seconds)

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenService":
        return cls(
            config.JWT_SECRET_KEY,
            config.token_ttl_seconds,
            algorithm=config.JWT_ALGORITHM,
            leeway_seconds=config.JWT_LEEWAY_SECONDS,
        )

    def issue(self, account: Account, *, now: Optional[float] = None) -> str:
        """Create a signed token for the account."""
        issued = int(now if now is not None else time.time())
        claims = {
            "sub": str(account.id),
            "email": account.email,
            "role": Role(account.role).value,
            "iat": issued,
            "exp": issued + self.ttl_seconds,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def validate(self, token: str, *, now: Optional[float] = None) -> SessionClaims:
        """Verify signature, algorithm and expiry; return the embedded claims."""
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise InvalidTokenError("Could not validate credentials")
        # Reject algorithm confusion before touching the signature.
        if header.get("alg") not in HMAC_ALGORITHMS or header.get("alg") != self.algorithm:
            raise InvalidTokenError("Could not validate credentials")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError:
            raise InvalidTokenError("Could not validate credentials")

        current = int(now if now is not None else time.time())
        exp = _int_claim(payload, "exp")
        iat = _int_claim(payload, "iat")
        if current > exp + self.leeway_seconds:
            raise InvalidTokenError("Token expired", code="TOKEN_EXPIRED")
        # Reject tokens issued far in the future (clock skew / malicious tokens).
        if iat > current + self.leeway_seconds:
            raise InvalidTokenError("Could not validate credentials")

        subject = payload.get("sub")
        email = payload.get("email")
        if not subject or not isinstance(email, str):
            raise InvalidTokenError("Could not validate credentials")
        try:
            role = Role(payload.get("role"))
        except ValueError:
            raise InvalidTokenError("Could not validate credentials")

        return SessionClaims(
            subject=str(subject),
            email=email,
            role=role,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )


def _int_claim(payload: dict, name: str) -> int:
    value = payload.get(name)
    if value is None:
        raise InvalidTokenError("Could not validate credentials")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidTokenError("Could not validate credentials")


@lru_cache()
def get_token_service() -> TokenService:
    """Process-wide token service built once from settings."""
    return TokenService.from_settings(settings)
