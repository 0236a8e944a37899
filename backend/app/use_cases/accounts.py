"""Account use-cases: registration, login and admin administration."""
from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import (
    TokenService,
    hash_password,
    parse_role,
    validate_password_policy,
    verify_password,
)
from ..domain_errors import ConflictError, NotFoundError, UnauthenticatedError
from ..models import Account, Role
from .storage import commit_or_raise, storage_failure

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _email_conflict() -> ConflictError:
    return ConflictError("User with this email already exists", code="EMAIL_ALREADY_EXISTS")


def _get_account_or_404(*, db: Session, account_id: str) -> Account:
    try:
        account = db.query(Account).filter(Account.id == account_id).first()
    except SQLAlchemyError:
        raise storage_failure(db, operation="find user")
    if not account:
        raise NotFoundError("User not found", code="ACCOUNT_NOT_FOUND")
    return account


def _email_taken(*, db: Session, email: str) -> bool:
    try:
        return db.query(Account.id).filter(Account.email == email).first() is not None
    except SQLAlchemyError:
        raise storage_failure(db, operation="check email")


@lru_cache()
def _dummy_hash() -> str:
    return hash_password("timing-equalizer!")


def register_account_use_case(
    *,
    db: Session,
    tokens: TokenService,
    name: str,
    email: str,
    password: str,
) -> tuple[Account, str]:
    """Self-service registration; new accounts are engineers.

    Only the request shape (minimum length) applies here; the full password
    policy guards admin-managed passwords.
    """
    if _email_taken(db=db, email=email):
        raise _email_conflict()

    account = Account(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=Role.ENGINEER.value,
    )
    db.add(account)
    commit_or_raise(db, operation="register user", on_integrity_error=_email_conflict())
    db.refresh(account)

    logger.info("auth.register user=%s", account.id)
    return account, tokens.issue(account)


def login_use_case(
    *,
    db: Session,
    tokens: TokenService,
    email: str,
    password: str,
) -> tuple[Account, str]:
    """Check credentials; the failure never reveals whether the email exists."""
    try:
        account = db.query(Account).filter(Account.email == email).first()
    except SQLAlchemyError:
        raise storage_failure(db, operation="find user")

    if account is None:
        # Keep response time independent of account existence.
        verify_password(password, _dummy_hash())
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE, code="INVALID_CREDENTIALS")
    if not verify_password(password, account.password_hash):
        logger.info("auth.login_failed user=%s", account.id)
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE, code="INVALID_CREDENTIALS")

    return account, tokens.issue(account)


def get_account_use_case(*, db: Session, account_id: str) -> Account:
    return _get_account_or_404(db=db, account_id=account_id)


def list_accounts_use_case(*, db: Session) -> list[Account]:
    try:
        return db.query(Account).order_by(Account.created_at.desc()).all()
    except SQLAlchemyError:
        raise storage_failure(db, operation="get users")


def create_account_use_case(
    *,
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str,
) -> Account:
    if _email_taken(db=db, email=email):
        raise _email_conflict()
    validate_password_policy(password)
    parsed_role = parse_role(role)

    account = Account(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=parsed_role.value,
    )
    db.add(account)
    commit_or_raise(db, operation="create user", on_integrity_error=_email_conflict())
    db.refresh(account)

    logger.info("admin.create_user user=%s role=%s", account.id, account.role)
    return account


def update_account_use_case(
    *,
    db: Session,
    account_id: str,
    name: str,
    email: str,
    role: str,
) -> Account:
    account = _get_account_or_404(db=db, account_id=account_id)

    conflict = ConflictError("Email already taken by another user", code="EMAIL_ALREADY_EXISTS")
    if email != account.email and _email_taken(db=db, email=email):
        raise conflict
    parsed_role = parse_role(role)

    account.name = name
    account.email = email
    account.role = parsed_role.value
    commit_or_raise(db, operation="update user", on_integrity_error=conflict)
    db.refresh(account)

    logger.info("admin.update_user user=%s role=%s", account.id, account.role)
    return account


def delete_account_use_case(*, db: Session, account_id: str) -> None:
    """Remove the account row; history keeps the operator name it was written with."""
    account = _get_account_or_404(db=db, account_id=account_id)
    db.delete(account)
    commit_or_raise(db, operation="delete user")
    logger.info("admin.delete_user user=%s", account_id)


def change_password_use_case(*, db: Session, account_id: str, new_password: str) -> None:
    account = _get_account_or_404(db=db, account_id=account_id)
    validate_password_policy(new_password)

    account.password_hash = hash_password(new_password)
    commit_or_raise(db, operation="update user password")
    logger.info("admin.change_password user=%s", account_id)
