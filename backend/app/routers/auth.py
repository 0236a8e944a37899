"""Auth endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..auth import SessionClaims, TokenService, get_token_service
from ..database import get_db
from ..schemas import (
    AccountResponse,
    AuthResponse,
    CurrentAccountResponse,
    LoginRequest,
    RegisterRequest,
)
from ..security import get_current_identity
from ..use_cases.accounts import get_account_use_case, login_use_case, register_account_use_case

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_no_store(response: Response) -> None:
    # Reduce the chance of caching tokens.
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Register a new engineer account and return a session token."""
    _set_no_store(response)
    account, token = register_account_use_case(
        db=db,
        tokens=tokens,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return AuthResponse(user=AccountResponse.model_validate(account), token=token)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Exchange email and password for a session token."""
    _set_no_store(response)
    account, token = login_use_case(
        db=db,
        tokens=tokens,
        email=payload.email,
        password=payload.password,
    )
    return AuthResponse(user=AccountResponse.model_validate(account), token=token)


@router.get("/me", response_model=CurrentAccountResponse)
def get_me(
    identity: SessionClaims = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Get the account behind the current token."""
    account = get_account_use_case(db=db, account_id=identity.subject)
    return CurrentAccountResponse(user=AccountResponse.model_validate(account))
