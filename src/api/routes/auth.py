import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from src.adapters.sqlite.accounts import AccountExistsError, SQLiteAccountDirectory
from src.api.auth_utils import ACCESS_TOKEN_EXPIRE_MINUTES, create_caller_token
from src.api.deps import get_accounts, get_caller
from src.api.schemas import RegisterRequest
from src.domain.entities import Caller

logger = logging.getLogger(__name__)

router = APIRouter()


class Token(BaseModel):
    access_token: str
    token_type: str


class LoginRequest(BaseModel):
    email: str
    password: str


def _issue_token(response: Response, uid: str, email: str) -> Token:
    access_token = create_caller_token(uid, email)

    # Set HttpOnly Cookie
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        expires=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )
    return Token(access_token=access_token, token_type="bearer")


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    response: Response,
    accounts: SQLiteAccountDirectory = Depends(get_accounts),
) -> Token:
    """Create an account and sign it in."""
    if not req.email.strip() or not req.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_argument", "message": "email and password are required."},
        )
    try:
        account = accounts.create_account(req.email, req.password)
    except AccountExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_argument", "message": str(e)},
        ) from e

    logger.info("Registered account %s", account.uid)
    return _issue_token(response, account.uid, account.email)


@router.post("/login", response_model=Token)
def login(
    req: LoginRequest,
    response: Response,
    accounts: SQLiteAccountDirectory = Depends(get_accounts),
) -> Token:
    """Authenticate account and return access token."""
    account = accounts.authenticate(req.email, req.password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "unauthenticated", "message": "Incorrect email or password"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _issue_token(response, account.uid, account.email)


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    """Log out by clearing cookie."""
    response.delete_cookie(key="access_token")
    return {"status": "success"}


@router.get("/me")
def read_me(caller: Caller | None = Depends(get_caller)) -> dict[str, str]:
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "unauthenticated", "message": "Must be signed in."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"uid": caller.uid, "email": caller.email}
