"""Sign-up, sign-in, token refresh and auth dependencies (get_auth_service, get_current_user_id)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import (
    NICKNAME_MAX_LEN,
    NICKNAME_MIN_LEN,
    USER_ID_MAX_LEN,
    USER_ID_MIN_LEN,
    PasswordHasher,
    TokenError,
    TokenIssuer,
    TokenKind,
)
from app.repositories.users import SqlAlchemyUserRepository
from app.schemas.auth import (
    MessageResponse,
    RefreshRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    TokenPair,
    UserMessageResponse,
)
from app.services.auth import (
    AuthService,
    AuthServiceError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)

router = APIRouter()
security = HTTPBearer(auto_error=False)

BEARER_HEADERS = {"WWW-Authenticate": "Bearer"}


def get_token_issuer(settings: Annotated[Settings, Depends(get_settings)]) -> TokenIssuer:
    return TokenIssuer(settings)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    """Dependency: AuthService bound to the request's DB session."""
    return AuthService(
        repository=SqlAlchemyUserRepository(db),
        token_issuer=token_issuer,
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
    )


def to_http_exception(error: AuthServiceError) -> HTTPException:
    """Map a service error to the HTTP status clients see."""
    if isinstance(error, UnauthorizedError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error.message,
            headers=BEARER_HEADERS,
        )
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> str:
    """Dependency: require a valid Bearer access token and return its subject id. Raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers=BEARER_HEADERS,
        )
    try:
        return token_issuer.verify(credentials.credentials, TokenKind.ACCESS)
    except TokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers=BEARER_HEADERS,
        )


@router.post("/signup", response_model=UserMessageResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    body: SignUpRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserMessageResponse:
    """Create an account. 409 if the id or nickname is already taken."""
    try:
        return service.sign_up(body)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.post("/signin", response_model=SignInResponse)
def sign_in(
    body: SignInRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> SignInResponse:
    """
    Authenticate with id and password; returns access and refresh tokens plus the user.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    try:
        return service.sign_in(body.id, body.password)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.post("/refresh", response_model=TokenPair)
def refresh(
    body: RefreshRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenPair:
    """Exchange the latest refresh token for a new token pair. The old refresh token stops working."""
    try:
        return service.refresh(body.refresh_token)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.post("/signout", response_model=MessageResponse)
def sign_out(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    try:
        return service.sign_out(user_id)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.get("/check-id", response_model=MessageResponse)
def check_id(
    service: Annotated[AuthService, Depends(get_auth_service)],
    id: Annotated[str, Query(min_length=USER_ID_MIN_LEN, max_length=USER_ID_MAX_LEN)],
) -> MessageResponse:
    """409 if the id is taken."""
    try:
        return service.check_duplicate_id(id)
    except AuthServiceError as e:
        raise to_http_exception(e) from e


@router.get("/check-nickname", response_model=MessageResponse)
def check_nickname(
    service: Annotated[AuthService, Depends(get_auth_service)],
    nickname: Annotated[str, Query(min_length=NICKNAME_MIN_LEN, max_length=NICKNAME_MAX_LEN)],
) -> MessageResponse:
    """409 if the nickname is taken."""
    try:
        return service.check_duplicate_nickname(nickname)
    except AuthServiceError as e:
        raise to_http_exception(e) from e
