"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from postbox.core.security import decode_access_token
from postbox.db.session import get_db
from postbox.models import User
from postbox.repositories import NoticeRepository, ThreadRepository, UserRepository
from postbox.services import (
    InvalidInput,
    MessageService,
    MessagingError,
    NotFound,
    PermissionDenied,
    StoreFailure,
    get_hook_registry,
)

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    try:
        user_id = decode_access_token(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_message_service(db: SessionDep) -> MessageService:
    """Build a message service bound to the request's database session."""
    return MessageService(
        threads=ThreadRepository(db),
        users=UserRepository(db),
        notices=NoticeRepository(db),
        hooks=get_hook_registry(),
    )


_STATUS_BY_ERROR: dict[type[MessagingError], int] = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    StoreFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(exc: MessagingError) -> HTTPException:
    """Translate a messaging error into the matching HTTP error."""
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=str(exc))


# Type aliases for injected dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
