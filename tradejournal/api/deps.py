"""Shared API dependencies."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from tradejournal.database import get_session
from tradejournal.models.user import User
from tradejournal.services.auth import read_token

bearer_scheme = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Journal owner named by the bearer token."""
    claims = read_token(credentials.credentials)
    if claims is None:
        raise _unauthorized("Invalid or expired token")
    user = session.get(User, claims["uid"])
    # A token outlives neither an email change nor deactivation
    if user is None or not user.is_active or user.email != claims["sub"]:
        raise _unauthorized("User not found or inactive")
    return user
