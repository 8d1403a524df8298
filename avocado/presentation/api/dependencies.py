from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.dependencies import get_user_service
from ...domain.errors import AuthError, ForbiddenError
from ...domain.models import User
from ...services.user_service import UserService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Resolve the acting user from a verified bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Unauthorized")
    return user_service.get_user_for_token(credentials.credentials)


def ensure_acting_user(user: User, claimed_id: Optional[int], field: str) -> None:
    """Reject a client-supplied id that disagrees with the token identity."""
    if claimed_id is not None and claimed_id != user.id:
        raise ForbiddenError(f"{field} does not match the authenticated user")
