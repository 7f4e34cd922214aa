from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.services.auth_service import AuthService
from app.services.exceptions import ForbiddenError, ServiceError, UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


def to_http_exception(exc: ServiceError) -> HTTPException:
    """Translate a domain exception into the HTTP error returned to the caller."""
    headers = {"X-Error-Code": exc.code}
    if isinstance(exc, UnauthorizedError):
        headers["WWW-Authenticate"] = "Bearer"
    return HTTPException(status_code=exc.status_code, detail=exc.message, headers=headers)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user, or answer 401."""
    if credentials is None:
        raise to_http_exception(UnauthorizedError("Not authenticated"))
    try:
        return AuthService(db).resolve_token(credentials.credentials)
    except UnauthorizedError as e:
        raise to_http_exception(e)


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only admins through, otherwise answer 403."""
    if user.role != UserRole.ADMIN:
        raise to_http_exception(ForbiddenError("Admin access required"))
    return user
