"""
Authentication dependencies
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User, UserRole
from bloom.services.auth_service import AuthService

logger = LoggingConfig.get_logger(__name__)

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)

SESSION_COOKIE = "session_token"


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header wins over the session cookie"""
    if credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Get current user from request (from token or cookie)

    Returns:
        User object if authenticated, None otherwise
    """
    token = extract_token(request, credentials)
    if not token:
        return None
    return AuthService(db).validate_session(token)


async def get_current_user_required(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """
    Require authentication: return User or raise 401
    """
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(
    user: User = Depends(get_current_user_required),
) -> User:
    """Require an authenticated admin, raising 403 for everyone else"""
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. Required roles: {[UserRole.ADMIN.value]}"
        )
    return user
