"""
Authentication API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from bloom.core.auth import (SESSION_COOKIE, extract_token,
                             get_current_user_required, security)
from bloom.core.config import get_settings
from bloom.core.database import get_db
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import User
from bloom.services.auth_service import AuthService
from bloom.services.email_sender import EmailSender, get_email_sender
from bloom.services.email_templates import welcome

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
users_router = APIRouter(prefix="/api/users", tags=["users"])

WELCOME_FROM = "welcome@thrivemidlife.com"


# Request/Response models
class RegisterRequest(BaseModel):
    """User registration request"""
    username: str = Field(..., min_length=3, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseModel):
    """User login request"""
    username: str  # Can be username or email
    password: str


class UserResponse(BaseModel):
    """User response model"""
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    is_active: bool
    has_coaching_access: bool
    created_at: str
    last_login: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Login response model"""
    token: str
    user: UserResponse
    expires_at: str


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        is_active=user.is_active,
        has_coaching_access=user.has_coaching_access,
        created_at=user.created_at.isoformat(),
        last_login=user.last_login.isoformat() if user.last_login else None,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    """Register a new user and send the welcome email"""
    try:
        user = AuthService(db).register_user(
            username=request.username,
            email=request.email,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error registering user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

    template = welcome(user.first_name)
    sent = await sender.send(
        to=user.email,
        from_=WELCOME_FROM,
        subject=template["subject"],
        text=template["text"],
        html=template["html"],
    )
    if not sent:
        logger.warning("Failed to send welcome email", extra={"user_id": user.id})

    return to_user_response(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Login and create a session"""
    try:
        auth_service = AuthService(db)
        user = auth_service.authenticate(request.username, request.password)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password"
            )

        session = auth_service.create_session(user.id)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=session.token,
            httponly=True,
            secure=get_settings().app_env == "production",
            samesite="lax",
            max_age=auth_service.session_duration_hours * 60 * 60,
        )

        return LoginResponse(
            token=session.token,
            user=to_user_response(user),
            expires_at=session.expires_at.isoformat()
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error logging in: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    """Logout and invalidate session"""
    token = extract_token(request, credentials)
    try:
        if token:
            AuthService(db).logout(token)
    except Exception as e:
        logger.error(f"Error logging out: {e}", exc_info=True)
    # Clear the cookie even if the session could not be deleted
    response.delete_cookie(key=SESSION_COOKIE)
    return None


@router.get("/user", response_model=UserResponse)
async def get_auth_user(user: User = Depends(get_current_user_required)):
    """Current user information"""
    return to_user_response(user)


@users_router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user_required)):
    """Current user profile"""
    return to_user_response(user)
