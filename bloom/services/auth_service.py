"""
Authentication service for user management and sessions
"""
import secrets
from datetime import timedelta
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from bloom.core.clock import Clock
from bloom.core.config import get_settings
from bloom.core.logging_config import LoggingConfig
from bloom.models.user import Session as UserSession
from bloom.models.user import User, UserRole

logger = LoggingConfig.get_logger(__name__)


class AuthService:
    """Service for user authentication and session management"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or Clock()
        self.session_duration_hours = get_settings().session_duration_hours

    def register_user(
        self,
        username: str,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: str = UserRole.USER.value
    ) -> User:
        """
        Register a new user

        Raises:
            ValueError: If username or email already exists
        """
        if self.db.query(User).filter(User.username == username).first():
            raise ValueError(f"Username '{username}' already exists")

        if self.db.query(User).filter(User.email == email).first():
            raise ValueError(f"Email '{email}' already exists")

        user = User(
            username=username,
            email=email,
            password_hash=self._hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=True,
        )

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Registered new user: {username} (role: {role})")
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """
        Authenticate a user by username or email and password

        Returns:
            User object if authentication successful, None otherwise
        """
        user = self.db.query(User).filter(
            (User.username == username) | (User.email == username)
        ).first()

        if not user:
            logger.warning(f"Authentication failed: user '{username}' not found")
            return None

        if not user.is_active:
            logger.warning(f"Authentication failed: user '{username}' is inactive")
            return None

        if not self._verify_password(password, user.password_hash):
            logger.warning(f"Authentication failed: invalid password for user '{username}'")
            return None

        user.last_login = self.clock.now()
        self.db.commit()

        logger.info(f"User '{username}' authenticated successfully")
        return user

    def create_session(self, user_id: int, duration_hours: Optional[int] = None) -> UserSession:
        """Create a new session for a user"""
        token = secrets.token_urlsafe(32)
        duration = duration_hours or self.session_duration_hours
        now = self.clock.now()

        session = UserSession(
            user_id=user_id,
            token=token,
            expires_at=now + timedelta(hours=duration),
            created_at=now,
            last_activity=now,
        )

        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"Created session for user {user_id}")
        return session

    def validate_session(self, token: str) -> Optional[User]:
        """
        Validate a session token and return the associated user

        Expired sessions are deleted on sight.
        """
        session = self.db.query(UserSession).filter(
            UserSession.token == token
        ).first()

        if not session:
            return None

        now = self.clock.now()
        if session.expires_at < now:
            logger.info(f"Session {session.id} expired")
            self.db.delete(session)
            self.db.commit()
            return None

        session.last_activity = now
        self.db.commit()

        user = self.db.query(User).filter(User.id == session.user_id).first()
        if not user or not user.is_active:
            return None

        return user

    def logout(self, token: str) -> bool:
        """
        Logout by invalidating a session

        Returns:
            True if session was found and deleted, False otherwise
        """
        session = self.db.query(UserSession).filter(
            UserSession.token == token
        ).first()

        if session:
            session_id = session.id
            self.db.delete(session)
            self.db.commit()
            logger.info(f"Session {session_id} invalidated")
            return True

        return False

    def cleanup_expired_sessions(self) -> int:
        """Remove all expired sessions, returning how many were deleted"""
        count = self.db.query(UserSession).filter(
            UserSession.expires_at < self.clock.now()
        ).delete(synchronize_session=False)
        self.db.commit()
        if count > 0:
            logger.info(f"Cleaned up {count} expired sessions")
        return count

    def grant_coaching_access(self, user_id: int) -> User:
        """Unlock the coaching programme after a successful payment"""
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ValueError(f"User {user_id} not found")
        user.has_coaching_access = True
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Coaching access granted to user {user_id}")
        return user

    def _hash_password(self, password: str) -> str:
        """Hash a password using bcrypt"""
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hashed.decode("utf-8")

    def _verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash"""
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
