# sales_ops/auth.py
"""
Authentication and Session Management

Features:
- SHA256 + salt password hashing (dashboard_users table)
- E-mail login with format validation before any query
- Explicit UserSession object with load/clear lifecycle and timeout
"""

import hashlib
import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, MutableMapping, Optional, Tuple

import streamlit as st

from .config import config
from .db import execute_query, execute_update, get_db_engine

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

DEFAULT_ACCOUNT_NAME = "ORGANIZATION"
DEFAULT_ACCOUNT_NUMBER = "#SD1123"


class UserSession:
    """
    Per-browser user session backed by a mutable mapping.

    The app passes st.session_state; tests pass a plain dict.

    Usage:
        session = UserSession(st.session_state)
        if not session.is_valid():
            show_login_page()
    """

    KEYS = (
        'authenticated', 'user_id', 'user_email', 'user_fullname',
        'user_organization', 'user_account_number', 'last_login', 'login_time',
    )

    def __init__(self, store: MutableMapping, timeout: Optional[timedelta] = None):
        self.store = store
        self.timeout = timeout or timedelta(
            hours=config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)
        )

    # ==================== LIFECYCLE ====================

    def load(self, user_info: Dict[str, Any]):
        """Initialize session after successful authentication"""
        self.store['authenticated'] = True
        self.store['user_id'] = user_info['id']
        self.store['user_email'] = user_info['email']
        self.store['user_fullname'] = user_info.get('full_name')
        self.store['user_organization'] = user_info.get('organization')
        self.store['user_account_number'] = user_info.get('account_number')
        self.store['last_login'] = user_info.get('last_login')
        self.store['login_time'] = user_info.get('login_time') or datetime.now()

    def clear(self):
        """Remove every session key"""
        for key in self.KEYS:
            if key in self.store:
                del self.store[key]

    # ==================== STATE ====================

    @property
    def is_authenticated(self) -> bool:
        return bool(self.store.get('authenticated'))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        login_time = self.store.get('login_time')
        if not login_time:
            return False
        return (now or datetime.now()) - login_time > self.timeout

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Authenticated and not timed out. Expired sessions are cleared."""
        if not self.is_authenticated:
            return False

        if self.is_expired(now):
            logger.info(f"Session expired for user: {self.store.get('user_email')}")
            self.clear()
            return False

        return True

    # ==================== USER INFO ====================

    @property
    def user_id(self) -> Optional[Any]:
        return self.store.get('user_id')

    @property
    def email(self) -> str:
        return self.store.get('user_email') or ''

    @property
    def display_name(self) -> str:
        if self.store.get('user_fullname'):
            return self.store['user_fullname']
        if self.email:
            return self.email.split('@')[0]
        return 'User'

    @property
    def account_name(self) -> str:
        """Organization, else the upper-cased e-mail domain label."""
        if self.store.get('user_organization'):
            return self.store['user_organization']
        if '@' in self.email:
            label = self.email.split('@')[1].split('.')[0]
            if label:
                return label.upper()
        return DEFAULT_ACCOUNT_NAME

    @property
    def account_number(self) -> str:
        if self.store.get('user_account_number'):
            return self.store['user_account_number']
        if self.user_id is not None:
            return f"#SD{str(self.user_id)[:6]}"
        return DEFAULT_ACCOUNT_NUMBER

    @property
    def last_login_display(self) -> str:
        last_login = self.store.get('last_login')
        if not last_login:
            return "Just now"
        if isinstance(last_login, str):
            return last_login
        return last_login.strftime("%b %d, %Y, %I:%M %p")


class AuthManager:
    """Authentication manager for the dashboard"""

    def __init__(self, session: UserSession, engine=None):
        self.session = session
        self._engine = engine

    @property
    def engine(self):
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    # ==================== PASSWORD HASHING ====================

    def hash_password(self, password: str, salt: str = None) -> Tuple[str, str]:
        """
        Hash password with SHA256 + salt

        Returns:
            Tuple of (hash, salt)
        """
        if not salt:
            salt = secrets.token_hex(32)

        pwd_hash = hashlib.sha256((password + salt).encode()).hexdigest()
        return pwd_hash, salt

    def verify_password(self, password: str, stored_hash: str, salt: str) -> bool:
        pwd_hash, _ = self.hash_password(password, salt)
        return secrets.compare_digest(pwd_hash, stored_hash)

    # ==================== AUTHENTICATION ====================

    @staticmethod
    def validate_credentials(email: str, password: str) -> Optional[str]:
        """Return an error message, or None when the input is well-formed"""
        if not email or not password:
            return "Email and password are required"
        if not EMAIL_PATTERN.match(email.strip()):
            return "Invalid email format"
        return None

    def authenticate(self, email: str, password: str) -> Tuple[bool, Dict]:
        """
        Authenticate user against dashboard_users

        Returns:
            Tuple of (success: bool, user_info: dict or error: dict)
        """
        error = self.validate_credentials(email, password)
        if error:
            return False, {"error": error}

        email = email.strip()

        try:
            query = """
                SELECT
                    id,
                    email,
                    full_name,
                    organization,
                    account_number,
                    password_hash,
                    password_salt,
                    is_active,
                    last_login
                FROM dashboard_users
                WHERE LOWER(email) = LOWER(:email)
            """
            rows = execute_query(query, {'email': email}, engine=self.engine)

            if not rows:
                logger.warning(f"Login attempt for non-existent user: {email}")
                return False, {"error": "Invalid email or password"}

            user = rows[0]

            if not user['is_active']:
                logger.warning(f"Login attempt for inactive user: {email}")
                return False, {"error": "Account is inactive. Please contact administrator."}

            if not self.verify_password(password, user['password_hash'], user['password_salt']):
                logger.warning(f"Invalid password for user: {email}")
                return False, {"error": "Invalid email or password"}

            self._update_last_login(user['id'])

            logger.info(f"User {email} authenticated successfully")

            return True, {
                'id': user['id'],
                'email': user['email'],
                'full_name': user['full_name'],
                'organization': user['organization'],
                'account_number': user['account_number'],
                'last_login': user['last_login'],
                'login_time': datetime.now(),
            }

        except Exception as e:
            logger.error(f"Authentication error: {e}")
            return False, {"error": "Authentication failed. Please try again."}

    def _update_last_login(self, user_id):
        """Update user's last login timestamp"""
        try:
            execute_update(
                "UPDATE dashboard_users SET last_login = CURRENT_TIMESTAMP WHERE id = :user_id",
                {'user_id': user_id},
                engine=self.engine,
            )
        except Exception as e:
            logger.warning(f"Could not update last_login: {e}")

    # ==================== SESSION ====================

    def login(self, user_info: Dict):
        self.session.load(user_info)
        logger.info(f"User {user_info['email']} logged in successfully")

    def logout(self):
        email = self.session.email or 'Unknown'
        self.session.clear()
        logger.info(f"User {email} logged out")

    def check_session(self) -> bool:
        return self.session.is_valid()

    def require_auth(self) -> bool:
        """
        Require authentication to access a page
        Use at the beginning of each protected page
        """
        if not self.check_session():
            st.warning("⚠️ Please login to access this page")
            st.info("Go to the main page to login")
            st.stop()
            return False
        return True


__all__ = [
    'AuthManager',
    'UserSession',
]
