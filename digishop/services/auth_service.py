# digishop/services/auth_service.py
import logging
import re
from typing import Optional
from uuid import UUID
from werkzeug.security import check_password_hash, generate_password_hash
from ..errors import AuthenticationError, ValidationError
from ..models.profile import Profile
from .session import Session

MIN_PASSWORD_LENGTH = 6
PASSWORD_HASH_METHOD = "scrypt"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

def hash_password(password: str, method: str = PASSWORD_HASH_METHOD) -> str:
    """Salted hash in werkzeug's 'method$salt$hash' format"""
    return generate_password_hash(password, method=method)

def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash; a corrupt hash never matches"""
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        return False

class AuthService:
    """Email and password identity backed by the auth_users table"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def sign_up(self, email: str, password: str, full_name: str) -> Session:
        """Register a new identity and its profile"""
        email = email.strip().lower()
        full_name = full_name.strip()
        if not EMAIL_RE.match(email):
            raise ValidationError("Please enter a valid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if not full_name:
            raise ValidationError("Full name is required")

        async with self.db.transaction() as tx:
            user_id = await tx.fetchval("""
                INSERT INTO auth_users (email, password_hash)
                VALUES ($1, $2)
                RETURNING id
            """, email, hash_password(password))

            profile = await tx.fetchrow("""
                INSERT INTO profiles (id, email, full_name)
                VALUES ($1, $2, $3)
                RETURNING *
            """, user_id, email, full_name)

        self.logger.info(f"Registered user {user_id}")
        return Session(user_id=user_id, email=email, profile=Profile(**profile))

    async def sign_in(self, email: str, password: str) -> Session:
        """Verify credentials and open a session"""
        email = email.strip().lower()
        user = await self.db.fetchrow("""
            SELECT id, email, password_hash
            FROM auth_users
            WHERE email = $1
        """, email)

        if not user or not verify_password(password, user['password_hash']):
            raise AuthenticationError("Invalid login credentials")

        profile = await self.get_profile(user['id'])
        self.logger.info(f"User {user['id']} signed in")
        return Session(user_id=user['id'], email=user['email'], profile=profile)

    async def get_profile(self, user_id: UUID) -> Optional[Profile]:
        """Load the profile of an identity"""
        profile = await self.db.fetchrow("""
            SELECT * FROM profiles WHERE id = $1
        """, user_id)
        return Profile(**profile) if profile else None
