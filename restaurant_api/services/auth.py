"""
Authentication Service

Registers customers, verifies credentials and issues / validates the
bearer tokens that carry identity and role between requests.

Failure mapping expected by the API layer:
    - Conflict:     username or email already taken
    - Unauthorized: bad credentials, missing or malformed token
    - Forbidden:    bad signature, expired token, or insufficient role

Tokens are not stored anywhere. Logging out means the client discards its
token; there is no revocation list.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import jwt
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from starlette.concurrency import run_in_threadpool

from restaurant_api.core.config import Settings
from restaurant_api.core.errors import Conflict, Forbidden, Unauthorized
from restaurant_api.core.security import decode_token, encode_token, hash_password, verify_password
from restaurant_api.database import Database
from restaurant_api.models import User, UserRole

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from a bearer token."""
    id: int
    username: str
    email: str
    role: UserRole

    def can(self, role: UserRole) -> bool:
        """Capability check. Admin holds every role."""
        return self.role == UserRole.ADMIN or self.role == role


def require_role(identity: Identity, role: UserRole) -> None:
    """Raise Forbidden unless ``identity`` holds ``role``."""
    if not identity.can(role):
        raise Forbidden(f"{role.value.capitalize()} access required")


class AuthService:
    """Account registration, login and token handling."""

    def __init__(self, database: Database, settings: Settings):
        self.db = database
        self.settings = settings
        # Compared against on unknown usernames so both failure paths cost one bcrypt check
        self._dummy_hash = hash_password("not-a-real-password", rounds=settings.bcrypt_rounds)

    # =========================================================================
    # TOKENS
    # =========================================================================

    def issue_token(self, user: User) -> str:
        """Sign a token for ``user``."""
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "role": UserRole(user.role).value,
        }
        return encode_token(
            claims,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm,
            expires_in=timedelta(days=self.settings.jwt_expire_days),
        )

    def verify_token(self, token: Optional[str]) -> Identity:
        """
        Decode a bearer token into an Identity.

        Args:
            token: Raw token (without the "Bearer " prefix)

        Returns:
            Identity: The caller

        Raises:
            Unauthorized: No token, or not a JWT at all
            Forbidden: Bad signature, expired, or missing claims
        """
        if not token:
            raise Unauthorized("Access denied")

        try:
            claims = decode_token(
                token,
                self.settings.jwt_secret_key,
                algorithm=self.settings.jwt_algorithm,
            )
        except jwt.ExpiredSignatureError:
            raise Forbidden("Token expired")
        except jwt.InvalidSignatureError:
            raise Forbidden("Invalid token")
        except jwt.DecodeError:
            raise Unauthorized("Malformed token")
        except jwt.InvalidTokenError:
            raise Forbidden("Invalid token")

        try:
            return Identity(
                id=int(claims["sub"]),
                username=claims["username"],
                email=claims["email"],
                role=UserRole(claims["role"]),
            )
        except (KeyError, ValueError, TypeError):
            raise Forbidden("Invalid token")

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> str:
        """
        Create a customer account and return a token for it.

        Raises:
            Conflict: username or email already exists
        """
        user = await self.create_user(
            username,
            email,
            password,
            full_name=full_name,
            phone=phone,
            address=address,
        )
        return self.issue_token(user)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.CUSTOMER,
        **profile: Optional[str],
    ) -> User:
        """
        Insert an account. Registration always passes the customer role;
        scripts/init_db.py uses this directly to seed the first admin.

        Raises:
            Conflict: username or email already exists
        """
        email = email.strip().lower()
        password_hash = await run_in_threadpool(
            hash_password, password, self.settings.bcrypt_rounds
        )

        async with self.db.session() as session:
            existing = await session.execute(
                select(User.id).where(or_(User.email == email, User.username == username))
            )
            if existing.first() is not None:
                raise Conflict("Username or email already exists")

            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                **profile,
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race with a concurrent registration
                await session.rollback()
                raise Conflict("Username or email already exists")

        logger.info(f"Registered {role.value} #{user.id} ({user.username})")
        return user

    async def login(self, username_or_email: str, password: str) -> tuple[str, User]:
        """
        Verify credentials.

        Returns:
            (token, user)

        Raises:
            Unauthorized: unknown account or wrong password (same message)
        """
        login = username_or_email.strip()

        async with self.db.session() as session:
            result = await session.execute(
                select(User)
                .where(or_(User.username == login, User.email == login.lower()))
                .order_by(User.id)
                .limit(1)
            )
            user = result.scalar_one_or_none()

        stored_hash = user.password_hash if user is not None else self._dummy_hash
        valid = await run_in_threadpool(verify_password, password, stored_hash)

        if user is None or not valid:
            logger.warning(f"Rejected login for '{login}'")
            raise Unauthorized(INVALID_CREDENTIALS)

        logger.info(f"User #{user.id} logged in")
        return self.issue_token(user), user

