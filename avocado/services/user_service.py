"""Service for student registration, verification and authentication."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from email_validator import EmailNotValidError, validate_email

from avocado.domain.errors import AuthError, ConflictError, ForbiddenError, ValidationError
from avocado.domain.models.user import User
from avocado.domain.ports.persistence import UserRepository

logger = logging.getLogger(__name__)

AVATAR_COLORS = ("#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A", "#98D8C8")
ACADEMIC_DOMAIN_LABEL = "edu"
MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts this many bytes
MAX_PASSWORD_BYTES = 72
INVALID_CREDENTIALS = "Invalid credentials"


class UserService:
    """Service for managing student accounts and session tokens."""

    def __init__(
        self,
        user_repository: UserRepository,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        jwt_expiration_hours: int = 24,
        verification_expiration_hours: int = 24,
        bcrypt_rounds: int = 12,
    ):
        self.user_repository = user_repository
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.jwt_expiration_hours = jwt_expiration_hours
        self.verification_expiration_hours = verification_expiration_hours
        self.bcrypt_rounds = bcrypt_rounds
        # Checked against when the email is unknown so both login failures cost the same
        self._dummy_hash = self._hash_password(secrets.token_urlsafe(16))

    def register(
        self,
        name: str,
        personal_email: str,
        uni_email: str,
        password: str,
    ) -> tuple[User, str]:
        """
        Register a new, unverified student.

        Args:
            name: Display name
            personal_email: Login address
            uni_email: University address, must be on an academic domain
            password: Plain text password

        Returns:
            Tuple of (User, verification_token)

        Raises:
            ValidationError: On missing fields, malformed addresses or a short password
            ConflictError: If either email already exists
        """
        name = (name or "").strip()
        personal_email = (personal_email or "").strip().lower()
        uni_email = (uni_email or "").strip().lower()
        if not name or not personal_email or not uni_email or not password:
            raise ValidationError("Missing required fields")

        self._check_email_syntax(personal_email)
        domain = self._check_email_syntax(uni_email)
        if ACADEMIC_DOMAIN_LABEL not in domain.split(".")[1:]:
            raise ValidationError("University email must contain .edu domain")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        # Pre-check only; the UNIQUE constraints are authoritative
        if self.user_repository.email_taken(personal_email, uni_email):
            raise ConflictError("User with this email already exists")

        verification_token = self._new_verification_token()
        user = self.user_repository.create(
            name=name,
            personal_email=personal_email,
            uni_email=uni_email,
            password_hash=self._hash_password(password),
            avatar_color=secrets.choice(AVATAR_COLORS),
            verification_token=verification_token,
            verification_expires_at=self._verification_expiry(),
        )
        logger.info("Registered user %s", user.id)
        return user, verification_token

    def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate a student with email and password.

        Unknown email and wrong password fail with the same message.

        Raises:
            ValidationError: If email or password is empty
            AuthError: On bad credentials
            ForbiddenError: If the account is not verified yet
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Missing email or password")

        user = self.user_repository.get_by_login_email(email)
        if not user:
            self._check_password(password, self._dummy_hash)
            logger.info("Failed login attempt")
            raise AuthError(INVALID_CREDENTIALS)

        if not self._check_password(password, user.password_hash):
            logger.info("Failed login attempt for user %s", user.id)
            raise AuthError(INVALID_CREDENTIALS)

        if not user.is_verified:
            raise ForbiddenError("Please verify your email first")

        return user

    def verify_email(self, token: str) -> int:
        """
        Redeem a verification token.

        Returns:
            The id of the verified user

        Raises:
            ValidationError: If the token is unknown, expired or already used
        """
        token = (token or "").strip()
        if not token:
            raise ValidationError("Invalid verification token")

        user_id = self.user_repository.consume_verification_token(token)
        if user_id is None:
            raise ValidationError("Invalid verification token")

        logger.info("Verified user %s", user_id)
        return user_id

    def resend_verification(self, email: str) -> Optional[tuple[User, str]]:
        """
        Issue a fresh verification token, revoking the previous ones.

        Returns:
            (User, token) when an unverified account matches, None otherwise
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Missing email")

        user = self.user_repository.get_by_login_email(email)
        if not user or user.is_verified:
            return None

        verification_token = self._new_verification_token()
        self.user_repository.reissue_verification_token(
            user.id, verification_token, self._verification_expiry()
        )
        return user, verification_token

    def create_token(self, user: User) -> str:
        """
        Create a signed session token for user.

        Args:
            user: User entity

        Returns:
            JWT token string
        """
        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": str(user.id),
            "user_id": user.id,
            "email": user.personal_email,
            "iat": now,
            "exp": now + timedelta(hours=self.jwt_expiration_hours),
        }

        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def verify_token(self, token: str) -> Optional[dict]:
        """
        Verify and decode a session token.

        Returns:
            Decoded payload if valid, None otherwise
        """
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])
        except jwt.InvalidTokenError:
            return None

    def get_user_for_token(self, token: str) -> User:
        """Resolve the acting user from a bearer token or fail with AuthError."""
        payload = self.verify_token(token)
        if not payload or not isinstance(payload.get("user_id"), int):
            raise AuthError("Invalid or expired token")

        user = self.user_repository.get_by_id(payload["user_id"])
        if not user:
            raise AuthError("Invalid or expired token")
        if not user.is_verified:
            raise ForbiddenError("Please verify your email first")
        return user

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self.bcrypt_rounds)
        ).decode("utf-8")

    @staticmethod
    def _check_password(password: str, password_hash: str) -> bool:
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

    @staticmethod
    def _check_email_syntax(address: str) -> str:
        """Validate address syntax and return its lower-cased domain."""
        try:
            result = validate_email(address, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValidationError("Invalid email address") from exc
        return result.domain.lower()

    @staticmethod
    def _new_verification_token() -> str:
        return secrets.token_urlsafe(32)

    def _verification_expiry(self) -> datetime:
        return datetime.now(tz=timezone.utc) + timedelta(hours=self.verification_expiration_hours)
