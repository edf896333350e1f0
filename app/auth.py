import logging

from passlib.context import CryptContext

from app.domain.user import User
from app.infrastructure.api_client import SubscriptionGateway

logger = logging.getLogger(__name__)

# pbkdf2_sha256: no native deps
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


class RegistrationError(ValueError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def verify_password(password: str, password_hash: str) -> bool:
    # Records created by older clients store the password as plain text
    if not pwd_context.identify(password_hash):
        return bool(password_hash) and password == password_hash
    return pwd_context.verify(password, password_hash)


class AuthService:
    """
    Login/register against the remote /users resource.

    Only the outcome is exposed; session handling lives in the web layer.
    """

    def __init__(self, gateway: SubscriptionGateway):
        self.gateway = gateway

    def login(self, email: str, password: str) -> User | None:
        """
        Check credentials. Returns None on unknown email or wrong password.

        Emails are stored lowercase, so the lookup is an exact match on
        the normalized value (json-server filters are case-sensitive).
        """
        user = self.gateway.find_user_by_email(normalize_email(email))
        if user is None or not verify_password(password, user.password):
            logger.info("Failed login attempt for %s", email)
            return None
        return user

    def register(self, email: str, password: str, name: str) -> User | None:
        """
        Create a user. Returns None if the email is already taken.

        Raises:
            RegistrationError: invalid input
        """
        email = normalize_email(email)
        name = name.strip()
        if not name:
            raise RegistrationError("Name is required")
        if "@" not in email:
            raise RegistrationError("Invalid email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        if self.gateway.find_user_by_email(email) is not None:
            return None

        user = self.gateway.create_user(email=email, password=hash_password(password), name=name)
        logger.info("User registered: id=%s", user.id)
        return user
