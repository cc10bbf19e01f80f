"""
Registration, login and token resolution.
"""
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from grc.core.config import Settings
from grc.core.errors import BadRequest, Conflict, InvalidCredentials, ServerError, Unauthenticated
from grc.core.logging import audit_logger, get_logger
from grc.core.policy import Role, parse_role
from grc.core.security import (
    create_access_token, decode_token, dummy_verify, get_password_hash, verify_password,
)
from grc.db.models import User

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()

    def register(self, email: str, password: str, role: str = Role.CLIENT.value) -> User:
        """Create a user; fails with Conflict when the email is taken."""
        parsed_role = parse_role(role or Role.CLIENT.value)
        if parsed_role is None:
            raise BadRequest(f"Role must be one of: {', '.join(r.value for r in Role)}")

        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise Conflict("User already exists")

        user = User(
            email=email,
            hashed_password=get_password_hash(password, self.settings),
            role=parsed_role.value,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise Conflict("User already exists")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to persist new user")
            raise ServerError()
        self.db.refresh(user)

        audit_logger.log("register", user_id=user.id, entity_type="user", entity_id=user.id,
                         details={"email": user.email, "role": user.role})
        return user

    def login(self, email: str, password: str) -> Tuple[str, str]:
        """Return (token, role). Unknown email and wrong password look identical."""
        user = self.find_by_email(email)
        if user is None:
            dummy_verify(self.settings)
            raise InvalidCredentials()
        if not verify_password(password, user.hashed_password, self.settings):
            raise InvalidCredentials()

        token = create_access_token({"sub": str(user.id), "role": user.role}, self.settings)
        audit_logger.log("login", user_id=user.id, entity_type="user", entity_id=user.id)
        return token, user.role

    def resolve(self, token: Optional[str]) -> User:
        """
        Turn a bearer token into the current user.

        The user is re-read on every call so role and email changes apply
        immediately, and a deleted user's tokens stop working.
        """
        if not token:
            raise Unauthenticated("No token provided")

        payload = decode_token(token, self.settings)
        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise Unauthenticated("Invalid token payload")

        user = self.db.get(User, user_id)
        if user is None:
            raise Unauthenticated("User not found")
        return user

    def logout(self, user: User) -> None:
        # Tokens are stateless; they stay valid until they expire.
        audit_logger.log("logout", user_id=user.id, entity_type="user", entity_id=user.id)
