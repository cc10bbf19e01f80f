"""
Admin management of client accounts.
"""
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from grc.core.errors import BadRequest, Conflict, NotFound, ServerError
from grc.core.logging import audit_logger, get_logger
from grc.core.policy import Actor, Capability, Role, ensure_capability, parse_role
from grc.db.models import User
from grc.services.auth_service import normalize_email

logger = get_logger(__name__)

ADMINS_ONLY = "Forbidden: Admins only"


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def list_clients(self, actor: Actor) -> List[User]:
        ensure_capability(actor, Capability.MANAGE_USERS, ADMINS_ONLY)
        return self.all_clients()

    def all_clients(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == Role.CLIENT.value)
            .order_by(desc(User.created_at), desc(User.id))
            .all()
        )

    def _get_client(self, client_id: int) -> User:
        client = self.db.get(User, client_id)
        if client is None or parse_role(client.role) is not Role.CLIENT:
            raise NotFound("Client not found")
        return client

    def update_client(
        self,
        actor: Actor,
        client_id: int,
        email: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        ensure_capability(actor, Capability.MANAGE_USERS, ADMINS_ONLY)
        client = self._get_client(client_id)

        changes = {}
        if email is not None:
            email = normalize_email(email)
            if not email:
                raise BadRequest("email must not be empty")
            if email != client.email:
                taken = self.db.query(User).filter(User.email == email, User.id != client.id).first()
                if taken is not None:
                    raise Conflict("Email already in use")
                client.email = email
                changes["email"] = email
        if role is not None:
            parsed = parse_role(role)
            if parsed is None:
                raise BadRequest(f"Role must be one of: {', '.join(r.value for r in Role)}")
            client.role = parsed.value
            changes["role"] = parsed.value

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Email already in use")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to update client {client_id}")
            raise ServerError()
        self.db.refresh(client)

        audit_logger.log("update_client", user_id=actor.id, entity_type="user",
                         entity_id=client.id, details=changes)
        return client

    def delete_client(self, actor: Actor, client_id: int) -> int:
        """Remove a client account. Their evidence and third parties are kept."""
        ensure_capability(actor, Capability.MANAGE_USERS, ADMINS_ONLY)
        client = self._get_client(client_id)

        try:
            self.db.delete(client)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete client {client_id}")
            raise ServerError()

        audit_logger.log("delete_client", user_id=actor.id, entity_type="user", entity_id=client_id)
        return client_id
