"""
Authorization policy.

Every allow/deny decision in the service is made here. The functions are pure:
they look at the actor and the record owner, never at the database.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from grc.core.errors import Forbidden


class Role(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Capability(str, Enum):
    LIST_OWN_EVIDENCE = "list_own_evidence"
    LIST_THIRD_PARTIES = "list_third_parties"
    INGEST_THIRD_PARTIES = "ingest_third_parties"
    MANAGE_USERS = "manage_users"
    VIEW_ALL_RECORDS = "view_all_records"


ROLE_CAPABILITIES = {
    Role.CLIENT: frozenset({
        Capability.LIST_OWN_EVIDENCE,
    }),
    Role.ADMIN: frozenset({
        Capability.LIST_THIRD_PARTIES,
        Capability.INGEST_THIRD_PARTIES,
        Capability.MANAGE_USERS,
        Capability.VIEW_ALL_RECORDS,
    }),
}

OWNER_ACTIONS = frozenset({Action.READ, Action.UPDATE, Action.DELETE})


def parse_role(value) -> Optional[Role]:
    """Map a stored role onto the closed set; anything unknown becomes None."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation."""

    id: int
    role: Optional[Role]

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, role=parse_role(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def can_access(actor: Actor, owner_id: Optional[int], action: Action) -> bool:
    if actor.role is Role.ADMIN:
        return True
    if actor.role is None:
        return False
    return action in OWNER_ACTIONS and owner_id is not None and actor.id == owner_id


def has_capability(actor: Actor, capability: Capability) -> bool:
    if actor.role is None:
        return False
    return capability in ROLE_CAPABILITIES.get(actor.role, frozenset())


def ensure_access(actor: Actor, owner_id: Optional[int], action: Action, message: str = None) -> None:
    if not can_access(actor, owner_id, action):
        raise Forbidden(message or f"Forbidden: Not allowed to {action.value} this record")


def ensure_capability(actor: Actor, capability: Capability, message: str = None) -> None:
    if not has_capability(actor, capability):
        raise Forbidden(message or "Forbidden: Insufficient permissions")
