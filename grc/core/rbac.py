"""
Request authentication and role gates as FastAPI dependencies.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from grc.core.config import Settings, get_settings
from grc.core.policy import Actor, Capability, ensure_capability
from grc.db.models import User
from grc.db.session import get_db
from grc.services.auth_service import AuthService

# auto_error=False so a missing header yields our 401 body instead of FastAPI's
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    token = credentials.credentials if credentials else None
    return AuthService(db, settings).resolve(token)


async def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


class CapabilityChecker:
    """Dependency that rejects actors lacking a capability before the handler runs."""

    def __init__(self, capability: Capability, message: str):
        self.capability = capability
        self.message = message

    async def __call__(self, actor: Actor = Depends(get_current_actor)) -> Actor:
        ensure_capability(actor, self.capability, self.message)
        return actor


require_user_admin = CapabilityChecker(Capability.MANAGE_USERS, "Forbidden: Admins only")
require_ingest = CapabilityChecker(Capability.INGEST_THIRD_PARTIES, "Forbidden: Admins only")
