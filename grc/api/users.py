"""
User routes: authentication, profile, and admin management of clients.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import EmailStr, Field

from grc.api.deps import (
    CamelModel, get_auth_service, get_profile_service, get_user_service,
)
from grc.api.evidence import EvidenceOut, evidence_out
from grc.api.thirdparties import ThirdPartyOut, third_party_out
from grc.core.config import Settings, get_settings
from grc.core.policy import Actor, Role
from grc.core.rbac import get_current_user, require_user_admin
from grc.db.models import User
from grc.services.auth_service import AuthService
from grc.services.profile_service import ProfileService
from grc.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# ============= SCHEMAS =============

class RegisterRequest(CamelModel):
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72)
    role: str = Role.CLIENT.value


class RegisterResponse(CamelModel):
    message: str
    id: int


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class TokenResponse(CamelModel):
    token: str
    role: str


class MessageResponse(CamelModel):
    message: str


class UserOut(CamelModel):
    id: int
    email: str
    role: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ProfileStats(CamelModel):
    evidence_count: int
    third_party_count: int
    client_count: int


class ProfileResponse(CamelModel):
    user: UserOut
    stats: ProfileStats
    evidence: List[EvidenceOut]
    third_parties: List[ThirdPartyOut]
    users: List[UserOut]


class ClientListResponse(CamelModel):
    clients: List[UserOut]


class ClientUpdate(CamelModel):
    email: Optional[EmailStr] = None
    role: Optional[str] = None


class ClientUpdateResponse(CamelModel):
    message: str
    client: UserOut


class ClientDeleteResponse(CamelModel):
    message: str
    deleted_id: int


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


# ============= AUTH ROUTES =============

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.register(register_data.email, register_data.password, register_data.role)
    return RegisterResponse(message="User registered", id=user.id)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Authenticate and return a bearer token valid for ACCESS_TOKEN_EXPIRE_MINUTES."""
    token, role = auth.login(login_data.email, login_data.password)
    return TokenResponse(token=token, role=role)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Stateless logout: the client discards its token."""
    auth.logout(user)
    return MessageResponse(message="Logout successful")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    request: Request,
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
    settings: Settings = Depends(get_settings),
):
    profile = profiles.get_profile(user)
    include_people = Actor.from_user(user).is_admin
    return ProfileResponse(
        user=user_out(profile.user),
        stats=ProfileStats(**profile.stats),
        evidence=[evidence_out(e, request, settings, include_owner=include_people) for e in profile.evidence],
        third_parties=[third_party_out(t, include_creator=include_people) for t in profile.third_parties],
        users=[user_out(u) for u in profile.users],
    )


# ============= ADMIN ROUTES =============

@router.get("", response_model=ClientListResponse)
async def list_clients(
    actor: Actor = Depends(require_user_admin),
    users: UserService = Depends(get_user_service),
):
    return ClientListResponse(clients=[user_out(u) for u in users.list_clients(actor)])


@router.put("/{user_id}", response_model=ClientUpdateResponse)
async def update_client(
    user_id: int,
    update_data: ClientUpdate,
    actor: Actor = Depends(require_user_admin),
    users: UserService = Depends(get_user_service),
):
    client = users.update_client(actor, user_id, email=update_data.email, role=update_data.role)
    return ClientUpdateResponse(message="Client updated successfully", client=user_out(client))


@router.delete("/{user_id}", response_model=ClientDeleteResponse)
async def delete_client(
    user_id: int,
    actor: Actor = Depends(require_user_admin),
    users: UserService = Depends(get_user_service),
):
    deleted_id = users.delete_client(actor, user_id)
    return ClientDeleteResponse(message="Client removed successfully", deleted_id=deleted_id)
