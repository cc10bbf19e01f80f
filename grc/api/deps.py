"""
Shared API plumbing: service factories, camelCase schemas, file URLs.
"""
from typing import Optional

from fastapi import Depends, Query, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from grc.core.config import Settings, get_settings
from grc.db.models import User
from grc.db.session import get_db
from grc.services.auth_service import AuthService
from grc.services.blob_store import LocalBlobStore
from grc.services.evidence_service import EvidenceService
from grc.services.profile_service import ProfileService
from grc.services.third_party_service import ThirdPartyService
from grc.services.user_service import UserService


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserSummary(CamelModel):
    id: int
    email: str
    role: str


def user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, email=user.email, role=user.role)


# Keeps OFFSET well inside a 64-bit INTEGER
MAX_PAGE = 1_000_000


class Pagination:
    """`page` and `limit` query parameters bounded by the configured page size."""

    def __init__(
        self,
        page: int = Query(1, ge=1, le=MAX_PAGE),
        limit: Optional[int] = Query(None, ge=1),
        settings: Settings = Depends(get_settings),
    ):
        self.page = page
        self.limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


def file_url(request: Request, settings: Settings, filename: str) -> str:
    base = settings.PUBLIC_BASE_URL or str(request.base_url)
    return f"{base.rstrip('/')}{settings.UPLOADS_URL_PATH}/{filename}"


def get_blob_store(settings: Settings = Depends(get_settings)) -> LocalBlobStore:
    return LocalBlobStore(settings.UPLOAD_DIR, settings.MAX_UPLOAD_SIZE)


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_evidence_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    blob_store: LocalBlobStore = Depends(get_blob_store),
) -> EvidenceService:
    return EvidenceService(db, settings, blob_store)


def get_third_party_service(db: Session = Depends(get_db)) -> ThirdPartyService:
    return ThirdPartyService(db)


def get_profile_service(
    db: Session = Depends(get_db),
    evidence: EvidenceService = Depends(get_evidence_service),
    third_parties: ThirdPartyService = Depends(get_third_party_service),
) -> ProfileService:
    return ProfileService(db, evidence, third_parties)
