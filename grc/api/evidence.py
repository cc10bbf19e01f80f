"""
Evidence API - file upload and per-owner evidence management.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status

from grc.api.deps import (
    CamelModel, Pagination, UserSummary, file_url, get_evidence_service, user_summary,
)
from grc.core.config import Settings, get_settings
from grc.core.policy import Actor
from grc.core.rbac import get_current_actor
from grc.db.models import Evidence
from grc.services.evidence_service import EvidenceService

router = APIRouter(prefix="/evidence", tags=["Evidence"])


# ============= SCHEMAS =============

class EvidenceOut(CamelModel):
    id: int
    title: str
    category: str
    filename: str
    size: Optional[int]
    owner_id: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    file_url: str
    owner: Optional[UserSummary] = None


class EvidenceUploadResponse(CamelModel):
    message: str
    count: int
    files: List[EvidenceOut]


class EvidenceListResponse(CamelModel):
    page: int
    total_pages: int
    total: int
    count: int
    evidences: List[EvidenceOut]


class EvidenceUpdate(CamelModel):
    title: Optional[str] = None
    category: Optional[str] = None


class EvidenceUpdateResponse(CamelModel):
    message: str
    evidence: EvidenceOut


class EvidenceDeleteResponse(CamelModel):
    message: str
    deleted_id: int


def evidence_out(
    evidence: Evidence,
    request: Request,
    settings: Settings,
    include_owner: bool = False,
) -> EvidenceOut:
    return EvidenceOut(
        id=evidence.id,
        title=evidence.title,
        category=evidence.category,
        filename=evidence.filename,
        size=evidence.size,
        owner_id=evidence.owner_id,
        created_at=evidence.created_at,
        updated_at=evidence.updated_at,
        file_url=file_url(request, settings, evidence.filename),
        owner=user_summary(evidence.owner) if include_owner else None,
    )


# ============= ENDPOINTS =============

@router.post("/upload", response_model=EvidenceUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_evidence(
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    actor: Actor = Depends(get_current_actor),
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
):
    """
    Upload up to MAX_UPLOAD_FILES files sharing one title and category.

    One evidence record is created per file; the records are committed
    together or not at all.
    """
    records = await service.upload(actor, files or [], title, category)
    return EvidenceUploadResponse(
        message="Evidence uploaded successfully",
        count=len(records),
        files=[evidence_out(r, request, settings) for r in records],
    )


@router.get("", response_model=EvidenceListResponse)
async def list_evidence(
    request: Request,
    category: Optional[str] = Query(None, description="Filter by category"),
    pagination: Pagination = Depends(),
    actor: Actor = Depends(get_current_actor),
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
):
    """List the caller's own evidence, newest first. Admins use the profile view."""
    result = service.list_own(actor, pagination.page, pagination.limit, category)
    return EvidenceListResponse(
        page=result.page,
        total_pages=result.total_pages,
        total=result.total,
        count=len(result.items),
        evidences=[evidence_out(e, request, settings) for e in result.items],
    )


@router.put("/{evidence_id}", response_model=EvidenceUpdateResponse)
async def update_evidence(
    evidence_id: int,
    update_data: EvidenceUpdate,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
):
    evidence = service.update(actor, evidence_id, update_data.title, update_data.category)
    return EvidenceUpdateResponse(
        message="Evidence updated successfully",
        evidence=evidence_out(evidence, request, settings),
    )


@router.delete("/{evidence_id}", response_model=EvidenceDeleteResponse)
async def delete_evidence(
    evidence_id: int,
    actor: Actor = Depends(get_current_actor),
    service: EvidenceService = Depends(get_evidence_service),
):
    deleted_id = await service.delete(actor, evidence_id)
    return EvidenceDeleteResponse(message="Evidence deleted successfully", deleted_id=deleted_id)
