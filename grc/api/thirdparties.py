"""
Third-party API routes.
"""
import codecs
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from pydantic import Field

from grc.api.deps import CamelModel, Pagination, UserSummary, get_third_party_service, user_summary
from grc.core.errors import BadRequest
from grc.core.policy import Actor
from grc.core.rbac import get_current_actor, require_ingest
from grc.db.models import ThirdParty
from grc.services.third_party_service import ThirdPartyService

router = APIRouter(prefix="/thirdparties", tags=["Third Parties"])


# ============= SCHEMAS =============

class ThirdPartyOut(CamelModel):
    id: int
    name: str
    email: Optional[str]
    company: Optional[str]
    role: Optional[str]
    industry: Optional[str]
    risk_score: float
    created_by: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    creator: Optional[UserSummary] = None


class ThirdPartyUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    industry: Optional[str] = None
    risk_score: Optional[float] = Field(None, allow_inf_nan=False)


class IngestRowError(CamelModel):
    row_number: int
    row: Dict[str, Any]
    error: str


class IngestResponse(CamelModel):
    message: str
    success_count: int
    failure_count: int
    errors: List[IngestRowError]


class ThirdPartyListResponse(CamelModel):
    page: int
    total_pages: int
    total: int
    count: int
    third_parties: List[ThirdPartyOut]


class ThirdPartyResponse(CamelModel):
    third_party: ThirdPartyOut


class ThirdPartyUpdateResponse(CamelModel):
    message: str
    third_party: ThirdPartyOut


class ThirdPartyDeleteResponse(CamelModel):
    message: str
    deleted_id: int


def third_party_out(third_party: ThirdParty, include_creator: bool = False) -> ThirdPartyOut:
    return ThirdPartyOut(
        id=third_party.id,
        name=third_party.name,
        email=third_party.email,
        company=third_party.company,
        role=third_party.role,
        industry=third_party.industry,
        risk_score=third_party.risk_score or 0.0,
        created_by=third_party.created_by,
        created_at=third_party.created_at,
        updated_at=third_party.updated_at,
        creator=user_summary(third_party.creator) if include_creator else None,
    )


# ============= ROUTES =============

@router.post("/upload", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def bulk_upload_third_parties(
    file: Optional[UploadFile] = File(None),
    actor: Actor = Depends(require_ingest),
    service: ThirdPartyService = Depends(get_third_party_service),
):
    """
    Bulk import third parties from a CSV file (admin only).

    Columns (case-insensitive): name (required), email, company, role,
    industry, riskscore. Invalid rows are reported back and skipped.
    """
    if file is None:
        raise BadRequest("No file uploaded")

    file.file.seek(0)
    lines = codecs.iterdecode(file.file, "utf-8-sig")
    report = service.bulk_ingest(actor, lines)

    return IngestResponse(
        message="CSV processed",
        success_count=len(report.accepted),
        failure_count=len(report.errors),
        errors=[
            IngestRowError(row_number=e.row_number, row=e.row, error=e.error)
            for e in report.errors
        ],
    )


@router.get("", response_model=ThirdPartyListResponse)
async def list_third_parties(
    industry: Optional[str] = Query(None, description="Exact industry match"),
    name: Optional[str] = Query(None, description="Case-insensitive name search"),
    pagination: Pagination = Depends(),
    actor: Actor = Depends(get_current_actor),
    service: ThirdPartyService = Depends(get_third_party_service),
):
    result = service.list(actor, pagination.page, pagination.limit, industry=industry, name=name)
    return ThirdPartyListResponse(
        page=result.page,
        total_pages=result.total_pages,
        total=result.total,
        count=len(result.items),
        third_parties=[third_party_out(t, include_creator=True) for t in result.items],
    )


@router.get("/{third_party_id}", response_model=ThirdPartyResponse)
async def get_third_party(
    third_party_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ThirdPartyService = Depends(get_third_party_service),
):
    return ThirdPartyResponse(third_party=third_party_out(service.get(actor, third_party_id)))


@router.put("/{third_party_id}", response_model=ThirdPartyUpdateResponse)
async def update_third_party(
    third_party_id: int,
    update_data: ThirdPartyUpdate,
    actor: Actor = Depends(get_current_actor),
    service: ThirdPartyService = Depends(get_third_party_service),
):
    third_party = service.update(actor, third_party_id, update_data.model_dump(exclude_unset=True))
    return ThirdPartyUpdateResponse(
        message="Third party updated successfully",
        third_party=third_party_out(third_party),
    )


@router.delete("/{third_party_id}", response_model=ThirdPartyDeleteResponse)
async def delete_third_party(
    third_party_id: int,
    actor: Actor = Depends(get_current_actor),
    service: ThirdPartyService = Depends(get_third_party_service),
):
    deleted_id = service.delete(actor, third_party_id)
    return ThirdPartyDeleteResponse(message="Third party deleted successfully", deleted_id=deleted_id)
