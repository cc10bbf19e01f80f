"""
Third-party repository: CSV bulk ingest, listing and per-record access.
"""
import csv
import math
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from grc.core.errors import BadRequest, NotFound, ServerError
from grc.core.logging import audit_logger, get_logger
from grc.core.policy import Action, Actor, Capability, ensure_access, ensure_capability
from grc.db.models import ThirdParty
from grc.services.csv_ingest import RISK_SCORE_NOT_NUMBER, IngestReport, validate_rows
from grc.services.pagination import Page, paginate

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "email", "company", "role", "industry", "risk_score")


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ThirdPartyService:
    def __init__(self, db: Session):
        self.db = db

    def bulk_ingest(self, actor: Actor, lines: Iterable[str]) -> IngestReport:
        """
        Validate CSV rows one by one, then insert every accepted row at once.

        Rejected rows never reach the batch; the batch commits or fails as a
        whole.
        """
        ensure_capability(actor, Capability.INGEST_THIRD_PARTIES, "Forbidden: Admins only")

        try:
            report = validate_rows(lines)
        except UnicodeDecodeError:
            raise BadRequest("CSV file must be UTF-8 encoded")
        except csv.Error as exc:
            raise BadRequest(f"Malformed CSV: {exc}")

        if report.accepted:
            records = [ThirdParty(created_by=actor.id, **fields) for fields in report.accepted]
            try:
                self.db.add_all(records)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception(f"Bulk insert of {len(records)} third parties failed")
                raise ServerError()

        audit_logger.log("third_parties_ingested", user_id=actor.id, entity_type="third_party",
                         details={"success": len(report.accepted), "failed": len(report.errors)})
        return report

    def list(
        self,
        actor: Actor,
        page: int,
        limit: int,
        industry: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Page:
        ensure_capability(actor, Capability.LIST_THIRD_PARTIES,
                          "Forbidden: Clients cannot view third-party entries")

        query = self.db.query(ThirdParty).options(selectinload(ThirdParty.creator))
        if industry:
            query = query.filter(ThirdParty.industry == industry)
        if name:
            query = query.filter(ThirdParty.name.ilike(f"%{escape_like(name)}%", escape="\\"))

        query = query.order_by(desc(ThirdParty.created_at), desc(ThirdParty.id))
        return paginate(query, page, limit)

    def list_all(self) -> List[ThirdParty]:
        return (
            self.db.query(ThirdParty)
            .options(selectinload(ThirdParty.creator))
            .order_by(desc(ThirdParty.created_at), desc(ThirdParty.id))
            .all()
        )

    def _get(self, third_party_id: int) -> ThirdParty:
        third_party = self.db.get(ThirdParty, third_party_id)
        if third_party is None:
            raise NotFound("Third party not found")
        return third_party

    def get(self, actor: Actor, third_party_id: int) -> ThirdParty:
        third_party = self._get(third_party_id)
        ensure_access(actor, third_party.created_by, Action.READ,
                      "Forbidden: Cannot view this entry")
        return third_party

    def update(self, actor: Actor, third_party_id: int, changes: Dict[str, Any]) -> ThirdParty:
        third_party = self._get(third_party_id)
        ensure_access(actor, third_party.created_by, Action.UPDATE,
                      "Forbidden: Cannot edit this entry")

        applied = {}
        for key in UPDATABLE_FIELDS:
            if key not in changes or changes[key] is None:
                continue
            value = changes[key]
            if isinstance(value, str):
                value = value.strip()
            if key == "name" and not value:
                raise BadRequest("name must not be empty")
            if key == "risk_score" and not math.isfinite(value):
                raise BadRequest(RISK_SCORE_NOT_NUMBER)
            setattr(third_party, key, value)
            applied[key] = value

        if applied:
            try:
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception(f"Failed to update third party {third_party_id}")
                raise ServerError()
            self.db.refresh(third_party)

        audit_logger.log("third_party_updated", user_id=actor.id, entity_type="third_party",
                         entity_id=third_party.id, details=applied)
        return third_party

    def delete(self, actor: Actor, third_party_id: int) -> int:
        third_party = self._get(third_party_id)
        ensure_access(actor, third_party.created_by, Action.DELETE,
                      "Forbidden: Cannot delete this entry")

        try:
            self.db.delete(third_party)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete third party {third_party_id}")
            raise ServerError()

        audit_logger.log("third_party_deleted", user_id=actor.id, entity_type="third_party",
                         entity_id=third_party_id)
        return third_party_id
