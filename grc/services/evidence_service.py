"""
Evidence repository: uploads, listing, metadata edits and deletion.

Upload flow:
1. Validate the request (file count, title, category) before touching disk
2. Stream every file into the blob store
3. Insert all metadata rows in one transaction
4. On any failure after step 2 started, remove every file this upload wrote
"""
from typing import List, Optional, Sequence

from fastapi import UploadFile
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from grc.core.config import Settings
from grc.core.errors import BadRequest, GRCError, NotFound, ServerError
from grc.core.logging import audit_logger, get_logger
from grc.core.policy import Action, Actor, Capability, ensure_access, ensure_capability
from grc.db.models import Evidence, EvidenceCategory
from grc.services.blob_store import LocalBlobStore, StoredBlob
from grc.services.pagination import Page, paginate

logger = get_logger(__name__)


CATEGORY_CHOICES = ", ".join(c.value for c in EvidenceCategory)


def parse_category(value: Optional[str], default: Optional[EvidenceCategory] = None) -> Optional[EvidenceCategory]:
    if value is None or value == "":
        return default
    try:
        return EvidenceCategory(value)
    except ValueError:
        raise BadRequest(f"category must be one of: {CATEGORY_CHOICES}")


def clean_title(value: Optional[str]) -> str:
    title = (value or "").strip()
    if not title:
        raise BadRequest("title is required")
    return title


class EvidenceService:
    def __init__(self, db: Session, settings: Settings, blob_store: LocalBlobStore):
        self.db = db
        self.settings = settings
        self.blob_store = blob_store

    async def upload(
        self,
        actor: Actor,
        files: Sequence[UploadFile],
        title: Optional[str],
        category: Optional[str] = None,
    ) -> List[Evidence]:
        files = [f for f in (files or []) if f is not None]
        if not files:
            raise BadRequest("No files uploaded")
        if len(files) > self.settings.MAX_UPLOAD_FILES:
            raise BadRequest(f"At most {self.settings.MAX_UPLOAD_FILES} files per upload")
        title = clean_title(title)
        parsed_category = parse_category(category, EvidenceCategory.OTHER)

        stored: List[StoredBlob] = []
        try:
            for upload in files:
                stored.append(await self.blob_store.save(upload))

            records = [
                Evidence(
                    title=title,
                    category=parsed_category.value,
                    filename=blob.filename,
                    storage_path=blob.path,
                    size=blob.size,
                    owner_id=actor.id,
                )
                for blob in stored
            ]
            self.db.add_all(records)
            self.db.commit()
        except BaseException as exc:
            self.db.rollback()
            for blob in stored:
                await self._release(blob.path)
            if isinstance(exc, (SQLAlchemyError, OSError)):
                logger.exception(f"Evidence upload failed for user {actor.id}")
                raise ServerError() from exc
            raise

        for record in records:
            self.db.refresh(record)

        audit_logger.log("evidence_uploaded", user_id=actor.id, entity_type="evidence",
                         details={"count": len(records), "ids": [r.id for r in records],
                                  "category": parsed_category.value})
        return records

    def list_own(
        self,
        actor: Actor,
        page: int,
        limit: int,
        category: Optional[str] = None,
    ) -> Page:
        ensure_capability(actor, Capability.LIST_OWN_EVIDENCE,
                          "Admins should use the profile endpoint")

        query = self.db.query(Evidence).filter(Evidence.owner_id == actor.id)
        parsed = parse_category(category)
        if parsed is not None:
            query = query.filter(Evidence.category == parsed.value)

        query = query.order_by(desc(Evidence.created_at), desc(Evidence.id))
        return paginate(query, page, limit)

    def list_for_owner(self, owner_id: int) -> List[Evidence]:
        return (
            self.db.query(Evidence)
            .filter(Evidence.owner_id == owner_id)
            .order_by(desc(Evidence.created_at), desc(Evidence.id))
            .all()
        )

    def list_all(self) -> List[Evidence]:
        """Every evidence record with its uploader loaded; admin aggregate only."""
        return (
            self.db.query(Evidence)
            .options(selectinload(Evidence.owner))
            .order_by(desc(Evidence.created_at), desc(Evidence.id))
            .all()
        )

    def get(self, evidence_id: int) -> Evidence:
        evidence = self.db.get(Evidence, evidence_id)
        if evidence is None:
            raise NotFound("Evidence not found")
        return evidence

    def update(
        self,
        actor: Actor,
        evidence_id: int,
        title: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Evidence:
        """Partial update; only supplied fields change."""
        evidence = self.get(evidence_id)
        ensure_access(actor, evidence.owner_id, Action.UPDATE,
                      "Forbidden: Not allowed to edit this evidence")

        changes = {}
        if title is not None:
            evidence.title = changes["title"] = clean_title(title)
        if category is not None:
            parsed = parse_category(category)
            if parsed is None:
                raise BadRequest(f"category must be one of: {CATEGORY_CHOICES}")
            evidence.category = changes["category"] = parsed.value

        if changes:
            try:
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception(f"Failed to update evidence {evidence_id}")
                raise ServerError()
            self.db.refresh(evidence)

        audit_logger.log("evidence_updated", user_id=actor.id, entity_type="evidence",
                         entity_id=evidence.id, details=changes)
        return evidence

    async def delete(self, actor: Actor, evidence_id: int) -> int:
        """
        Delete the stored file, then the metadata row.

        The row delete is the commit point. If it fails after the file is gone
        the row is left pointing at nothing, which a later delete clears.
        """
        evidence = self.get(evidence_id)
        ensure_access(actor, evidence.owner_id, Action.DELETE,
                      "Forbidden: Not allowed to delete this evidence")

        await self._release(evidence.storage_path, strict=True)

        try:
            self.db.delete(evidence)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete evidence row {evidence_id} after removing its file")
            raise ServerError()

        audit_logger.log("evidence_deleted", user_id=actor.id, entity_type="evidence",
                         entity_id=evidence_id)
        return evidence_id

    async def _release(self, path: str, strict: bool = False) -> None:
        try:
            await self.blob_store.delete(path)
        except (OSError, GRCError):
            logger.exception(f"Could not remove stored file {path}")
            if strict:
                raise ServerError()
