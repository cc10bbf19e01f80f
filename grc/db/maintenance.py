"""
One-off data maintenance tasks.
"""
import os
from typing import Tuple

from sqlalchemy.orm import Session

from grc.core.logging import get_logger
from grc.db.models import Evidence

logger = get_logger(__name__)


def backfill_evidence_sizes(db: Session) -> Tuple[int, int]:
    """
    Fill in `size` for evidence rows recorded without one.

    Rows whose stored file is gone are logged and left untouched.
    Returns (updated, missing).
    """
    rows = db.query(Evidence).filter(Evidence.size.is_(None)).all()
    logger.info(f"Found {len(rows)} evidence rows without size")

    updated = missing = 0
    for evidence in rows:
        if evidence.storage_path and os.path.exists(evidence.storage_path):
            evidence.size = os.path.getsize(evidence.storage_path)
            updated += 1
        else:
            logger.warning(f"File not found for evidence {evidence.id}: {evidence.storage_path}")
            missing += 1

    db.commit()
    logger.info(f"Backfill complete: {updated} updated, {missing} missing")
    return updated, missing
