"""
Fill in the size column for evidence uploaded before it was recorded.
Run: python -m scripts.backfill_evidence_size
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grc.core.logging import setup_logging
from grc.db.maintenance import backfill_evidence_sizes
from grc.db.session import get_db_context


def main():
    setup_logging()
    with get_db_context() as db:
        updated, missing = backfill_evidence_sizes(db)
    print(f"Updated {updated} rows, {missing} files missing")


if __name__ == "__main__":
    main()
