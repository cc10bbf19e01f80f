"""
Tests for data maintenance tasks and admin bootstrap.
"""
from grc.db.maintenance import backfill_evidence_sizes
from grc.db.models import Evidence, User
from grc.db.session import bootstrap_admin


def add_evidence(db, path, size=None):
    evidence = Evidence(title="Old", category="doc", filename="old.txt",
                        storage_path=str(path), size=size, owner_id=1)
    db.add(evidence)
    db.commit()
    return evidence


class TestBackfillEvidenceSizes:
    def test_fills_missing_sizes(self, db_session, tmp_path):
        path = tmp_path / "old.txt"
        path.write_bytes(b"12345")
        evidence = add_evidence(db_session, path)

        assert backfill_evidence_sizes(db_session) == (1, 0)
        db_session.refresh(evidence)
        assert evidence.size == 5

    def test_missing_files_are_skipped(self, db_session, tmp_path):
        evidence = add_evidence(db_session, tmp_path / "gone.txt")

        assert backfill_evidence_sizes(db_session) == (0, 1)
        db_session.refresh(evidence)
        assert evidence.size is None

    def test_rows_with_size_untouched(self, db_session, tmp_path):
        path = tmp_path / "sized.txt"
        path.write_bytes(b"12345")
        add_evidence(db_session, path, size=99)
        assert backfill_evidence_sizes(db_session) == (0, 0)


class TestBootstrapAdmin:
    def test_creates_first_admin(self, db_session, settings):
        settings.ADMIN_BOOTSTRAP_EMAIL = "Root@Example.com"
        settings.ADMIN_BOOTSTRAP_PASSWORD = "bootstrap-password"

        assert bootstrap_admin(db_session, settings) is True
        db_session.commit()
        admin = db_session.query(User).one()
        assert admin.email == "root@example.com"
        assert admin.role == "admin"

    def test_skipped_when_users_exist(self, db_session, settings, alice):
        settings.ADMIN_BOOTSTRAP_EMAIL = "root@example.com"
        settings.ADMIN_BOOTSTRAP_PASSWORD = "bootstrap-password"
        assert bootstrap_admin(db_session, settings) is False

    def test_skipped_without_credentials(self, db_session, settings):
        assert bootstrap_admin(db_session, settings) is False

    def test_skipped_with_short_password(self, db_session, settings):
        settings.ADMIN_BOOTSTRAP_EMAIL = "root@example.com"
        settings.ADMIN_BOOTSTRAP_PASSWORD = "short"
        assert bootstrap_admin(db_session, settings) is False
        assert db_session.query(User).count() == 0
