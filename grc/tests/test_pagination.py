"""
Tests for offset pagination over the listing endpoints.
"""
import pytest

from grc.db.models import ThirdParty
from grc.services.pagination import Page


class TestPage:
    @pytest.mark.parametrize("total,limit,expected", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2)])
    def test_total_pages(self, total, limit, expected):
        assert Page(page=1, limit=limit, total=total).total_pages == expected


class TestPagedListing:
    @pytest.fixture
    def seeded(self, db_session, admin):
        admin_id, _ = admin
        db_session.add_all([ThirdParty(name=f"Vendor {i:02d}", created_by=admin_id) for i in range(25)])
        db_session.commit()

    def test_pages_partition_the_result(self, client, admin_headers, seeded):
        seen = []
        for page in (1, 2, 3):
            body = client.get("/api/thirdparties", params={"page": page, "limit": 10},
                              headers=admin_headers).json()
            assert body["page"] == page
            assert body["total"] == 25
            assert body["totalPages"] == 3
            seen.extend(t["id"] for t in body["thirdParties"])

        assert len(seen) == len(set(seen)) == 25

    def test_last_page_is_partial(self, client, admin_headers, seeded):
        body = client.get("/api/thirdparties", params={"page": 3, "limit": 10}, headers=admin_headers).json()
        assert body["count"] == 5

    def test_page_past_the_end_is_empty(self, client, admin_headers, seeded):
        body = client.get("/api/thirdparties", params={"page": 9, "limit": 10}, headers=admin_headers).json()
        assert body["thirdParties"] == []
        assert body["total"] == 25

    def test_default_page_size(self, client, admin_headers, seeded):
        body = client.get("/api/thirdparties", headers=admin_headers).json()
        assert body["count"] == 10
        assert body["page"] == 1

    def test_limit_is_capped(self, client, admin_headers, settings, seeded):
        settings.MAX_PAGE_SIZE = 20
        body = client.get("/api/thirdparties", params={"limit": 500}, headers=admin_headers).json()
        assert body["count"] == 20
        assert body["totalPages"] == 2

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"page": "abc"}, {"page": 10**20}])
    def test_invalid_paging_parameters(self, client, admin_headers, params):
        response = client.get("/api/thirdparties", params=params, headers=admin_headers)
        assert response.status_code == 400
