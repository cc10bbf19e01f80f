"""
Tests for the role-dependent profile summary.
"""
from grc.tests.utils import signed_up


def upload_one(client, headers, title):
    return client.post("/api/evidence/upload", headers=headers, data={"title": title},
                       files=[("files", ("doc.txt", b"content", "text/plain"))])


class TestClientProfile:
    def test_sees_only_own_evidence(self, client, alice, bob_headers, admin_headers):
        alice_id, alice_headers = alice
        upload_one(client, alice_headers, "Alice doc")
        upload_one(client, bob_headers, "Bob doc")
        client.post("/api/thirdparties/upload", headers=admin_headers,
                    files={"file": ("v.csv", b"name\nAcme\n", "text/csv")})

        response = client.get("/api/users/profile", headers=alice_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == alice_id
        assert body["user"]["email"] == "alice@example.com"
        assert "hashedPassword" not in body["user"]
        assert [e["title"] for e in body["evidence"]] == ["Alice doc"]
        assert body["evidence"][0]["owner"] is None
        assert body["thirdParties"] == []
        assert body["users"] == []
        assert body["stats"] == {"evidenceCount": 1, "thirdPartyCount": 0, "clientCount": 0}


class TestAdminProfile:
    def test_sees_everything(self, client, admin_headers, alice_headers, bob_headers):
        upload_one(client, alice_headers, "Alice doc")
        upload_one(client, bob_headers, "Bob doc")
        client.post("/api/thirdparties/upload", headers=admin_headers,
                    files={"file": ("v.csv", b"name\nAcme\nGlobex\n", "text/csv")})

        body = client.get("/api/users/profile", headers=admin_headers).json()
        assert [e["title"] for e in body["evidence"]] == ["Bob doc", "Alice doc"]
        assert body["evidence"][0]["owner"]["email"] == "bob@example.com"
        assert len(body["thirdParties"]) == 2
        assert body["thirdParties"][0]["creator"]["email"] == "admin@example.com"
        assert sorted(u["email"] for u in body["users"]) == ["alice@example.com", "bob@example.com"]
        assert body["stats"] == {"evidenceCount": 2, "thirdPartyCount": 2, "clientCount": 2}

    def test_other_admins_not_counted_as_clients(self, client, admin_headers):
        signed_up(client, "second-admin@example.com", role="admin")
        body = client.get("/api/users/profile", headers=admin_headers).json()
        assert body["users"] == []
