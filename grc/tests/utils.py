"""
Request helpers shared by the API tests.
"""
PASSWORD = "password123"


def register(client, email, password=PASSWORD, role="client"):
    return client.post("/api/users/register", json={"email": email, "password": password, "role": role})


def login(client, email, password=PASSWORD):
    return client.post("/api/users/login", json={"email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def signed_up(client, email, role="client"):
    """Register and log in; returns (user_id, headers)."""
    response = register(client, email, role=role)
    assert response.status_code == 201, response.text
    token = login(client, email).json()["token"]
    return response.json()["id"], bearer(token)
