from datetime import timedelta

from alumni_hub.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_token_round_trip():
    token = create_access_token({"user_id": "abc"}, expires_delta=timedelta(minutes=5))
    assert decode_access_token(token)["user_id"] == "abc"


def test_expired_and_garbage_tokens():
    expired = create_access_token({"user_id": "abc"}, expires_delta=timedelta(minutes=-1))
    assert decode_access_token(expired) is None
    assert decode_access_token("not-a-jwt") is None


def test_password_hashing():
    hashed = get_password_hash("hunter2-hunter2")
    assert hashed != "hunter2-hunter2"
    assert verify_password("hunter2-hunter2", hashed)
    assert not verify_password("hunter3-hunter3", hashed)


def test_signup_then_me(client):
    response = client.post(
        "/api/v1/users/", json={"username": "grace", "full_name": "Grace H.", "password": "analytical-engine"}
    )
    assert response.status_code == 201
    token = response.json()["access_token"]

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["username"] == "grace"
    assert response.json()["roles"] == []


def test_signup_requires_password(client):
    assert client.post("/api/v1/users/", json={"username": "grace"}).status_code == 422
    assert client.post("/api/v1/users/", json={"username": "grace", "password": "short"}).status_code == 422


def test_duplicate_username(client):
    body = {"username": "grace", "password": "analytical-engine"}
    assert client.post("/api/v1/users/", json=body).status_code == 201
    assert client.post("/api/v1/users/", json=body).status_code == 400


def test_signup_then_login(client):
    client.post("/api/v1/users/", json={"username": "grace", "password": "analytical-engine"})

    response = client.post("/api/v1/auth/token", data={"username": "grace", "password": "analytical-engine"})
    assert response.status_code == 200
    assert response.json()["username"] == "grace"

    response = client.post("/api/v1/auth/token", data={"username": "grace", "password": "difference-engine"})
    assert response.status_code == 401


def test_token_endpoint(client, make_user, user_password):
    user = make_user()
    response = client.post("/api/v1/auth/token", data={"username": user.username, "password": user_password})
    assert response.status_code == 200
    assert response.json()["user_id"] == str(user.id)

    assert client.post("/api/v1/auth/token", data={"username": "nobody", "password": user_password}).status_code == 401
    assert client.post("/api/v1/auth/token", data={"username": user.username}).status_code == 422


class TestPrivilegedAccounts:
    def test_user_id_alone_does_not_yield_a_token(self, client, make_user):
        admin = make_user(username="root", roles=["admin"])

        response = client.post("/api/v1/auth/token", data={"username": str(admin.id), "password": ""})
        assert response.status_code in (401, 422)
        response = client.post("/api/v1/auth/token", data={"username": "root", "password": "guess-guess"})
        assert response.status_code == 401

    def test_public_user_list_hides_roles(self, client, make_user):
        make_user(username="root", roles=["admin"])

        listed = client.get("/api/v1/users/").json()
        assert [u["username"] for u in listed] == ["root"]
        assert "roles" not in listed[0]
        assert "is_active" not in listed[0]

    def test_admin_login_needs_the_password(self, client, make_user, user_password):
        make_user(username="root", roles=["admin"])

        token = client.post("/api/v1/auth/token", data={"username": "root", "password": user_password}).json()
        me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token['access_token']}"})
        assert me.json()["roles"] == ["admin"]

    def test_inactive_user_cannot_log_in(self, client, make_user, user_password):
        user = make_user(is_active=False)
        response = client.post("/api/v1/auth/token", data={"username": user.username, "password": user_password})
        assert response.status_code == 401


def test_inactive_user_is_rejected(client, make_user, auth_headers):
    user = make_user(is_active=False)
    assert client.get("/api/v1/users/me", headers=auth_headers(user)).status_code == 401


def test_token_without_user_id(client):
    token = create_access_token({"sub": "someone"})
    assert client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
