from __future__ import annotations

from app.models.user import User
from app.services.auth import create_refresh_token
from conftest import PASSWORD, auth

REGISTRATION = {
    "username": "founder",
    "fullname": "Ada Founder",
    "email": "Ada@Example.com",
    "password": PASSWORD,
    "role": "entrepreneur",
    "sector": "agritech",
}


def register(client, **overrides):
    return client.post("/api/auth/register", json={**REGISTRATION, **overrides})


def test_register_verify_login_flow(client, db_session):
    response = register(client)
    assert response.status_code == 201
    assert response.json()["is_verified"] is False
    assert response.json()["email"] == "ada@example.com"
    assert response.json()["profile"] == {"sector": "agritech"}

    user = db_session.query(User).filter_by(username="founder").one()
    assert len(user.verification_code) == 6

    unverified = client.post("/api/auth/login", json={"email": "ada@example.com", "password": PASSWORD})
    assert unverified.status_code == 403

    bad_code = client.post("/api/auth/verify-email", json={"email": "ada@example.com", "verificationCode": "nope"})
    assert bad_code.status_code == 400

    verified = client.post(
        "/api/auth/verify-email",
        json={"email": "ada@example.com", "verificationCode": user.verification_code},
    )
    assert verified.status_code == 200
    assert verified.json()["token_type"] == "bearer"

    login = client.post("/api/auth/login", json={"email": "ada@example.com", "password": PASSWORD})
    assert login.status_code == 200
    assert "access_token" in login.cookies

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"})
    assert me.json()["username"] == "founder"


def test_session_cookie_authenticates(client, make_user):
    make_user("alice")
    client.post("/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD})

    assert client.get("/api/auth/me").json()["username"] == "alice"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_wrong_password_rejected(client, make_user):
    make_user("alice")
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wrong#123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_duplicate_email_or_username_rejected(client):
    assert register(client).status_code == 201
    assert register(client, username="other").status_code == 400
    assert register(client, email="other@example.com").status_code == 400


def test_registration_validation(client):
    weak = register(client, password="password")
    assert weak.status_code == 400
    assert "password" in weak.json()["detail"]

    assert register(client, role="wizard").status_code == 400
    assert register(client, role="university").status_code == 400
    assert register(
        client,
        role="university",
        universityName="Sorbonne",
        officialUniversityEmail="admin@sorbonne.fr",
    ).status_code == 201


def test_refresh_issues_new_tokens(client, make_user):
    alice = make_user("alice")
    response = client.post("/api/auth/refresh", json={"refreshToken": create_refresh_token(alice.id)})
    assert response.status_code == 200
    assert response.json()["access_token"]

    # An access token cannot be used as a refresh token.
    access = auth(alice)["Authorization"].split()[1]
    assert client.post("/api/auth/refresh", json={"refreshToken": access}).status_code == 401


def test_unverified_token_is_forbidden(client, make_user):
    pending = make_user("pending", verified=False)
    assert client.get("/api/auth/me", headers=auth(pending)).status_code == 403


def test_account_update_and_soft_delete(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")

    response = client.put("/api/users/me", json={"bio": "Building things", "profileImage": "http://cdn/a.png"}, headers=auth(alice))
    assert response.json()["bio"] == "Building things"
    assert response.json()["profile_image"] == "http://cdn/a.png"
    assert client.get(f"/api/users/{alice.id}", headers=auth(bob)).json()["bio"] == "Building things"

    assert client.delete("/api/users/me", headers=auth(alice)).status_code == 200
    assert client.get(f"/api/users/{alice.id}", headers=auth(bob)).status_code == 404
    assert client.get("/api/auth/me", headers=auth(alice)).status_code == 401


def test_invalid_path_id_is_bad_request(client, make_user):
    response = client.get("/api/users/abc", headers=auth(make_user("alice")))
    assert response.status_code == 400


def test_health(client):
    response = client.get("/health")
    assert response.json()["status"] in ("ok", "degraded")
