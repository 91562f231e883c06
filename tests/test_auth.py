import pytest
from jose import jwt

from models.profile import Profile
from utils.jwt_auth import SECRET_KEY, ALGORITHM, create_signup_token


@pytest.fixture
def signup_token(client, sent_emails):
    client.post("/api/otp/send", json={"email": "new@shift.example", "fullName": "Mona Adel"})
    response = client.post("/api/otp/verify", json={"email": "new@shift.example", "code": sent_emails[-1]["code"]})
    return response.json()["signupToken"]


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_create_password_registers_user(client, db, signup_token):
    response = client.post(
        "/api/auth/create_password",
        json={"password": "secret123", "confirmPassword": "secret123", "country": "Egypt"},
        headers=_bearer(signup_token),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["email"] == "new@shift.example"
    assert body["user"]["fullName"] == "Mona Adel"
    assert body["user"]["role"] == "USER"

    claims = jwt.decode(body["accessToken"], SECRET_KEY, algorithms=[ALGORITHM])
    assert claims["sub"] == body["user"]["publicId"]
    assert claims["role"] == "USER"

    profile = db.query(Profile).filter_by(email="new@shift.example").one()
    assert profile.country == "Egypt"
    assert profile.password_hash != "secret123"


def test_create_password_twice_conflicts(client, signup_token):
    payload = {"password": "secret123", "confirmPassword": "secret123"}
    assert client.post("/api/auth/create_password", json=payload, headers=_bearer(signup_token)).status_code == 200
    second = client.post("/api/auth/create_password", json=payload, headers=_bearer(signup_token))
    assert second.status_code == 409


def test_create_password_mismatch(client, signup_token):
    response = client.post(
        "/api/auth/create_password",
        json={"password": "secret123", "confirmPassword": "secret124"},
        headers=_bearer(signup_token),
    )
    assert response.status_code == 422
    assert response.json() == {"detail": "Passwords don't match"}


def test_create_password_too_short(client, signup_token):
    response = client.post(
        "/api/auth/create_password",
        json={"password": "abc", "confirmPassword": "abc"},
        headers=_bearer(signup_token),
    )
    assert response.status_code == 422
    assert response.json() == {"detail": "Password must be at least 6 characters"}


def test_create_password_needs_signup_token(client, make_profile, auth_header):
    payload = {"password": "secret123", "confirmPassword": "secret123"}
    assert client.post("/api/auth/create_password", json=payload).status_code == 401

    user = make_profile()
    assert client.post("/api/auth/create_password", json=payload, headers=auth_header(user)).status_code == 403


def test_create_password_rejects_tampered_token(client):
    token = create_signup_token("x@shift.example", "X Person") + "tampered"
    response = client.post(
        "/api/auth/create_password",
        json={"password": "secret123", "confirmPassword": "secret123"},
        headers=_bearer(token),
    )
    assert response.status_code == 401


def test_sign_in(client, make_profile):
    make_profile(email="user@shift.example", password="secret123")
    response = client.post("/api/auth/sign_in", json={"email": "User@Shift.example", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "user@shift.example"


def test_sign_in_wrong_password(client, make_profile):
    make_profile(email="user@shift.example", password="secret123")
    response = client.post("/api/auth/sign_in", json={"email": "user@shift.example", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_sign_in_unknown_user(client):
    response = client.post("/api/auth/sign_in", json={"email": "ghost@shift.example", "password": "secret123"})
    assert response.status_code == 401


def test_sign_in_validation(client):
    assert client.post("/api/auth/sign_in", json={"email": "bad", "password": "secret123"}).status_code == 422
    assert client.post("/api/auth/sign_in", json={"email": "user@shift.example", "password": ""}).status_code == 422


def test_me(client, make_profile, auth_header):
    user = make_profile(full_name="Karim")
    response = client.get("/api/auth/me", headers=auth_header(user))
    assert response.status_code == 200
    assert response.json()["fullName"] == "Karim"


def test_me_unauthorized(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Token abc"}).status_code == 401
