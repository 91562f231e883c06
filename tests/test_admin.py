import pytest

from models.housing_application import HousingApplication


@pytest.fixture
def admin(make_profile):
    return make_profile(email="admin@shift.example", role="ADMIN", full_name="Admin")


@pytest.fixture
def applications(db, make_profile):
    user = make_profile()
    rows = []
    for governorate, status in [("New Cairo", "pending"), ("New Minya", "approved"), ("Borg El Arab", "pending")]:
        row = HousingApplication(
            profile_id=user.id,
            full_name="Ahmed Hassan",
            email="ahmed@shift.example",
            governorate=governorate,
            housing_type="Villa",
            status=status,
        )
        db.add(row)
        db.commit()
        rows.append(row)
    return rows


@pytest.mark.parametrize("method,path", [
    ("get", "/api/admin/applications"),
    ("get", "/api/admin/users"),
    ("get", "/api/admin/stats"),
])
def test_admin_routes_forbidden_for_users(client, make_profile, auth_header, method, path):
    user = make_profile()
    assert getattr(client, method)(path).status_code == 401
    assert getattr(client, method)(path, headers=auth_header(user)).status_code == 403


def test_list_applications_newest_first(client, admin, applications, auth_header):
    response = client.get("/api/admin/applications", headers=auth_header(admin))
    assert response.status_code == 200
    assert [a["governorate"] for a in response.json()] == ["Borg El Arab", "New Minya", "New Cairo"]


def test_list_users_hides_password_hash(client, admin, applications, auth_header):
    response = client.get("/api/admin/users", headers=auth_header(admin))
    assert response.status_code == 200
    users = response.json()
    assert {u["email"] for u in users} == {"admin@shift.example", "user@shift.example"}
    assert all("passwordHash" not in u and "password_hash" not in u for u in users)


def test_stats(client, admin, applications, auth_header):
    response = client.get("/api/admin/stats", headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json() == {"totalApplications": 3, "registeredUsers": 2, "pendingApplications": 2}


def test_update_status(client, db, admin, applications, auth_header):
    target = applications[0].id
    response = client.patch(f"/api/admin/applications/{target}/status", json={"status": "approved"}, headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert db.query(HousingApplication).filter_by(id=target).one().status == "approved"


def test_update_status_rejects_unknown_status(client, admin, applications, auth_header):
    target = applications[0].id
    response = client.patch(f"/api/admin/applications/{target}/status", json={"status": "archived"}, headers=auth_header(admin))
    assert response.status_code == 422


def test_update_status_missing_application(client, admin, auth_header):
    response = client.patch("/api/admin/applications/9999/status", json={"status": "approved"}, headers=auth_header(admin))
    assert response.status_code == 404


def test_update_status_forbidden_for_users(client, make_profile, applications, auth_header):
    user = make_profile(email="someone@shift.example")
    response = client.patch(
        f"/api/admin/applications/{applications[0].id}/status", json={"status": "approved"}, headers=auth_header(user)
    )
    assert response.status_code == 403
