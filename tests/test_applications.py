import pytest

from models.housing_application import HousingApplication

VALID_APPLICATION = {
    "fullName": "Ahmed Hassan",
    "email": "ahmed@shift.example",
    "phone": "+20 100 000 0000",
    "governorate": "New Cairo",
    "housingType": "2-Bedroom",
    "familySize": "4",
    "employmentStatus": "employed",
    "message": "Looking for something near the metro.",
}


def test_options(client):
    response = client.get("/api/applications/options")
    assert response.status_code == 200
    body = response.json()
    assert "New Cairo" in body["governorates"]
    assert len(body["governorates"]) == 9
    assert body["housingTypes"] == ["Studio Apartment", "1-Bedroom", "2-Bedroom", "3-Bedroom", "Villa"]
    assert "self-employed" in body["employmentStatuses"]


def test_submit_requires_sign_in(client):
    response = client.post("/api/applications/", json=VALID_APPLICATION)
    assert response.status_code == 401


def test_submit_application(client, db, make_profile, auth_header):
    user = make_profile()
    response = client.post("/api/applications/", json=VALID_APPLICATION, headers=auth_header(user))
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "pending"
    assert body["familySize"] == 4
    assert body["housingType"] == "2-Bedroom"

    stored = db.query(HousingApplication).one()
    assert stored.profile_id == user.id
    assert stored.governorate == "New Cairo"


def test_submit_optional_fields_blank(client, db, make_profile, auth_header):
    user = make_profile()
    payload = dict(VALID_APPLICATION, phone="", familySize="", employmentStatus="", message="")
    response = client.post("/api/applications/", json=payload, headers=auth_header(user))
    assert response.status_code == 200
    stored = db.query(HousingApplication).one()
    assert stored.phone is None
    assert stored.family_size is None
    assert stored.employment_status is None
    assert stored.message is None


@pytest.mark.parametrize("field,value,message", [
    ("fullName", "A", "Name is required"),
    ("email", "not-an-email", "Valid email is required"),
    ("governorate", "Atlantis", "Please select a governorate"),
    ("governorate", "", "Please select a governorate"),
    ("housingType", "Castle", "Please select housing type"),
    ("employmentStatus", "astronaut", "Please select an employment status"),
    ("familySize", "0", "Family size must be at least 1"),
    ("message", "x" * 1001, "Message must be at most 1000 characters"),
])
def test_submit_validation(client, db, make_profile, auth_header, field, value, message):
    user = make_profile()
    payload = dict(VALID_APPLICATION, **{field: value})
    response = client.post("/api/applications/", json=payload, headers=auth_header(user))
    assert response.status_code == 422
    assert response.json() == {"detail": message}
    assert db.query(HousingApplication).count() == 0


def test_my_applications(client, make_profile, auth_header):
    user = make_profile()
    other = make_profile(email="other@shift.example")
    client.post("/api/applications/", json=VALID_APPLICATION, headers=auth_header(user))
    client.post("/api/applications/", json=dict(VALID_APPLICATION, governorate="El Alamein"), headers=auth_header(user))
    client.post("/api/applications/", json=VALID_APPLICATION, headers=auth_header(other))

    response = client.get("/api/applications/mine", headers=auth_header(user))
    assert response.status_code == 200
    body = response.json()
    assert [a["governorate"] for a in body] == ["El Alamein", "New Cairo"]


def test_submit_missing_field_reports_first_problem(client, db, make_profile, auth_header):
    user = make_profile()
    payload = {k: v for k, v in VALID_APPLICATION.items() if k != "governorate"}
    response = client.post("/api/applications/", json=payload, headers=auth_header(user))
    assert response.status_code == 422
    assert response.json() == {"detail": "Field required"}
    assert db.query(HousingApplication).count() == 0
