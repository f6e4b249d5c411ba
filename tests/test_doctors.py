import math

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.doctor import Doctor
from app.api.routes.doctors import get_doctor_service

from tests.conftest import bearer


@pytest.fixture
def make_doctor(signup, db):
    """Sign a doctor up, then set profile fields directly in the store."""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        data = signup(
            email=f"doctor{counter['n']}@example.com",
            name=f"Doctor {counter['n']}",
            userType="doctor"
        )
        doctor = db.query(Doctor).filter(Doctor.user_id == data["user"]["_id"]).one()
        for field, value in fields.items():
            setattr(doctor, field, value)
        db.commit()
        return {"id": doctor.id, "token": data["token"], "user": data["user"]}

    return _make


class TestDoctorDirectory:

    def test_list_sorted_by_rating_then_reviews(self, client, make_doctor):
        low = make_doctor(rating=3.0, total_reviews=50)
        top_many = make_doctor(rating=4.8, total_reviews=20)
        top_few = make_doctor(rating=4.8, total_reviews=5)

        response = client.get("/api/doctors")
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert "message" not in body
        ids =[doctor["_id"] for doctor in body["data"]["doctors"]]
        assert ids == [top_many["id"], top_few["id"], low["id"]]

    def test_list_includes_owner_summary(self, client, make_doctor):
        make_doctor()

        doctor = client.get("/api/doctors").json()["data"]["doctors"][0]
        owner = doctor["userId"]
        assert owner["name"] == "Doctor 1"
        assert owner["email"] == "doctor1@example.com"
        assert set(owner) == {"_id", "name", "email", "phone", "profileImage"}

    def test_min_rating_filter(self, client, make_doctor):
        for rating in (2.0, 3.9, 4.0, 4.5, 5.0):
            make_doctor(rating=rating)

        response = client.get("/api/doctors", params={"minRating": 4})
        doctors = response.json()["data"]["doctors"]

        assert len(doctors) == 3
        assert all(doctor["rating"] >= 4 for doctor in doctors)

    def test_specialization_case_insensitive_substring(self, client, make_doctor):
        make_doctor(specialization="Cardiology")
        make_doctor(specialization="Pediatric Cardiology")
        make_doctor(specialization="Dermatology")

        response = client.get("/api/doctors", params={"specialization": "CARDIO"})
        specializations = {d["specialization"] for d in response.json()["data"]["doctors"]}
        assert specializations == {"Cardiology", "Pediatric Cardiology"}

    @pytest.mark.parametrize("term", ["%", "_"])
    def test_specialization_wildcards_match_literally(self, client, make_doctor, term):
        make_doctor(specialization="Cardiology")
        make_doctor(specialization="Ear_Nose_Throat")

        response = client.get("/api/doctors", params={"specialization": term})
        specializations = [d["specialization"] for d in response.json()["data"]["doctors"]]
        assert specializations == (["Ear_Nose_Throat"] if term == "_" else [])

    def test_verified_filter(self, client, make_doctor):
        verified = make_doctor(is_verified=True)
        make_doctor(is_verified=False)

        response = client.get("/api/doctors", params={"isVerified": "true"})
        doctors = response.json()["data"]["doctors"]
        assert [d["_id"] for d in doctors] == [verified["id"]]

        # Anything but "true" leaves the filter off
        response = client.get("/api/doctors", params={"isVerified": "false"})
        assert response.json()["data"]["pagination"]["total"] == 2

    def test_pagination(self, client, make_doctor):
        for i in range(5):
            make_doctor(rating=float(i))

        response = client.get("/api/doctors", params={"page": 3, "limit": 2})
        data = response.json()["data"]

        assert data["pagination"] == {"page": 3, "limit": 2, "total": 5, "pages": 3}
        assert data["pagination"]["pages"] == math.ceil(5 / 2)
        assert len(data["doctors"]) == 1
        assert data["doctors"][0]["rating"] == 0

    def test_pagination_default_and_empty(self, client):
        response = client.get("/api/doctors")
        assert response.json()["data"] == {
            "doctors": [],
            "pagination": {"page": 1, "limit": 10, "total": 0, "pages": 0}
        }

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}, {"minRating": "high"}])
    def test_invalid_query_parameters(self, client, params):
        response = client.get("/api/doctors", params=params)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_get_doctor_by_id(self, client, make_doctor):
        doctor = make_doctor(specialization="Neurology")

        response = client.get(f"/api/doctors/{doctor['id']}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["specialization"] == "Neurology"
        assert data["userId"]["email"] == "doctor1@example.com"

    def test_get_doctor_not_found(self, client):
        response = client.get("/api/doctors/9999")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Doctor not found"}

    def test_unexpected_error_returns_500(self, test_db):
        class BrokenService:
            def list_doctors(self, **kwargs):
                raise RuntimeError("connection reset")

        app.dependency_overrides[get_doctor_service] = lambda: BrokenService()
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.get("/api/doctors")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Internal server error",
            "error": "connection reset"
        }


class TestDoctorProfile:

    def test_get_own_profile(self, client, make_doctor):
        doctor = make_doctor()

        response = client.get("/api/doctors/profile", headers=bearer(doctor["token"]))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["_id"] == doctor["id"]
        assert data["specialization"] == "General"

    def test_get_own_profile_requires_token(self, client):
        response = client.get("/api/doctors/profile")
        assert response.status_code == 401

    def test_get_own_profile_missing(self, client, make_doctor, db):
        doctor = make_doctor()
        db.query(Doctor).filter(Doctor.id == doctor["id"]).delete()
        db.commit()

        response = client.get("/api/doctors/profile", headers=bearer(doctor["token"]))
        assert response.status_code == 404
        assert response.json()["message"] == "Doctor profile not found"

    def test_partial_update_leaves_other_fields(self, client, make_doctor):
        doctor = make_doctor(
            specialization="Cardiology",
            services=["ECG"],
            available_slots=[{"day": "Monday", "startTime": "09:00", "endTime": "12:00"}]
        )
        headers = bearer(doctor["token"])
        before = client.get("/api/doctors/profile", headers=headers).json()["data"]

        response = client.put(
            "/api/doctors/profile",
            json={"bio": "Twenty years in cardiology."},
            headers=headers
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Doctor profile updated successfully"
        after = response.json()["data"]

        assert after["bio"] == "Twenty years in cardiology."
        for key in before:
            if key not in ("bio", "updatedAt"):
                assert after[key] == before[key], key

    def test_update_several_fields(self, client, make_doctor):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={
                "specialization": "Dermatology",
                "licenseNumber": "LIC-12345",
                "qualification": ["MBBS", "MD"],
                "experience": 12,
                "consultationFee": 80.5,
                "availableSlots": [
                    {"day": "Tuesday", "startTime": "10:00", "endTime": "14:00"}
                ],
                "services": ["Skin checks"]
            },
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["specialization"] == "Dermatology"
        assert data["licenseNumber"] == "LIC-12345"
        assert data["qualification"] == ["MBBS", "MD"]
        assert data["experience"] == 12
        assert data["consultationFee"] == 80.5
        assert data["availableSlots"] == [
            {"day": "Tuesday", "startTime": "10:00", "endTime": "14:00"}
        ]
        assert data["services"] == ["Skin checks"]

    def test_update_ignores_rating_and_verification(self, client, make_doctor):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"rating": 5, "isVerified": True},
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 200
        assert response.json()["data"]["rating"] == 0
        assert response.json()["data"]["isVerified"] is False

    def test_update_rejects_negative_values(self, client, make_doctor, db):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"experience": -1, "consultationFee": -5},
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 400
        assert response.json()["message"] == (
            "Experience cannot be negative, Consultation fee cannot be negative"
        )

        db.expire_all()
        stored = db.query(Doctor).filter(Doctor.id == doctor["id"]).one()
        assert stored.experience == 0
        assert stored.consultation_fee == 0

    def test_update_rejects_long_bio(self, client, make_doctor):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"bio": "x" * 1001},
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Bio cannot exceed 1000 characters"

    def test_update_rejects_clearing_required_fields(self, client, make_doctor):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"specialization": "", "qualification": []},
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 400
        assert response.json()["message"] == (
            "Specialization is required, At least one qualification is required"
        )

    def test_update_rejects_unknown_day(self, client, make_doctor):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"availableSlots": [{"day": "Someday", "startTime": "09:00"}]},
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_update_duplicate_license_number(self, client, make_doctor):
        make_doctor(license_number="LIC-1")
        second = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"licenseNumber": "LIC-1"},
            headers=bearer(second["token"])
        )
        assert response.status_code == 409

    def test_update_trims_specialization_and_license_number(self, client, make_doctor, db):
        doctor = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"specialization": "  Cardiology  ", "licenseNumber": " LIC-7 "},
            headers=bearer(doctor["token"])
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["specialization"] == "Cardiology"
        assert data["licenseNumber"] == "LIC-7"

        stored = db.get(Doctor, doctor["id"])
        db.refresh(stored)
        assert stored.license_number == "LIC-7"

    def test_update_padded_duplicate_license_number(self, client, make_doctor):
        make_doctor(license_number="LIC-1")
        second = make_doctor()

        response = client.put(
            "/api/doctors/profile",
            json={"licenseNumber": " LIC-1 "},
            headers=bearer(second["token"])
        )
        assert response.status_code == 409
        assert response.json()["message"] == "A doctor with this license number already exists"

    def test_update_forbidden_for_patients(self, client, signup):
        token = signup()["token"]

        response = client.put(
            "/api/doctors/profile",
            json={"bio": "Not a doctor"},
            headers=bearer(token)
        )
        assert response.status_code == 403
