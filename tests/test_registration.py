import re

import pytest

from conftest import PASSWORD, auth, profile_payload
from placement_portal.db.postgres import execute_raw_sql


def _token_from(body):
    return re.search(r"token=([^\"&\s]+)", body).group(1)


def test_invite_creates_account_and_sends_link(client, admin_token, email_service):
    resp = client.post("/api/users/register", headers=auth(admin_token), json={
        "email": "new@college.edu", "department": "Civil Engineering"
    })
    assert resp.status_code == 200
    assert email_service.recipients == ["new@college.edu"]
    assert "student-registration?token=" in email_service.sent[0]["body"]

    rows = execute_raw_sql("SELECT role, department, password FROM users WHERE email = 'new@college.edu'")
    assert rows == [{"role": "student", "department": "Civil Engineering", "password": None}]


def test_invited_student_cannot_log_in_before_registering(client, admin_token):
    client.post("/api/users/register", headers=auth(admin_token), json={
        "email": "new@college.edu", "department": "Civil Engineering"
    })
    resp = client.post("/api/auth/login", json={
        "email": "new@college.edu", "password": PASSWORD, "role": "student"
    })
    assert resp.status_code == 401


def test_invited_student_completes_registration_with_token(client, admin_token, email_service):
    client.post("/api/users/register", headers=auth(admin_token), json={
        "email": "new@college.edu", "department": "Civil Engineering"
    })
    token = _token_from(email_service.sent[0]["body"])

    resp = client.post("/api/users/student-registration", json={
        "email": "new@college.edu", "password": PASSWORD,
        "department": "Civil Engineering", "name": "New Student", "token": token
    })
    assert resp.status_code == 201
    assert resp.json()["user"]["name"] == "New Student"

    rows = execute_raw_sql("SELECT COUNT(*) AS n FROM users WHERE email = 'new@college.edu'")
    assert rows[0]["n"] == 1

    login = client.post("/api/auth/login", json={
        "email": "new@college.edu", "password": PASSWORD, "role": "student"
    })
    assert login.status_code == 200


def test_invitation_token_for_other_email_is_rejected(client, admin_token, email_service):
    client.post("/api/users/register", headers=auth(admin_token), json={
        "email": "new@college.edu", "department": "Civil Engineering"
    })
    token = _token_from(email_service.sent[0]["body"])

    resp = client.post("/api/users/student-registration", json={
        "email": "other@college.edu", "password": PASSWORD,
        "department": "Civil Engineering", "name": "Other", "token": token
    })
    assert resp.status_code == 400


def test_duplicate_student_registration_is_conflict(client, register_student):
    register_student("dup@college.edu")
    resp = client.post("/api/users/student-registration", json={
        "email": "dup@college.edu", "password": PASSWORD,
        "department": "Computer Science", "name": "Again"
    })
    assert resp.status_code == 409


def test_registration_rejects_unknown_department(client):
    resp = client.post("/api/users/student-registration", json={
        "email": "x@college.edu", "password": PASSWORD, "department": "Astrology", "name": "X"
    })
    assert resp.status_code == 422


def test_bulk_invite_reports_failures_without_aborting(client, admin_token, email_service, register_student):
    register_student("taken@college.edu")
    email_service.fail_for.add("bounce@college.edu")
    csv_content = (
        "email,department\n"
        "one@college.edu,Computer Science\n"
        "bounce@college.edu,Computer Science\n"
        "taken@college.edu,Computer Science\n"
        "not-an-email,Computer Science\n"
        "two@college.edu,Astrology\n"
        "three@college.edu,Mechanical Engineering\n"
    )
    resp = client.post(
        "/api/admin/register-students",
        headers=auth(admin_token),
        files={"csvFile": ("students.csv", csv_content, "text/csv")},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["recipient_count"] == 6
    assert body["sent"] == 2
    assert body["failed"] == [
        "bounce@college.edu", "taken@college.edu", "not-an-email", "two@college.edu"
    ]
    assert email_service.recipients == ["one@college.edu", "three@college.edu"]


def test_bulk_invite_requires_columns(client, admin_token):
    resp = client.post(
        "/api/admin/register-students",
        headers=auth(admin_token),
        files={"csvFile": ("students.csv", "mail,branch\na@college.edu,CS\n", "text/csv")},
    )
    assert resp.status_code == 400


def test_bulk_invite_normalizes_email_domain(client, admin_token, email_service):
    resp = client.post(
        "/api/admin/register-students",
        headers=auth(admin_token),
        files={"csvFile": (
            "students.csv", "email,department\nAsha.Rao@College.EDU,Computer Science\n", "text/csv"
        )},
    )
    assert resp.status_code == 201
    assert email_service.recipients == ["Asha.Rao@college.edu"]

    resp = client.post("/api/users/student-registration", json={
        "email": "Asha.Rao@College.EDU", "password": PASSWORD,
        "department": "Computer Science", "name": "Asha Rao"
    })
    assert resp.status_code == 201

    rows = execute_raw_sql("SELECT email, password FROM users WHERE role = 'student'")
    assert len(rows) == 1
    assert rows[0]["email"] == "Asha.Rao@college.edu"
    assert rows[0]["password"] is not None


# ------------------------------------------------------------------
# Profile (registration step 2)
# ------------------------------------------------------------------

def test_profile_submission_creates_then_updates(client, register_student):
    user_id, token = register_student("asha@college.edu")

    resp = client.post("/api/student/profile", json=profile_payload(user_id=user_id))
    assert resp.status_code == 201

    resp = client.post("/api/student/profile", json=profile_payload(user_id=user_id, cgpa=9.1, skills=["Go"]))
    assert resp.status_code == 200

    rows = execute_raw_sql("SELECT cgpa FROM profile WHERE user_id = :id", {"id": user_id})
    assert len(rows) == 1
    assert rows[0]["cgpa"] == pytest.approx(9.1)

    profile = client.get("/api/student/profile", headers=auth(token)).json()["profile"]
    assert profile["skills"] == ["Go"]
    assert profile["email"] == "asha@college.edu"
    assert profile["education_history"][0]["institution"] == "City School"
    assert profile["projects"][0]["name"] == "Portal"


def test_profile_put_upserts_own_profile(client, register_student):
    user_id, token = register_student("asha@college.edu")
    assert client.get("/api/student/profile", headers=auth(token)).status_code == 404

    resp = client.put("/api/student/profile", headers=auth(token), json=profile_payload(backlogs=2))
    assert resp.status_code == 200
    resp = client.put("/api/student/profile", headers=auth(token), json=profile_payload(backlogs=1))
    assert resp.status_code == 200

    rows = execute_raw_sql("SELECT backlogs FROM profile WHERE user_id = :id", {"id": user_id})
    assert rows == [{"backlogs": 1}]


@pytest.mark.parametrize("cgpa,expected", [(-1, 422), (10.1, 422), (0, 201), (10, 201)])
def test_cgpa_bounds(client, register_student, cgpa, expected):
    user_id, _ = register_student("asha@college.edu")
    resp = client.post("/api/student/profile", json=profile_payload(user_id=user_id, cgpa=cgpa))
    assert resp.status_code == expected


def test_negative_backlogs_rejected(client, register_student):
    user_id, _ = register_student("asha@college.edu")
    resp = client.post("/api/student/profile", json=profile_payload(user_id=user_id, backlogs=-1))
    assert resp.status_code == 422


def test_profile_for_unknown_user(client):
    resp = client.post("/api/student/profile", json=profile_payload(user_id=999))
    assert resp.status_code == 404


def test_profile_user_id_must_match_session(client, register_student):
    user_id, _ = register_student("asha@college.edu")
    _, other_token = register_student("ravi@college.edu")
    resp = client.post(
        "/api/student/profile", headers=auth(other_token), json=profile_payload(user_id=user_id)
    )
    assert resp.status_code == 403


def test_invalid_input_leaves_state_unchanged(client, register_student):
    user_id, _ = register_student("asha@college.edu")
    client.post("/api/student/profile", json=profile_payload(user_id=user_id, cgpa=11))
    assert execute_raw_sql("SELECT id FROM profile WHERE user_id = :id", {"id": user_id}) == []
