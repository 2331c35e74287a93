import json

from sqlalchemy import text

from conftest import auth
from placement_portal.db.postgres import get_db_session, execute_raw_sql


def _post(client, admin_token, content, departments):
    resp = client.post("/api/admin/messages", headers=auth(admin_token), json={
        "content": content, "departments": departments
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_and_list_messages(client, admin_token):
    message = _post(client, admin_token, "Resume workshop on Friday", ["Computer Science", "all"])
    assert message["departments"] == ["all"]

    listed = client.get("/api/admin/messages", headers=auth(admin_token)).json()["messages"]
    assert [m["id"] for m in listed] == [message["id"]]


def test_create_message_validation(client, admin_token):
    for payload in (
        {"content": "Hi", "departments": []},
        {"content": "   ", "departments": ["all"]},
    ):
        assert client.post("/api/admin/messages", headers=auth(admin_token), json=payload).status_code == 422

    resp = client.post("/api/admin/messages", headers=auth(admin_token), json={
        "content": "Hi", "departments": ["Astrology"]
    })
    assert resp.status_code == 400


def test_students_see_only_their_department(client, admin_token, register_student):
    _, cs_token = register_student("cs@college.edu", "Computer Science")
    _, mech_token = register_student("mech@college.edu", "Mechanical Engineering")

    everyone = _post(client, admin_token, "Placement drive next week", ["all"])
    cs_only = _post(client, admin_token, "CS aptitude test", ["Computer Science"])

    cs_messages = client.get("/api/student/messages", headers=auth(cs_token)).json()["messages"]
    mech_messages = client.get("/api/student/messages", headers=auth(mech_token)).json()["messages"]

    assert {m["id"] for m in cs_messages} == {everyone["id"], cs_only["id"]}
    assert [m["id"] for m in mech_messages] == [everyone["id"]]


def test_student_messages_tolerate_legacy_encodings(client, register_student):
    _, token = register_student("cs@college.edu", "Computer Science")
    with get_db_session() as db:
        for content, raw in (
            ("double", json.dumps(json.dumps(["Computer Science"]))),
            ("garbage", "Computer Science"),
            ("other", json.dumps(["Civil Engineering"])),
        ):
            db.execute(
                text("INSERT INTO messages (content, departments) VALUES (:c, :d)"),
                {"c": content, "d": raw}
            )

    messages = client.get("/api/student/messages", headers=auth(token)).json()["messages"]
    assert [m["content"] for m in messages] == ["double"]


def test_delete_message(client, admin_token):
    message = _post(client, admin_token, "Old news", ["all"])
    assert client.delete(f"/api/admin/messages/{message['id']}", headers=auth(admin_token)).status_code == 200
    assert client.delete(f"/api/admin/messages/{message['id']}", headers=auth(admin_token)).status_code == 404
    assert execute_raw_sql("SELECT id FROM messages") == []


def test_notify_targets_department_and_aggregates_failures(
    client, admin_token, register_student, email_service
):
    register_student("cs1@college.edu", "Computer Science")
    register_student("cs2@college.edu", "Computer Science")
    register_student("it@college.edu", "Information Technology")
    register_student("civil@college.edu", "Civil Engineering")
    email_service.fail_for.add("cs2@college.edu")

    message = _post(client, admin_token, "Interviews", ["Computer Science", "Information Technology"])
    resp = client.post(f"/api/admin/messages/{message['id']}/notify", headers=auth(admin_token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["recipient_count"] == 3
    assert body["sent"] == 2
    assert body["failed"] == ["cs2@college.edu"]
    assert email_service.recipients == ["cs1@college.edu", "it@college.edu"]


def test_notify_all_reaches_every_student(client, admin_token, register_student, email_service):
    register_student("cs@college.edu", "Computer Science")
    register_student("civil@college.edu", "Civil Engineering")

    message = _post(client, admin_token, "Holiday", ["all"])
    body = client.post(f"/api/admin/messages/{message['id']}/notify", headers=auth(admin_token)).json()

    assert body["sent"] == 2
    assert sorted(email_service.recipients) == ["civil@college.edu", "cs@college.edu"]


def test_notify_missing_message(client, admin_token):
    assert client.post("/api/admin/messages/999/notify", headers=auth(admin_token)).status_code == 404
