"""
API tests for /classes, /all-classes and /faculties: role gating, lecturer assignment gate, faculty references.
"""
import pytest

from lecture_reports.models.school_class import SchoolClass
from lecture_reports.models.types import Role

MANAGERS = [Role.ADMIN, Role.PRINCIPAL_LECTURER, Role.PROGRAM_LEADER]


def _payload(build, **overrides):
    body = {
        "class_name": "BSc IT Year 2",
        "faculty_id": build.faculty_id(),
        "total_registered_students": 45,
        "venue": "Hall 6",
        "scheduled_time": "Mon 08:30",
    }
    body.update(overrides)
    return body


@pytest.mark.parametrize("role", MANAGERS)
def test_managers_create_class(client, build, role):
    _, headers = build.user_with_headers(role)
    r = client.post("/classes", headers=headers, json=_payload(build))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["class"]["class_name"] == "BSc IT Year 2"
    assert body["class"]["faculty_name"] == "Faculty of ICT"
    assert build.count(SchoolClass) == 1


@pytest.mark.parametrize("role", [Role.LECTURER, Role.STUDENT])
def test_lecturers_and_students_cannot_create_class(client, build, role):
    _, headers = build.user_with_headers(role)
    r = client.post("/classes", headers=headers, json=_payload(build))
    assert r.status_code == 403
    assert build.count(SchoolClass) == 0


def test_create_with_unknown_faculty_is_rejected(client, build):
    _, headers = build.user_with_headers(Role.ADMIN)
    r = client.post("/classes", headers=headers, json=_payload(build, faculty_id=9999))
    assert r.status_code == 400
    assert r.json() == {"error": "Faculty does not exist"}
    assert build.count(SchoolClass) == 0


@pytest.mark.parametrize("field", ["class_name", "venue", "scheduled_time", "faculty_id"])
def test_create_requires_every_field(client, build, field):
    _, headers = build.user_with_headers(Role.ADMIN)
    body = _payload(build)
    body.pop(field)
    r = client.post("/classes", headers=headers, json=body)
    assert r.status_code == 400
    assert field in r.json()["error"]


def test_registered_students_must_be_positive(client, build):
    _, headers = build.user_with_headers(Role.ADMIN)
    r = client.post("/classes", headers=headers, json=_payload(build, total_registered_students=0))
    assert r.status_code == 400
    assert build.count(SchoolClass) == 0


@pytest.mark.parametrize("role", list(Role))
def test_every_role_lists_classes(client, build, role):
    build.school_class()
    _, headers = build.user_with_headers(role)
    r = client.get("/classes", headers=headers)
    assert r.status_code == 200
    assert len(r.json()) == 1


@pytest.mark.parametrize("role,status", [
    (Role.LECTURER, 200), (Role.PRINCIPAL_LECTURER, 200), (Role.ADMIN, 200),
    (Role.PROGRAM_LEADER, 403), (Role.STUDENT, 403),
])
def test_all_classes_catalog(client, build, role, status):
    build.school_class()
    _, headers = build.user_with_headers(role)
    assert client.get("/all-classes", headers=headers).status_code == status


def test_assigned_lecturer_reads_class(client, build):
    lecturer, headers = build.user_with_headers(Role.LECTURER)
    cls = build.school_class(name="Assigned")
    build.assignment(lecturer, cls, build.course())
    r = client.get(f"/classes/{cls.id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["class_name"] == "Assigned"


def test_unassigned_lecturer_is_denied_even_for_missing_class(client, build):
    _, headers = build.user_with_headers(Role.LECTURER)
    cls = build.school_class()
    assert client.get(f"/classes/{cls.id}", headers=headers).status_code == 403
    r = client.get("/classes/9999", headers=headers)
    assert r.status_code == 403
    assert r.json() == {"error": "Access denied"}


def test_assignment_to_other_class_does_not_open_this_one(client, build):
    lecturer, headers = build.user_with_headers(Role.LECTURER)
    mine, other = build.school_class(), build.school_class()
    build.assignment(lecturer, mine, build.course())
    assert client.get(f"/classes/{other.id}", headers=headers).status_code == 403


@pytest.mark.parametrize("role", [Role.ADMIN, Role.STUDENT, Role.PROGRAM_LEADER])
def test_other_roles_read_any_class_and_get_404_when_missing(client, build, role):
    cls = build.school_class()
    _, headers = build.user_with_headers(role)
    assert client.get(f"/classes/{cls.id}", headers=headers).status_code == 200
    r = client.get("/classes/9999", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"error": "Class not found"}


def test_update_class(client, build):
    cls = build.school_class()
    _, headers = build.user_with_headers(Role.PRINCIPAL_LECTURER)
    r = client.put(f"/classes/{cls.id}", headers=headers, json=_payload(build, venue="Lab 2", total_registered_students=50))
    assert r.status_code == 200
    assert r.json()["class"]["venue"] == "Lab 2"
    stored = build.fetch(SchoolClass, cls.id)
    assert stored.venue == "Lab 2"
    assert stored.total_registered_students == 50


def test_update_missing_class_is_404(client, build):
    _, headers = build.user_with_headers(Role.ADMIN)
    r = client.put("/classes/9999", headers=headers, json=_payload(build))
    assert r.status_code == 404


def test_delete_class(client, build):
    cls = build.school_class()
    _, headers = build.user_with_headers(Role.ADMIN)
    r = client.delete(f"/classes/{cls.id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Class deleted successfully"
    assert build.fetch(SchoolClass, cls.id) is None


def test_class_with_lectures_cannot_be_deleted(client, build, lecture_setup):
    _, _, _, cls, _ = lecture_setup
    _, headers = build.user_with_headers(Role.ADMIN)
    r = client.delete(f"/classes/{cls.id}", headers=headers)
    assert r.status_code == 400
    assert build.fetch(SchoolClass, cls.id) is not None


@pytest.mark.parametrize("role,status", [
    (Role.ADMIN, 200), (Role.PRINCIPAL_LECTURER, 200), (Role.PROGRAM_LEADER, 200),
    (Role.LECTURER, 403), (Role.STUDENT, 403),
])
def test_faculties_are_seeded_and_gated(client, build, role, status):
    _, headers = build.user_with_headers(role)
    r = client.get("/faculties", headers=headers)
    assert r.status_code == status
    if status == 200:
        assert [f["name"] for f in r.json()] == ["Faculty of ICT", "Faculty of Business"]


def test_get_faculty_and_missing_faculty(client, build):
    _, headers = build.user_with_headers(Role.ADMIN)
    fid = build.faculty_id()
    assert client.get(f"/faculties/{fid}", headers=headers).json()["name"] == "Faculty of ICT"
    r = client.get("/faculties/9999", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"error": "Faculty not found"}
