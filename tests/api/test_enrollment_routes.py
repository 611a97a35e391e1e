"""Admissions, attendance and promotions over HTTP"""

import pytest
from fastapi import status

from models.academic import ClassLevel


def _application(school_data, **overrides):
    return {
        "student_name": "Brian Otieno",
        "date_of_birth": "2014-06-12",
        "gender": "Male",
        "applied_class_id": school_data["class_id"],
        "admission_date": "2025-01-06",
        **overrides,
    }


@pytest.mark.asyncio
async def test_admission_approval_flow(client, admin_headers, school_data):
    created = await client.post(
        "/admissions", json=_application(school_data), headers=admin_headers
    )
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["status"] == "Pending"
    admission_id = created.json()["id"]

    pending = await client.get("/admissions", params={"status": "Pending"}, headers=admin_headers)
    assert [a["id"] for a in pending.json()] == [admission_id]

    approved = await client.post(f"/admissions/{admission_id}/approve", headers=admin_headers)
    assert approved.status_code == status.HTTP_200_OK
    student = approved.json()
    assert student["admission_number"].startswith("ADM-")
    assert student["class_id"] == school_data["class_id"]

    detail = await client.get(f"/admissions/{admission_id}", headers=admin_headers)
    assert detail.json()["status"] == "Approved"
    assert detail.json()["student_id"] == student["id"]

    enrolled = await client.get(f"/students/{student['id']}", headers=admin_headers)
    assert enrolled.status_code == status.HTTP_200_OK

    logs = await client.get("/logs", params={"module": "STUDENT"}, headers=admin_headers)
    assert "approved" in {item["action"] for item in logs.json()["items"]}


@pytest.mark.asyncio
async def test_second_decision_is_rejected(client, admin_headers, school_data):
    created = await client.post(
        "/admissions", json=_application(school_data), headers=admin_headers
    )
    admission_id = created.json()["id"]

    rejected = await client.post(f"/admissions/{admission_id}/reject", headers=admin_headers)
    assert rejected.json()["status"] == "Rejected"

    response = await client.post(
        f"/admissions/{admission_id}/approve", json={}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_unknown_admission(client, admin_headers, school_data):
    response = await client.get("/admissions/missing", headers=admin_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_mark_and_list_attendance(client, admin_headers, school_data):
    register = {
        "class_id": school_data["class_id"],
        "attendance_date": "2025-02-03",
        "records": [{"student_id": school_data["student_id"], "status": "Absent"}],
    }

    marked = await client.post("/attendance", json=register, headers=admin_headers)
    assert marked.status_code == status.HTTP_200_OK

    register["records"][0]["status"] = "Excused"
    await client.post("/attendance", json=register, headers=admin_headers)

    listed = await client.get(
        "/attendance",
        params={"class_id": school_data["class_id"], "attendance_date": "2025-02-03"},
        headers=admin_headers,
    )
    assert listed.status_code == status.HTTP_200_OK
    assert [(r["student_id"], r["status"]) for r in listed.json()] == [
        (school_data["student_id"], "Excused")
    ]


@pytest.mark.asyncio
async def test_attendance_rejects_unknown_status(client, admin_headers, school_data):
    response = await client.post(
        "/attendance",
        json={
            "class_id": school_data["class_id"],
            "attendance_date": "2025-02-03",
            "records": [{"student_id": school_data["student_id"], "status": "Asleep"}],
        },
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_promotion_over_http(client, admin_headers, school_data, test_db):
    grade_6 = ClassLevel(name="Grade 6", level="Primary")
    test_db.add(grade_6)
    await test_db.commit()

    response = await client.post(
        "/promotions",
        json={
            "student_ids": [school_data["student_id"]],
            "from_class_id": school_data["class_id"],
            "to_class_id": grade_6.id,
            "academic_year_id": school_data["year_id"],
            "promotion_date": "2025-07-01",
        },
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["skipped"] == []
    assert response.json()["promoted"][0]["to_class_id"] == grade_6.id

    student = await client.get(f"/students/{school_data['student_id']}", headers=admin_headers)
    assert student.json()["class_id"] == grade_6.id
    assert student.json()["section_id"] is None

    history = await client.get(
        "/promotions", params={"student_id": school_data["student_id"]}, headers=admin_headers
    )
    assert len(history.json()) == 1


@pytest.mark.asyncio
async def test_enrollment_requires_student_permission(client, accountant_headers, school_data):
    register = {
        "class_id": school_data["class_id"],
        "attendance_date": "2025-02-03",
        "records": [{"student_id": school_data["student_id"], "status": "Present"}],
    }

    for method, url, body in (
        ("post", "/attendance", register),
        ("post", "/admissions", _application(school_data)),
        ("get", "/admissions", None),
    ):
        kwargs = {"json": body} if body is not None else {}
        response = await getattr(client, method)(url, headers=accountant_headers, **kwargs)
        assert response.status_code == status.HTTP_403_FORBIDDEN, url
        assert response.json()["error"] == "PERMISSION_DENIED"
