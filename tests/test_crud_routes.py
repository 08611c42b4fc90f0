from datetime import date

from conftest import FEBRUARY_PLAN, received_events
from extensions import db
from models import AttendanceRecord, Batch, Interview, Mark, Schedule, Student


# =========================================================
# AUTH
# =========================================================

class TestAuth:
    def test_admin_login(self, client):
        response = client.post(
            "/api/login",
            json={"identifier": "admin@vcube.com", "credential": "admin@1234", "role": "admin"},
        )

        assert response.status_code == 200
        assert response.get_json()["role"] == "admin"
        assert client.get("/api/me").get_json()["id"] == "admin"

    def test_wrong_password(self, client, students):
        response = client.post(
            "/api/login",
            json={"identifier": "s1@example.com", "credential": "wrong", "role": "student"},
        )
        assert response.status_code == 401

    def test_inactive_student_cannot_log_in(self, client, students):
        students[1].active = False
        db.session.commit()

        response = client.post(
            "/api/login",
            json={"identifier": "s2@example.com", "credential": "9000000002", "role": "student"},
        )
        assert response.status_code == 401

    def test_missing_credentials(self, client):
        assert client.post("/api/login", json={"identifier": "x"}).status_code == 400

    def test_protected_routes_need_login(self, client):
        assert client.get("/api/students").status_code == 401
        assert client.get("/api/reports/monthly?batchId=B1&month=2024-02").status_code == 401

    def test_logout(self, admin_client):
        assert admin_client.post("/api/logout").status_code == 200
        assert admin_client.get("/api/me").status_code == 401


# =========================================================
# STUDENTS
# =========================================================

class TestStudents:
    def test_admin_lists_all_with_records(self, admin_client, students):
        db.session.add(Mark(student_id="S1", exam="Midterm", score=80, type="exam", date=date(2024, 1, 10)))
        db.session.commit()

        body = admin_client.get("/api/students").get_json()

        assert [s["id"] for s in body] == ["S1", "S2", "S3"]
        assert body[0]["marks"][0]["exam"] == "Midterm"
        assert body[0]["qrCode"] == "S1"

    def test_filter_by_batch(self, admin_client, students):
        body = admin_client.get("/api/students?batchId=B2").get_json()
        assert [s["id"] for s in body] == ["S3"]

    def test_student_sees_only_self(self, student_client):
        assert [s["id"] for s in student_client.get("/api/students").get_json()] == ["S1"]
        assert student_client.get("/api/students/S1").status_code == 200
        assert student_client.get("/api/students/S2").status_code == 403

    def test_create_student(self, admin_client, batches, socket_client):
        response = admin_client.post("/api/students", json={
            "studentId": "EXT-100", "name": "Lata N", "email": "lata@example.com",
            "mobile": "9200000000", "batchId": "B1",
        })

        assert response.status_code == 201
        assert db.session.get(Student, response.get_json()["id"]).student_id == "EXT-100"
        assert received_events(socket_client) == ["data_changed"]

    def test_create_duplicate_student_id(self, admin_client, students):
        response = admin_client.post("/api/students", json={
            "studentId": "EXT-S1", "name": "Dup", "email": "dup@example.com",
            "mobile": "9200000001", "batchId": "B1",
        })
        assert response.status_code == 409

    def test_create_duplicate_email(self, admin_client, students):
        response = admin_client.post("/api/students", json={
            "studentId": "EXT-101", "name": "Dup", "email": "s1@example.com",
            "mobile": "9200000001", "batchId": "B1",
        })
        assert response.status_code == 409

    def test_create_invalid_student(self, admin_client, batches):
        response = admin_client.post("/api/students", json={"studentId": "EXT-102"})

        assert response.status_code == 400
        assert "Missing data" in response.get_json()["error"]

    def test_update_student(self, admin_client, students):
        response = admin_client.put("/api/students/S2", json={"name": "Ravi K", "batchId": "MCD-02", "active": "no"})

        assert response.status_code == 200
        student = db.session.get(Student, "S2")
        assert (student.name, student.batch_id, student.active) == ("Ravi K", "B2", False)

    def test_update_rejects_empty_name(self, admin_client, students):
        assert admin_client.put("/api/students/S2", json={"name": " "}).status_code == 400

    def test_delete_removes_records(self, admin_client, students):
        db.session.add_all([
            Mark(student_id="S2", exam="Midterm", score=60, type="exam", date=date(2024, 2, 10)),
            AttendanceRecord(student_id="S2", date=date(2024, 2, 5), type="class", present=True),
        ])
        db.session.commit()

        assert admin_client.delete("/api/students/S2").status_code == 200
        assert db.session.get(Student, "S2") is None
        assert Mark.query.filter_by(student_id="S2").count() == 0
        assert AttendanceRecord.query.filter_by(student_id="S2").count() == 0

    def test_delete_missing_student(self, admin_client, students):
        assert admin_client.delete("/api/students/NOPE").status_code == 404

    def test_student_completes_profile(self, student_client):
        response = student_client.put("/api/students/S1/profile", json={
            "education": [{"degree": "B.Tech", "year": 2023}],
            "experience": {"company": "Acme", "years": 1},
            "password": "new-secret",
        })

        assert response.status_code == 200
        assert response.get_json()["profileComplete"] is True

    def test_profile_needs_education(self, student_client):
        assert student_client.put("/api/students/S1/profile", json={"education": []}).status_code == 400

    def test_student_cannot_edit_other_profile(self, student_client):
        response = student_client.put("/api/students/S2/profile", json={"education": [{"degree": "BSc"}]})
        assert response.status_code == 403

    def test_student_cannot_create(self, student_client):
        assert student_client.post("/api/students", json={}).status_code == 403


# =========================================================
# BATCHES & SCHEDULES
# =========================================================

class TestBatches:
    def test_list(self, admin_client, batches):
        body = admin_client.get("/api/batches").get_json()

        assert [b["batchNumber"] for b in body] == ["MCD-01", "MCD-02"]
        assert body[0]["monthlyData"]["2024-02"] == FEBRUARY_PLAN

    def test_create(self, admin_client, batches):
        response = admin_client.post("/api/batches", json={
            "batchNumber": "MCD-03", "startDate": "2024-03-01", "endDate": "2024-08-31",
            "attendanceTypes": ["class", "lab"],
        })

        assert response.status_code == 201
        batch = db.session.get(Batch, response.get_json()["id"])
        assert batch.start_date == date(2024, 3, 1)
        assert batch.batch_type == "MCD"

    def test_create_duplicate_number(self, admin_client, batches):
        assert admin_client.post("/api/batches", json={"batchNumber": "MCD-01"}).status_code == 409

    def test_create_rejects_reversed_dates(self, admin_client, batches):
        response = admin_client.post("/api/batches", json={
            "batchNumber": "MCD-04", "startDate": "2024-05-01", "endDate": "2024-04-01",
        })
        assert response.status_code == 400

    def test_set_monthly_data(self, admin_client, batches):
        response = admin_client.put(
            "/api/batches/B2/monthly-data/2024-03",
            json={"classes": 10, "labs": 4, "exams": 2, "mocks": 1},
        )

        assert response.status_code == 200
        assert db.session.get(Batch, "B2").monthly_data["2024-03"]["classes"] == 10

    def test_monthly_data_rejects_negative_counts(self, admin_client, batches):
        response = admin_client.put("/api/batches/B2/monthly-data/2024-03", json={"classes": -1})
        assert response.status_code == 400

    def test_monthly_data_rejects_bad_month(self, admin_client, batches):
        assert admin_client.put("/api/batches/B2/monthly-data/March", json={}).status_code == 400

    def test_delete_keeps_students(self, admin_client, students):
        assert admin_client.delete("/api/batches/B2").status_code == 200

        assert db.session.get(Batch, "B2") is None
        assert db.session.get(Student, "S3").batch_id is None


class TestSchedules:
    def create(self, client, **overrides):
        body = {"batchId": "B1", "task": "Build a REST API", "assignedDate": "2024-02-01",
                "submissionDate": "2024-02-10"}
        body.update(overrides)
        return client.post("/api/schedules", json=body)

    def test_create_and_filter(self, admin_client, batches):
        assert self.create(admin_client).status_code == 201
        assert self.create(admin_client, batchId="B2", task="SQL drills").status_code == 201

        body = admin_client.get("/api/schedules?batchId=B2").get_json()
        assert [s["task"] for s in body] == ["SQL drills"]

    def test_submission_before_assignment(self, admin_client, batches):
        assert self.create(admin_client, submissionDate="2024-01-10").status_code == 400

    def test_unknown_batch(self, admin_client, batches):
        assert self.create(admin_client, batchId="B9").status_code == 400

    def test_update_and_delete(self, admin_client, batches):
        schedule_id = self.create(admin_client).get_json()["id"]

        assert admin_client.put(f"/api/schedules/{schedule_id}", json={"task": "Build a CLI"}).status_code == 200
        assert db.session.get(Schedule, schedule_id).task == "Build a CLI"
        assert admin_client.delete(f"/api/schedules/{schedule_id}").status_code == 200
        assert db.session.get(Schedule, schedule_id) is None

    def test_student_sees_and_submits_own_batch_schedule(self, app, students):
        db.session.add_all([
            Schedule(id="T1", batch_id="B1", task="Build a REST API",
                     assigned_date=date(2024, 2, 1), submission_date=date(2024, 2, 10)),
            Schedule(id="T2", batch_id="B2", task="SQL drills",
                     assigned_date=date(2024, 2, 1), submission_date=date(2024, 2, 10)),
        ])
        db.session.commit()

        client = app.test_client()
        client.post("/api/login", json={"identifier": "s1@example.com", "credential": "9000000001"})

        assert [s["id"] for s in client.get("/api/schedules").get_json()] == ["T1"]

        response = client.post("/api/schedules/T1/submit", json={"submittedDate": "2024-02-09"})
        assert response.status_code == 200
        assert response.get_json()["submittedDateByStudent"] == "2024-02-09"

        assert client.post("/api/schedules/T2/submit", json={}).status_code == 403


# =========================================================
# MARKS
# =========================================================

class TestMarks:
    MIDTERM = {"studentId": "S1", "exam": "Midterm", "score": 80, "type": "exam", "date": "2024-01-10"}

    def test_add_then_duplicate(self, admin_client, students):
        assert admin_client.post("/api/marks", json=self.MIDTERM).status_code == 201

        response = admin_client.post("/api/marks", json=self.MIDTERM)
        assert response.status_code == 409
        assert Mark.query.count() == 1

    def test_invalid_mark(self, admin_client, students):
        assert admin_client.post("/api/marks", json={**self.MIDTERM, "type": "quiz"}).status_code == 400

    def test_update_overwrites_by_id(self, admin_client, students):
        mark_id = admin_client.post("/api/marks", json=self.MIDTERM).get_json()["id"]

        response = admin_client.put(f"/api/marks/{mark_id}", json={"score": 92})

        assert response.status_code == 200
        assert db.session.get(Mark, mark_id).score == 92.0

    def test_update_into_existing_key_conflicts(self, admin_client, students):
        admin_client.post("/api/marks", json=self.MIDTERM)
        other_id = admin_client.post("/api/marks", json={**self.MIDTERM, "exam": "Final"}).get_json()["id"]

        assert admin_client.put(f"/api/marks/{other_id}", json={"exam": "Midterm"}).status_code == 409

    def test_delete(self, admin_client, students):
        mark_id = admin_client.post("/api/marks", json=self.MIDTERM).get_json()["id"]

        assert admin_client.delete(f"/api/marks/{mark_id}").status_code == 200
        assert admin_client.delete(f"/api/marks/{mark_id}").status_code == 404

    def test_student_only_sees_own_marks(self, student_client):
        db.session.add_all([
            Mark(student_id="S1", exam="Midterm", score=80, type="exam", date=date(2024, 1, 10)),
            Mark(student_id="S2", exam="Midterm", score=60, type="exam", date=date(2024, 1, 10)),
        ])
        db.session.commit()

        body = student_client.get("/api/marks?studentId=S2").get_json()
        assert [m["studentId"] for m in body] == ["S1"]


# =========================================================
# ATTENDANCE
# =========================================================

class TestAttendance:
    RECORD = {"studentId": "S1", "date": "2024-02-05", "type": "class", "present": True}

    def test_add_then_duplicate(self, admin_client, students):
        assert admin_client.post("/api/attendance", json=self.RECORD).status_code == 201
        assert admin_client.post("/api/attendance", json=self.RECORD).status_code == 409

    def test_month_filter(self, admin_client, students):
        admin_client.post("/api/attendance", json=self.RECORD)
        admin_client.post("/api/attendance", json={**self.RECORD, "date": "2024-03-04"})

        body = admin_client.get("/api/attendance?studentId=S1&month=2024-02").get_json()
        assert [r["date"] for r in body] == ["2024-02-05"]
        assert admin_client.get("/api/attendance?month=2024-2").status_code == 400

    def test_scan_class_once_per_day(self, admin_client, students):
        first = admin_client.post("/api/attendance/scan", json={"qrCode": "S1", "type": "class"})
        second = admin_client.post("/api/attendance/scan", json={"qrCode": "S1", "type": "class"})

        assert first.status_code == 201
        assert first.get_json()["record"]["present"] is True
        assert second.status_code == 409

    def test_scan_lab_in_then_out(self, admin_client, students):
        scan_in = admin_client.post("/api/attendance/scan", json={"studentId": "S1", "type": "lab", "direction": "in"})
        scan_out = admin_client.post("/api/attendance/scan", json={"studentId": "S1", "type": "lab", "direction": "out"})

        assert (scan_in.status_code, scan_out.status_code) == (201, 200)
        record = AttendanceRecord.query.filter_by(student_id="S1", type="lab", date=date.today()).one()
        assert record.in_time and record.out_time

    def test_scan_unknown_code(self, admin_client, students):
        response = admin_client.post("/api/attendance/scan", json={"qrCode": "GHOST"})
        assert response.status_code == 404

    def test_scan_numeric_code(self, admin_client, students):
        response = admin_client.post("/api/attendance/scan", json={"qrCode": 12345, "type": "class"})

        assert response.status_code == 404
        assert response.get_json()["error"] == "Invalid QR code - student not found"

    def test_scan_bad_direction(self, admin_client, students):
        response = admin_client.post("/api/attendance/scan", json={"qrCode": "S1", "type": "lab", "direction": "up"})
        assert response.status_code == 400


# =========================================================
# RESUME REVIEWS & INTERVIEWS
# =========================================================

class TestReviews:
    def test_student_records_resume_review(self, student_client):
        response = student_client.post("/api/resume-reviews", json={
            "studentId": "S1", "matchScore": 72, "resumeText": "Python developer",
            "jobDescription": "Backend engineer",
        })

        assert response.status_code == 201
        assert student_client.get("/api/resume-reviews").status_code == 403

    def test_admin_lists_resume_reviews(self, admin_client, students):
        admin_client.post("/api/resume-reviews", json={"studentId": "S2", "matchScore": 55, "date": "2024-02-01"})

        body = admin_client.get("/api/resume-reviews").get_json()
        assert body[0]["studentId"] == "S2"
        assert body[0]["batchId"] == "B1"

    def test_student_cannot_review_for_others(self, student_client):
        assert student_client.post("/api/resume-reviews", json={"studentId": "S2"}).status_code == 403

    def test_interviews(self, student_client):
        response = student_client.post("/api/interviews", json={
            "studentId": "S1", "interviewMode": "technical", "focusArea": "Python",
            "questions": ["What is a generator?"], "answers": ["A lazy iterator"],
            "scores": {"overall": 7}, "feedback": {"summary": "Good"}, "date": "2024-02-12",
        })

        assert response.status_code == 201
        assert Interview.query.count() == 1

        body = student_client.get("/api/interviews/S1").get_json()
        assert body[0]["scores"] == {"overall": 7}
        assert student_client.get("/api/interviews/S2").status_code == 403
