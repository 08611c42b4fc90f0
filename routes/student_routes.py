from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash

from extensions import db
from models import Student
from routes.helpers import commit_and_notify, run_bulk_import
from services.bulk_import import student_exists, write_student
from services.import_rows import (
    InvalidFieldError, parse_flag, resolve_batch, validate_student_row
)
from utils.decorators import can_access_student, is_admin, role_required

student_bp = Blueprint("students", __name__, url_prefix="/api/students")

EDITABLE_TEXT_FIELDS = {
    "studentId": "student_id",
    "name": "name",
    "email": "email",
    "mobile": "mobile",
    "photo": "photo",
}
RESUME_STATUSES = ("pending", "approved", "rejected")


# =========================================================
# READ
# =========================================================

@student_bp.route("", methods=["GET"])
@login_required
def list_students():
    if is_admin():
        students = Student.query.order_by(Student.student_id.asc()).all()
    else:
        students = [current_user]

    batch_id = request.args.get("batchId")
    if batch_id:
        students = [s for s in students if s.batch_id == batch_id]

    return jsonify([s.to_dict(include_records=True) for s in students])


@student_bp.route("/<student_id>", methods=["GET"])
@login_required
def get_student(student_id):
    if not can_access_student(student_id):
        return jsonify({"error": "Unauthorized"}), 403

    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"error": "Student not found"}), 404

    return jsonify(student.to_dict(include_records=True))


# =========================================================
# SINGLE ADD / EDIT / DELETE
# =========================================================

@student_bp.route("", methods=["POST"])
@role_required("admin")
def add_student():
    data = request.get_json(silent=True) or {}
    row = validate_student_row(None, data)

    if student_exists(db.session, row):
        return jsonify({"error": f"Student ID {row.student_id} already exists!"}), 409
    if Student.query.filter_by(email=row.email).first():
        return jsonify({"error": f"Email {row.email} is already registered."}), 409

    try:
        new_id = write_student(db.session, row)
        commit_and_notify()
    except IntegrityError as exc:
        db.session.rollback()
        return jsonify({"error": str(exc.orig)}), 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to add student")
        return jsonify({"error": str(e)}), 500

    return jsonify({"id": new_id}), 201


@student_bp.route("/<student_id>", methods=["PUT"])
@role_required("admin")
def update_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"error": "Student not found"}), 404

    data = request.get_json(silent=True) or {}

    for key, attr in EDITABLE_TEXT_FIELDS.items():
        if key in data and data[key] is not None:
            value = str(data[key]).strip()
            if not value and key != "photo":
                return jsonify({"error": f"'{key}' cannot be empty"}), 400
            setattr(student, attr, value)

    if "batchId" in data:
        student.batch_id = resolve_batch(None, "batchId", data["batchId"]).id if data["batchId"] else None

    if "active" in data:
        student.active = parse_flag(None, data, "active", student.active)
    if "profileComplete" in data:
        student.profile_complete = parse_flag(None, data, "profileComplete", student.profile_complete)
    if "education" in data:
        if not isinstance(data["education"], list):
            raise InvalidFieldError(None, "education", data["education"], "a list")
        student.education = data["education"]
    if "resumeStatus" in data:
        if data["resumeStatus"] not in RESUME_STATUSES + (None,):
            raise InvalidFieldError(None, "resumeStatus", data["resumeStatus"], "pending, approved or rejected")
        student.resume_status = data["resumeStatus"]
    if data.get("password"):
        student.password_hash = generate_password_hash(data["password"])

    try:
        commit_and_notify()
    except IntegrityError as exc:
        db.session.rollback()
        return jsonify({"error": str(exc.orig)}), 409
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"changes": 1})


@student_bp.route("/<student_id>", methods=["DELETE"])
@role_required("admin")
def delete_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"error": "Student not found"}), 404

    # Hard delete; marks and attendance go with the student
    db.session.delete(student)
    commit_and_notify()
    current_app.logger.info("Deleted student %s", student_id)

    return jsonify({"changes": 1})


@student_bp.route("/<student_id>/profile", methods=["PUT"])
@login_required
def complete_profile(student_id):
    if not can_access_student(student_id):
        return jsonify({"error": "Unauthorized"}), 403

    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"error": "Student not found"}), 404

    data = request.get_json(silent=True) or {}
    education = data.get("education", student.education or [])
    if not isinstance(education, list) or not education:
        return jsonify({"error": "At least one education entry is required."}), 400

    experience = data.get("experience")
    if experience is not None and not isinstance(experience, dict):
        return jsonify({"error": "Experience must be an object."}), 400

    student.education = education
    student.experience = experience
    if data.get("photo") is not None:
        student.photo = data["photo"]
    if data.get("password"):
        student.password_hash = generate_password_hash(data["password"])
    student.profile_complete = True

    commit_and_notify()
    return jsonify(student.to_dict())


# =========================================================
# BULK UPLOAD
# =========================================================

@student_bp.route("/bulk", methods=["POST"])
@role_required("admin")
def bulk_upload_students():
    rows = request.get_json(silent=True)
    return run_bulk_import("students", rows, "Bulk upload successful.")
