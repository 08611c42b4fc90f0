from datetime import date

from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import Interview, ResumeReview, Student
from routes.helpers import commit_and_notify
from utils.dates import parse_iso_date
from utils.decorators import can_access_student, role_required

review_bp = Blueprint("reviews", __name__, url_prefix="/api")


def record_date(data):
    return parse_iso_date(data["date"]) if data.get("date") else date.today()


# =========================================================
# RESUME REVIEWS
# =========================================================

@review_bp.route("/resume-reviews", methods=["GET"])
@role_required("admin")
def list_resume_reviews():
    reviews = ResumeReview.query.order_by(ResumeReview.date.desc()).all()
    return jsonify([r.to_dict() for r in reviews])


@review_bp.route("/resume-reviews", methods=["POST"])
@login_required
def add_resume_review():
    data = request.get_json(silent=True) or {}
    student_id = data.get("studentId")

    if not student_id or not can_access_student(student_id):
        return jsonify({"error": "Unauthorized"}), 403

    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"error": "Student not found"}), 404

    try:
        review = ResumeReview(
            student_id=student.id,
            batch_id=data.get("batchId") or student.batch_id,
            date=record_date(data),
            match_score=float(data["matchScore"]) if data.get("matchScore") is not None else None,
            resume_text=data.get("resumeText"),
            job_description=data.get("jobDescription"),
        )
        db.session.add(review)
        commit_and_notify()
    except (TypeError, ValueError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"id": review.id}), 201


# =========================================================
# INTERVIEWS
# =========================================================

@review_bp.route("/interviews", methods=["POST"])
@login_required
def add_interview():
    data = request.get_json(silent=True) or {}
    student_id = data.get("studentId")

    if not student_id or not can_access_student(student_id):
        return jsonify({"error": "Unauthorized"}), 403
    if not db.session.get(Student, student_id):
        return jsonify({"error": "Student not found"}), 404

    try:
        interview = Interview(
            student_id=student_id,
            interview_mode=data.get("interviewMode"),
            focus_area=data.get("focusArea"),
            questions=data.get("questions") or [],
            answers=data.get("answers") or [],
            scores=data.get("scores") or {},
            feedback=data.get("feedback") or {},
            date=record_date(data),
        )
        db.session.add(interview)
        commit_and_notify()
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"id": interview.id}), 201


@review_bp.route("/interviews/<student_id>", methods=["GET"])
@login_required
def list_interviews(student_id):
    if not can_access_student(student_id):
        return jsonify({"error": "Unauthorized"}), 403

    interviews = (
        Interview.query
        .filter_by(student_id=student_id)
        .order_by(Interview.date.desc())
        .all()
    )
    return jsonify([i.to_dict() for i in interviews])
