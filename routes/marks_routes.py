from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import Mark
from routes.helpers import commit_and_notify, run_bulk_import
from services.bulk_import import mark_exists, write_mark
from services.import_rows import validate_mark_row
from utils.decorators import is_admin, role_required

marks_bp = Blueprint("marks", __name__, url_prefix="/api/marks")


@marks_bp.route("", methods=["GET"])
@login_required
def list_marks():
    q = Mark.query
    student_id = request.args.get("studentId")
    if not is_admin():
        student_id = current_user.id
    if student_id:
        q = q.filter_by(student_id=student_id)

    marks = q.order_by(Mark.date.asc(), Mark.exam.asc()).all()
    return jsonify([m.to_dict() for m in marks])


@marks_bp.route("", methods=["POST"])
@role_required("admin")
def add_mark():
    row = validate_mark_row(None, request.get_json(silent=True) or {})

    if mark_exists(db.session, row):
        return jsonify({
            "message": "Mark for this exam, date and type already exists for this student."
        }), 409

    try:
        mark_id = write_mark(db.session, row)
        commit_and_notify()
    except IntegrityError as exc:
        db.session.rollback()
        return jsonify({"error": str(exc.orig)}), 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to add mark")
        return jsonify({"error": str(e)}), 500

    return jsonify({"id": mark_id}), 201


@marks_bp.route("/<mark_id>", methods=["PUT"])
@role_required("admin")
def update_mark(mark_id):
    mark = db.session.get(Mark, mark_id)
    if not mark:
        return jsonify({"error": "Mark not found"}), 404

    # Explicit edits overwrite by primary key
    merged = {**mark.to_dict(), **(request.get_json(silent=True) or {})}
    merged.pop("batchId", None)
    row = validate_mark_row(None, merged)

    mark.student_id = row.student_id
    mark.exam = row.exam
    mark.score = row.score
    mark.type = row.type
    mark.date = row.date

    try:
        commit_and_notify()
    except IntegrityError:
        db.session.rollback()
        return jsonify({
            "message": "Another mark for this exam, date and type already exists for this student."
        }), 409

    return jsonify({"changes": 1})


@marks_bp.route("/<mark_id>", methods=["DELETE"])
@role_required("admin")
def delete_mark(mark_id):
    mark = db.session.get(Mark, mark_id)
    if not mark:
        return jsonify({"error": "Mark not found"}), 404

    db.session.delete(mark)
    commit_and_notify()
    return jsonify({"changes": 1})


@marks_bp.route("/bulk", methods=["POST"])
@role_required("admin")
def bulk_upload_marks():
    rows = request.get_json(silent=True)
    return run_bulk_import("marks", rows, "Bulk marks uploaded successfully.")
