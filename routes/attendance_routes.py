from datetime import date, datetime

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import AttendanceRecord, Student
from models.attendance import ATTENDANCE_TYPES
from routes.helpers import commit_and_notify, run_bulk_import
from services.bulk_import import attendance_exists, write_attendance
from services.import_rows import validate_attendance_row, validate_attendance_upload
from utils.dates import month_bounds
from utils.decorators import is_admin, role_required

attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


@attendance_bp.route("", methods=["GET"])
@login_required
def list_attendance():
    q = AttendanceRecord.query
    student_id = request.args.get("studentId")
    if not is_admin():
        student_id = current_user.id
    if student_id:
        q = q.filter_by(student_id=student_id)

    month = request.args.get("month")
    if month:
        try:
            start, end = month_bounds(month)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        q = q.filter(AttendanceRecord.date >= start, AttendanceRecord.date < end)

    records = q.order_by(AttendanceRecord.date.asc()).all()
    return jsonify([r.to_dict() for r in records])


@attendance_bp.route("", methods=["POST"])
@role_required("admin")
def add_attendance():
    row = validate_attendance_row(None, request.get_json(silent=True) or {})

    if attendance_exists(db.session, row):
        return jsonify({
            "message": "Attendance for this date and type already exists for this student."
        }), 409

    try:
        record_id = write_attendance(db.session, row)
        commit_and_notify()
    except IntegrityError as exc:
        db.session.rollback()
        return jsonify({"error": str(exc.orig)}), 409

    return jsonify({"id": record_id}), 201


# =========================================================
# QR SCAN
# =========================================================

@attendance_bp.route("/scan", methods=["POST"])
@role_required("admin")
def scan_attendance():
    """Record attendance from a scanned student QR code.

    Class and HR sessions are marked present once per day. Labs keep one
    record per day whose in/out time is set by successive scans.
    """
    data = request.get_json(silent=True) or {}
    code = str(data.get("studentId") or data.get("qrCode") or "").strip()
    record_type = data.get("type") or "class"
    direction = data.get("direction") or "in"

    if record_type not in ATTENDANCE_TYPES:
        return jsonify({"error": f"Invalid attendance type: {record_type}"}), 400
    if direction not in ("in", "out"):
        return jsonify({"error": "direction must be 'in' or 'out'"}), 400

    student = db.session.get(Student, code) if code else None
    if not student:
        return jsonify({"error": "Invalid QR code - student not found"}), 404

    today = date.today()
    now = datetime.now().strftime("%H:%M:%S")

    record = AttendanceRecord.query.filter_by(
        student_id=student.id,
        date=today,
        type=record_type
    ).first()

    if record_type == "lab":
        status = 200
        if not record:
            record = AttendanceRecord(student_id=student.id, date=today, type="lab", present=True)
            db.session.add(record)
            status = 201
        if direction == "in":
            record.in_time = now
        else:
            record.out_time = now
    else:
        if record:
            return jsonify({"error": f"Attendance for {student.name} is already recorded today."}), 409
        record = AttendanceRecord(
            student_id=student.id,
            date=today,
            type=record_type,
            present=True,
            in_time=now,
            session_name=data.get("sessionName") if record_type == "hr_session" else None
        )
        db.session.add(record)
        status = 201

    try:
        commit_and_notify()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": f"Attendance for {student.name} is already recorded today."}), 409

    current_app.logger.info("QR %s attendance recorded for %s", record_type, student.student_id)
    return jsonify({"student": student.name, "record": record.to_dict()}), status


# =========================================================
# BULK UPLOAD
# =========================================================

@attendance_bp.route("/bulk", methods=["POST"])
@role_required("admin")
def bulk_upload_attendance():
    batch, month, rows = validate_attendance_upload(request.get_json(silent=True))
    return run_bulk_import(
        "attendance", rows, "Bulk attendance uploaded successfully.",
        batch=batch, month=month
    )
