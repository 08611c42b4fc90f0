from datetime import date

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from extensions import db
from models import Batch, Schedule, Student
from models.attendance import ATTENDANCE_TYPES
from models.batch import MONTHLY_COUNT_KEYS
from routes.helpers import commit_and_notify
from utils.dates import is_valid_month, parse_iso_date
from utils.decorators import is_admin, role_required

batch_bp = Blueprint("batches", __name__, url_prefix="/api")


# =========================================================
# HELPERS
# =========================================================

def parse_optional_date(data, key):
    value = data.get(key)
    if not value:
        return None
    return parse_iso_date(value)


def parse_monthly_counts(data):
    counts = {}
    for key in MONTHLY_COUNT_KEYS:
        value = data.get(key, 0)
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"'{key}' must be a whole number") from None
        if number < 0:
            raise ValueError(f"'{key}' cannot be negative")
        counts[key] = number
    return counts


def apply_batch_fields(batch, data):
    """Copy request fields onto a batch. Raises ValueError on bad input."""
    if "batchNumber" in data:
        batch.batch_number = (data.get("batchNumber") or "").strip()
    if not batch.batch_number:
        raise ValueError("Batch number is required")

    if "startDate" in data:
        batch.start_date = parse_optional_date(data, "startDate")
    if "endDate" in data:
        batch.end_date = parse_optional_date(data, "endDate")
    if batch.start_date and batch.end_date and batch.end_date < batch.start_date:
        raise ValueError("End date cannot be before start date")

    if "batchType" in data:
        batch.batch_type = data.get("batchType") or "MCD"
    if "qrCode" in data:
        batch.qr_code = data.get("qrCode") or ""

    if "attendanceTypes" in data:
        types = data.get("attendanceTypes") or []
        invalid = [t for t in types if t not in ATTENDANCE_TYPES]
        if invalid:
            raise ValueError(f"Invalid attendance types: {', '.join(map(str, invalid))}")
        batch.attendance_types = list(types)

    if "monthlyData" in data:
        monthly = data.get("monthlyData") or {}
        cleaned = {}
        for month, counts in monthly.items():
            if not is_valid_month(month):
                raise ValueError(f"Invalid month: {month}")
            cleaned[month] = parse_monthly_counts(counts or {})
        batch.monthly_data = cleaned


# =========================================================
# BATCHES
# =========================================================

@batch_bp.route("/batches", methods=["GET"])
@login_required
def list_batches():
    batches = Batch.query.order_by(Batch.batch_number.asc()).all()
    return jsonify([b.to_dict() for b in batches])


@batch_bp.route("/batches", methods=["POST"])
@role_required("admin")
def create_batch():
    data = request.get_json(silent=True) or {}

    batch = Batch(batch_type="MCD", attendance_types=[], monthly_data={})
    if data.get("id"):
        batch.id = str(data["id"])

    try:
        apply_batch_fields(batch, data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    if Batch.query.filter_by(batch_number=batch.batch_number).first():
        return jsonify({"error": f"Batch {batch.batch_number} already exists!"}), 409

    try:
        db.session.add(batch)
        commit_and_notify()
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"id": batch.id}), 201


@batch_bp.route("/batches/<batch_id>", methods=["PUT"])
@role_required("admin")
def update_batch(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return jsonify({"error": "Batch not found"}), 404

    data = request.get_json(silent=True) or {}

    try:
        apply_batch_fields(batch, data)
        commit_and_notify()
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"changes": 1})


@batch_bp.route("/batches/<batch_id>/monthly-data/<month>", methods=["PUT"])
@role_required("admin")
def update_monthly_data(batch_id, month):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return jsonify({"error": "Batch not found"}), 404
    if not is_valid_month(month):
        return jsonify({"error": f"Invalid month: {month}"}), 400

    try:
        counts = parse_monthly_counts(request.get_json(silent=True) or {})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    # Reassign so the JSON column is marked dirty
    monthly = dict(batch.monthly_data or {})
    monthly[month] = counts
    batch.monthly_data = monthly

    commit_and_notify()
    return jsonify({"batchId": batch.id, "month": month, **counts})


@batch_bp.route("/batches/<batch_id>", methods=["DELETE"])
@role_required("admin")
def delete_batch(batch_id):
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return jsonify({"error": "Batch not found"}), 404

    try:
        # Students only hold a reference to their batch; they stay
        Student.query.filter_by(batch_id=batch.id).update({"batch_id": None})
        db.session.delete(batch)
        commit_and_notify()
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    current_app.logger.info("Deleted batch %s", batch_id)
    return jsonify({"changes": 1})


# =========================================================
# SCHEDULES (TASKS)
# =========================================================

def apply_schedule_fields(schedule, data):
    if "batchId" in data:
        batch = db.session.get(Batch, data.get("batchId") or "")
        if not batch:
            raise ValueError(f"Batch {data.get('batchId')} not found")
        schedule.batch_id = batch.id
    if "task" in data:
        schedule.task = (data.get("task") or "").strip()
    if "assignedDate" in data:
        schedule.assigned_date = parse_optional_date(data, "assignedDate")
    if "submissionDate" in data:
        schedule.submission_date = parse_optional_date(data, "submissionDate")

    if not schedule.batch_id or not schedule.task:
        raise ValueError("batchId and task are required")
    if not schedule.assigned_date or not schedule.submission_date:
        raise ValueError("assignedDate and submissionDate are required")
    if schedule.submission_date < schedule.assigned_date:
        raise ValueError("Submission date cannot be before the assigned date")


@batch_bp.route("/schedules", methods=["GET"])
@login_required
def list_schedules():
    q = Schedule.query
    batch_id = request.args.get("batchId")
    if not is_admin():
        q = q.filter_by(batch_id=current_user.batch_id)
    elif batch_id:
        q = q.filter_by(batch_id=batch_id)

    schedules = q.order_by(Schedule.assigned_date.asc()).all()
    return jsonify([s.to_dict() for s in schedules])


@batch_bp.route("/schedules", methods=["POST"])
@role_required("admin")
def create_schedule():
    data = request.get_json(silent=True) or {}
    schedule = Schedule()
    if data.get("id"):
        schedule.id = str(data["id"])

    try:
        apply_schedule_fields(schedule, data)
        db.session.add(schedule)
        commit_and_notify()
    except Exception as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"id": schedule.id}), 201


@batch_bp.route("/schedules/<schedule_id>", methods=["PUT"])
@role_required("admin")
def update_schedule(schedule_id):
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return jsonify({"error": "Schedule not found"}), 404

    try:
        apply_schedule_fields(schedule, request.get_json(silent=True) or {})
        commit_and_notify()
    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400

    return jsonify({"changes": 1})


@batch_bp.route("/schedules/<schedule_id>", methods=["DELETE"])
@role_required("admin")
def delete_schedule(schedule_id):
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return jsonify({"error": "Schedule not found"}), 404

    db.session.delete(schedule)
    commit_and_notify()
    return jsonify({"changes": 1})


@batch_bp.route("/schedules/<schedule_id>/submit", methods=["POST"])
@login_required
def submit_schedule(schedule_id):
    schedule = db.session.get(Schedule, schedule_id)
    if not schedule:
        return jsonify({"error": "Schedule not found"}), 404

    if not is_admin() and current_user.batch_id != schedule.batch_id:
        return jsonify({"error": "Unauthorized"}), 403

    data = request.get_json(silent=True) or {}
    try:
        schedule.submitted_date = parse_optional_date(data, "submittedDate") or date.today()
    except ValueError:
        return jsonify({"error": "submittedDate must be YYYY-MM-DD"}), 400

    commit_and_notify()
    return jsonify(schedule.to_dict())
