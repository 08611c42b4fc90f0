"""
Row validation for the bulk upload endpoints.

Uploaded rows arrive as loose JSON objects (the frontend has already parsed
the spreadsheet). Each validator turns one row into a typed record ready for
insertion, or raises an ImportValidationError naming the row and the field.
Validators only read from the database.
"""
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from extensions import db
from models import Batch, Student
from models.attendance import ATTENDANCE_TYPES
from models.mark import MARK_TYPES
from utils.dates import is_valid_month, month_of, parse_iso_date

TRUE_VALUES = {"yes", "y", "true", "1", "present"}
FALSE_VALUES = {"no", "n", "false", "0", "absent"}


# =========================================================
# ERRORS
# =========================================================

class ImportValidationError(Exception):
    """A row (or the upload envelope) failed validation. Aborts the import."""

    def __init__(self, row, message, field=None):
        self.row = row
        self.field = field
        self.detail = message
        super().__init__(f"Row {row}: {message}" if row else message)


class MissingFieldError(ImportValidationError):
    def __init__(self, row, field):
        super().__init__(row, f"Missing data. '{field}' is required.", field)


class InvalidFieldError(ImportValidationError):
    def __init__(self, row, field, value, expected):
        super().__init__(
            row,
            f"Invalid value '{value}' for '{field}'. Expected {expected}.",
            field
        )


class InvalidReferenceError(ImportValidationError):
    def __init__(self, row, field, entity, value):
        super().__init__(
            row,
            f"Invalid reference. {entity} '{value}' does not exist.",
            field
        )


class BatchMismatchError(ImportValidationError):
    def __init__(self, row, student_ref, declared, actual):
        self.declared = declared
        self.actual = actual
        super().__init__(
            row,
            f"Batch mismatch. Student with ID {student_ref} is not in the correct batch. "
            f"The file specifies batch {declared}, but the student belongs to batch {actual}.",
            "batchId"
        )


# =========================================================
# NORMALIZED ROWS
# =========================================================

@dataclass
class StudentRow:
    student_id: str
    name: str
    email: str
    mobile: str
    batch_id: str
    password: str
    id: Optional[str] = None
    active: bool = True
    photo: str = ""
    profile_complete: bool = False
    education: list = field(default_factory=list)

    @property
    def natural_key(self):
        return (self.student_id,)


@dataclass
class MarkRow:
    student_id: str
    exam: str
    score: float
    type: str
    date: date
    id: Optional[str] = None

    @property
    def natural_key(self):
        return (self.student_id, self.exam, self.date, self.type)


@dataclass
class AttendanceRow:
    student_id: str
    date: date
    type: str
    present: bool = True
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    session_name: Optional[str] = None

    @property
    def natural_key(self):
        return (self.student_id, self.date, self.type)


# =========================================================
# FIELD HELPERS
# =========================================================

def text_value(row, key):
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()


def optional_text(row, key):
    return text_value(row, key) or None


def require(index, row, key):
    value = text_value(row, key)
    if not value:
        raise MissingFieldError(index, key)
    return value


def parse_date_field(index, key, value):
    try:
        return parse_iso_date(value)
    except ValueError:
        raise InvalidFieldError(index, key, value, "a date in YYYY-MM-DD format") from None


def parse_score(index, value):
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise InvalidFieldError(index, "score", value, "a number") from None
    if not math.isfinite(score):
        raise InvalidFieldError(index, "score", value, "a number")
    return score


def parse_choice(index, key, value, choices):
    normalized = value.lower()
    if normalized not in choices:
        raise InvalidFieldError(index, key, value, "one of " + ", ".join(choices))
    return normalized


def parse_flag(index, row, key, default):
    value = row.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise InvalidFieldError(index, key, value, "yes or no")


def resolve_batch(index, key, value):
    batch = db.session.get(Batch, value)
    if batch is None:
        batch = Batch.query.filter_by(batch_number=value).first()
    if batch is None:
        raise InvalidReferenceError(index, key, "Batch", value)
    return batch


def resolve_student(index, key, value):
    # System id first, then the institute's external student id
    student = db.session.get(Student, value)
    if student is None:
        student = Student.query.filter_by(student_id=value).first()
    if student is None:
        raise InvalidReferenceError(index, key, "Student", value)
    return student


# =========================================================
# VALIDATORS
# =========================================================

def validate_student_row(index, row):
    student_id = require(index, row, "studentId")
    name = require(index, row, "name")
    email = require(index, row, "email")
    mobile = require(index, row, "mobile")
    batch_ref = require(index, row, "batchId")

    if "@" not in email:
        raise InvalidFieldError(index, "email", email, "an e-mail address")

    education = row.get("education") or []
    if not isinstance(education, list):
        raise InvalidFieldError(index, "education", education, "a list")

    active = parse_flag(index, row, "active", True)
    profile_complete = parse_flag(index, row, "profileComplete", False)

    batch = resolve_batch(index, "batchId", batch_ref)

    return StudentRow(
        id=optional_text(row, "id"),
        student_id=student_id,
        name=name,
        email=email,
        mobile=mobile,
        batch_id=batch.id,
        password=text_value(row, "password") or mobile,
        active=active,
        photo=text_value(row, "photo"),
        profile_complete=profile_complete,
        education=education,
    )


def validate_mark_row(index, row):
    student_ref = require(index, row, "studentId")
    exam = require(index, row, "exam")
    raw_score = require(index, row, "score")
    raw_type = require(index, row, "type")
    raw_date = require(index, row, "date")

    score = parse_score(index, raw_score)
    mark_type = parse_choice(index, "type", raw_type, MARK_TYPES)
    mark_date = parse_date_field(index, "date", raw_date)

    student = resolve_student(index, "studentId", student_ref)

    declared = text_value(row, "batchId")
    if declared:
        actual_number = student.batch.batch_number if student.batch else None
        if declared not in (student.batch_id, actual_number):
            raise BatchMismatchError(index, student_ref, declared, student.batch_id)

    return MarkRow(
        id=optional_text(row, "id"),
        student_id=student.id,
        exam=exam,
        score=score,
        type=mark_type,
        date=mark_date,
    )


def validate_attendance_row(index, row, batch=None, month=None):
    """Validate one attendance row.

    When the upload names a batch and a month, the student must belong to that
    batch and the date must fall inside that month.
    """
    student_ref = require(index, row, "studentId")
    raw_date = require(index, row, "date")
    raw_type = require(index, row, "type")

    record_date = parse_date_field(index, "date", raw_date)
    if month and month_of(record_date) != month:
        raise InvalidFieldError(index, "date", raw_date, f"a date in {month}")

    record_type = parse_choice(index, "type", raw_type, ATTENDANCE_TYPES)
    present = parse_flag(index, row, "present", True)

    student = resolve_student(index, "studentId", student_ref)
    if batch is not None and student.batch_id != batch.id:
        raise BatchMismatchError(index, student_ref, batch.id, student.batch_id)

    return AttendanceRow(
        student_id=student.id,
        date=record_date,
        type=record_type,
        present=present,
        in_time=optional_text(row, "inTime"),
        out_time=optional_text(row, "outTime"),
        session_name=optional_text(row, "sessionName"),
    )


def validate_attendance_upload(payload):
    """Check the {batchId, month, attendanceData} envelope of an attendance upload."""
    if not isinstance(payload, dict):
        raise ImportValidationError(None, "Expected an object with batchId, month and attendanceData.")

    batch_ref = text_value(payload, "batchId")
    month = text_value(payload, "month")
    rows = payload.get("attendanceData")

    if not batch_ref or not month or not isinstance(rows, list):
        raise ImportValidationError(None, "Missing batchId, month, or attendanceData.")
    if not is_valid_month(month):
        raise InvalidFieldError(None, "month", month, "a month in YYYY-MM format")

    batch = resolve_batch(None, "batchId", batch_ref)
    return batch, month, rows
