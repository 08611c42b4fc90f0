"""
Transactional bulk import shared by the student, marks and attendance uploads.

Rows are processed strictly in order: validate, skip when the natural key
already exists, insert otherwise. The whole upload runs in one database
transaction. The first bad row rolls everything back, so an upload is either
fully applied or not applied at all. Clients are notified only after commit.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from models import AttendanceRecord, Mark, Student
from models.student import new_id
from services.import_rows import (
    ImportValidationError,
    validate_attendance_row,
    validate_mark_row,
    validate_student_row,
)

logger = logging.getLogger(__name__)


class ImportStoreError(Exception):
    """The database rejected a statement or the commit. Aborts the import."""


@dataclass
class ImportResult:
    inserted: int = 0
    skipped: int = 0

    def to_dict(self):
        return {"inserted": self.inserted, "skipped": self.skipped}


# =========================================================
# DUPLICATE CHECKS (natural keys)
# =========================================================

def student_exists(session, row):
    return session.query(Student.id).filter_by(student_id=row.student_id).first() is not None


def mark_exists(session, row):
    return session.query(Mark.id).filter_by(
        student_id=row.student_id,
        exam=row.exam,
        date=row.date,
        type=row.type
    ).first() is not None


def attendance_exists(session, row):
    return session.query(AttendanceRecord.id).filter_by(
        student_id=row.student_id,
        date=row.date,
        type=row.type
    ).first() is not None


# =========================================================
# WRITERS
# =========================================================

def write_student(session, row):
    student = Student(
        id=row.id or new_id(),
        student_id=row.student_id,
        name=row.name,
        email=row.email,
        mobile=row.mobile,
        batch_id=row.batch_id,
        active=row.active,
        photo=row.photo,
        password_hash=generate_password_hash(row.password),
        profile_complete=row.profile_complete,
        education=row.education,
    )
    session.add(student)
    session.flush()
    return student.id


def write_mark(session, row):
    mark = Mark(
        student_id=row.student_id,
        exam=row.exam,
        score=row.score,
        type=row.type,
        date=row.date,
    )
    if row.id:
        mark.id = row.id
    session.add(mark)
    session.flush()
    return mark.id


def write_attendance(session, row):
    record = AttendanceRecord(
        student_id=row.student_id,
        date=row.date,
        type=row.type,
        present=row.present,
        in_time=row.in_time,
        out_time=row.out_time,
        session_name=row.session_name,
    )
    session.add(record)
    session.flush()
    return record.id


@dataclass(frozen=True)
class ImportKind:
    label: str
    validate: Callable
    exists: Callable
    write: Callable


IMPORT_KINDS = {
    "students": ImportKind("student", validate_student_row, student_exists, write_student),
    "marks": ImportKind("mark", validate_mark_row, mark_exists, write_mark),
    "attendance": ImportKind("attendance", validate_attendance_row, attendance_exists, write_attendance),
}


# =========================================================
# ORCHESTRATOR
# =========================================================

class BulkImporter:
    """Runs one all-or-nothing upload against the given session.

    ``notifier`` is called with no arguments after a successful commit.
    """

    def __init__(self, session, notifier=None):
        self.session = session
        self.notifier = notifier

    def run(self, kind, rows, **context):
        if kind not in IMPORT_KINDS:
            raise ValueError(f"Unknown import kind: {kind}")
        if not isinstance(rows, list):
            raise ImportValidationError(None, f"Expected an array of {kind}.")

        import_kind = IMPORT_KINDS[kind]
        result = ImportResult()
        seen = set()

        try:
            for index, raw in enumerate(rows, start=1):
                self._apply(import_kind, index, raw, result, seen, context)
            self.session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Bulk %s import failed in the database", kind)
            self._rollback()
            raise ImportStoreError(f"Failed to import {kind}: the database rejected the upload.") from exc
        except Exception as exc:
            logger.warning("Bulk %s import aborted: %s", kind, exc)
            self._rollback()
            raise

        logger.info(
            "Bulk %s import committed: %d inserted, %d skipped",
            kind, result.inserted, result.skipped
        )
        if self.notifier is not None:
            self.notifier()
        return result

    def _apply(self, import_kind, index, raw, result, seen, context):
        if not isinstance(raw, dict):
            raise ImportValidationError(index, f"Each {import_kind.label} row must be an object.")

        row = import_kind.validate(index, raw, **context)

        # Each natural key is counted once per upload
        if row.natural_key in seen:
            logger.debug("Row %d: repeated %s %s ignored", index, import_kind.label, row.natural_key)
            return
        seen.add(row.natural_key)

        if import_kind.exists(self.session, row):
            logger.debug("Row %d: duplicate %s %s skipped", index, import_kind.label, row.natural_key)
            result.skipped += 1
            return

        try:
            import_kind.write(self.session, row)
        except SQLAlchemyError as exc:
            raise ImportStoreError(
                f"Row {index}: Failed to insert {import_kind.label}: {getattr(exc, 'orig', exc)}"
            ) from exc
        result.inserted += 1

    def _rollback(self):
        # A failed rollback must not hide the error that caused it
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Failed to rollback transaction")
