"""
Monthly batch reports.

Joins a batch's students with their attendance and marks for one month and
with the batch's planned session counts, then exports the result.
"""
import logging
from io import BytesIO

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import select

from extensions import db
from models import AttendanceRecord, Mark, Student
from utils.dates import month_bounds

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = {
    "studentId": "Student ID",
    "name": "Student Name",
    "email": "Email",
    "classesAttended": "Classes Attended",
    "classAttendance": "Class Attendance %",
    "labsAttended": "Labs Attended",
    "labAttendance": "Lab Attendance %",
    "totalExamMarks": "Total Exam Marks",
    "totalMockMarks": "Total Mock Marks",
}

UPLOAD_TEMPLATES = {
    "students": ["id", "name", "email", "mobile", "batch number"],
    "marks": ["batch number", "student name or id", "exam /mock", "exam name", "score", "date"],
    "attendance": [
        "student name", "date", "type (class/lab)", "present (yes/no)",
        "inTime (optional)", "outTime (optional)"
    ],
}

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def percentage(part, whole):
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def _frame(stmt, columns):
    df = pd.read_sql(stmt, db.session.connection())
    if df.empty:
        return pd.DataFrame(columns=columns)
    return df


def _counts(df, record_type):
    subset = df[(df["type"] == record_type) & (df["present"].astype(bool))]
    return subset.groupby("student_id").size()


def build_monthly_report(batch, month):
    start, end = month_bounds(month)
    planned = batch.planned_for(month)

    students = (
        Student.query
        .filter_by(batch_id=batch.id)
        .order_by(Student.name.asc())
        .all()
    )
    student_ids = [s.id for s in students]

    attendance = _frame(
        select(AttendanceRecord.student_id, AttendanceRecord.type, AttendanceRecord.present)
        .where(
            AttendanceRecord.student_id.in_(student_ids),
            AttendanceRecord.date >= start,
            AttendanceRecord.date < end
        ),
        ["student_id", "type", "present"]
    )
    marks = _frame(
        select(Mark.student_id, Mark.type, Mark.score)
        .where(
            Mark.student_id.in_(student_ids),
            Mark.date >= start,
            Mark.date < end
        ),
        ["student_id", "type", "score"]
    )

    class_counts = _counts(attendance, "class")
    lab_counts = _counts(attendance, "lab")
    exam_marks = marks[marks["type"] == "exam"]
    mock_marks = marks[marks["type"] == "mock"]
    exam_totals = exam_marks.groupby("student_id")["score"].sum()
    mock_totals = mock_marks.groupby("student_id")["score"].sum()

    report = []
    for s in students:
        classes_attended = int(class_counts.get(s.id, 0))
        labs_attended = int(lab_counts.get(s.id, 0))
        report.append({
            "id": s.id,
            "studentId": s.student_id,
            "name": s.name,
            "email": s.email,
            "classesAttended": classes_attended,
            "labsAttended": labs_attended,
            "classAttendance": percentage(classes_attended, planned["classes"]),
            "labAttendance": percentage(labs_attended, planned["labs"]),
            "totalExamMarks": float(exam_totals.get(s.id, 0)),
            "totalMockMarks": float(mock_totals.get(s.id, 0)),
        })

    present_count = int(attendance["present"].astype(bool).sum()) if not attendance.empty else 0

    return {
        "batchId": batch.id,
        "batchNumber": batch.batch_number,
        "month": month,
        "classesConducted": planned["classes"],
        "labsConducted": planned["labs"],
        "examsConducted": planned["exams"],
        "mocksConducted": planned["mocks"],
        "summary": {
            "totalStudents": len(students),
            "averageAttendance": percentage(present_count, len(attendance)),
            "averageExamScore": round(float(exam_marks["score"].mean()), 2) if not exam_marks.empty else 0.0,
            "averageMockScore": round(float(mock_marks["score"].mean()), 2) if not mock_marks.empty else 0.0,
        },
        "report": report,
    }


def report_frame(report):
    df = pd.DataFrame(report["report"], columns=list(EXPORT_COLUMNS))
    return df.rename(columns=EXPORT_COLUMNS)


def export_report(report, file_format):
    """Render a monthly report. Returns (buffer, mimetype, download_name)."""
    df = report_frame(report)
    base_name = f"{report['batchNumber']}_{report['month']}_report"
    output = BytesIO()

    if file_format == "csv":
        output.write(df.to_csv(index=False).encode("utf-8"))
        mimetype = "text/csv"
        download_name = f"{base_name}.csv"

    elif file_format == "excel":
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        mimetype = XLSX_MIMETYPE
        download_name = f"{base_name}.xlsx"

    elif file_format == "pdf":
        _write_pdf(report, df, output)
        mimetype = "application/pdf"
        download_name = f"{base_name}.pdf"

    else:
        raise ValueError(f"Unsupported report format: {file_format}")

    output.seek(0)
    logger.info("Exported %s report for batch %s", file_format, report["batchNumber"])
    return output, mimetype, download_name


def _write_pdf(report, df, output):
    doc = SimpleDocTemplate(output, pagesize=landscape(letter))
    styles = getSampleStyleSheet()
    elements = [
        Paragraph(f"Monthly Report - {report['batchNumber']} ({report['month']})", styles["Title"]),
        Paragraph(
            f"Classes: {report['classesConducted']} | Labs: {report['labsConducted']} | "
            f"Exams: {report['examsConducted']} | Mocks: {report['mocksConducted']}",
            styles["Normal"]
        ),
        Spacer(1, 12),
    ]

    table_data = [list(df.columns)] + [[str(v) for v in row] for row in df.itertuples(index=False)]
    t = Table(table_data)
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 12),
        ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
        ("GRID", (0, 0), (-1, -1), 1, colors.black),
    ]))
    elements.append(t)
    doc.build(elements)


def build_email_preview(report):
    """One message per student. Nothing is sent from here."""
    subject = f"Monthly Performance Report - {report['month']}"
    messages = []
    for row in report["report"]:
        body = "\n".join([
            f"Dear {row['name']},",
            "",
            f"Your report for batch {report['batchNumber']} ({report['month']}):",
            f"Class attendance: {row['classAttendance']:.2f}% of {report['classesConducted']} classes",
            f"Lab attendance: {row['labAttendance']:.2f}% of {report['labsConducted']} labs",
            f"Total exam marks: {row['totalExamMarks']:g}",
            f"Total mock marks: {row['totalMockMarks']:g}",
        ])
        messages.append({"to": row["email"], "subject": subject, "body": body})
    return messages


def build_upload_template(kind):
    headers = UPLOAD_TEMPLATES[kind]
    df = pd.DataFrame(columns=headers)

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=kind.capitalize())

    output.seek(0)
    return output
