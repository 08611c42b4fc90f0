"""create portal tables

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=120), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_table(
        "batches",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("batch_number", sa.String(length=50), nullable=False, unique=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("batch_type", sa.String(length=20), nullable=False),
        sa.Column("qr_code", sa.Text(), nullable=True),
        sa.Column("attendance_types", sa.JSON(), nullable=True),
        sa.Column("monthly_data", sa.JSON(), nullable=True),
    )
    op.create_table(
        "students",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("student_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=False, unique=True),
        sa.Column("mobile", sa.String(length=20), nullable=False),
        sa.Column("batch_id", sa.String(length=64), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=True, server_default=sa.text("1")),
        sa.Column("photo", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("profile_complete", sa.Boolean(), nullable=True, server_default=sa.text("0")),
        sa.Column("education", sa.JSON(), nullable=True),
        sa.Column("experience", sa.JSON(), nullable=True),
        sa.Column("resume_status", sa.Enum("pending", "approved", "rejected", name="resume_status"), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"]),
    )
    op.create_table(
        "marks",
        sa.Column("id", sa.String(length=100), primary_key=True),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("exam", sa.String(length=100), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("type", sa.Enum("exam", "mock", name="mark_type"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.UniqueConstraint("student_id", "exam", "date", "type", name="unique_student_exam_date_type"),
    )
    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", sa.Enum("class", "lab", "hr_session", name="attendance_type"), nullable=False),
        sa.Column("present", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("in_time", sa.String(length=20), nullable=True),
        sa.Column("out_time", sa.String(length=20), nullable=True),
        sa.Column("session_name", sa.String(length=120), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.UniqueConstraint("student_id", "date", "type", name="unique_student_date_type"),
    )
    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("batch_id", sa.String(length=64), nullable=False),
        sa.Column("task", sa.String(length=255), nullable=False),
        sa.Column("assigned_date", sa.Date(), nullable=False),
        sa.Column("submission_date", sa.Date(), nullable=False),
        sa.Column("submitted_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"]),
    )
    op.create_table(
        "resume_reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("batch_id", sa.String(length=64), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("match_score", sa.Float(), nullable=True),
        sa.Column("resume_text", sa.Text(), nullable=True),
        sa.Column("job_description", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
    )
    op.create_table(
        "interviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.String(length=64), nullable=False),
        sa.Column("interview_mode", sa.String(length=50), nullable=True),
        sa.Column("focus_area", sa.String(length=100), nullable=True),
        sa.Column("questions", sa.JSON(), nullable=True),
        sa.Column("answers", sa.JSON(), nullable=True),
        sa.Column("scores", sa.JSON(), nullable=True),
        sa.Column("feedback", sa.JSON(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
    )


def downgrade():
    op.drop_table("interviews")
    op.drop_table("resume_reviews")
    op.drop_table("schedules")
    op.drop_table("attendance")
    op.drop_table("marks")
    op.drop_table("students")
    op.drop_table("batches")
    op.drop_table("users")
