import uuid

from extensions import db
from flask_login import UserMixin


def new_id():
    return str(uuid.uuid4())


class Student(UserMixin, db.Model):
    __tablename__ = "students"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    student_id = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    mobile = db.Column(db.String(20), nullable=False)

    batch_id = db.Column(
        db.String(64),
        db.ForeignKey("batches.id"),
        nullable=True
    )

    active = db.Column(db.Boolean, default=True)
    photo = db.Column(db.Text, default="")
    password_hash = db.Column(db.String(255), nullable=False)
    profile_complete = db.Column(db.Boolean, default=False)
    education = db.Column(db.JSON, default=list)
    experience = db.Column(db.JSON, nullable=True)
    resume_status = db.Column(
        db.Enum("pending", "approved", "rejected", name="resume_status"),
        nullable=True
    )

    marks = db.relationship(
        "Mark", backref="student", lazy=True, cascade="all, delete-orphan"
    )
    attendance_records = db.relationship(
        "AttendanceRecord", backref="student", lazy=True, cascade="all, delete-orphan"
    )
    resume_reviews = db.relationship(
        "ResumeReview", backref="student", lazy=True, cascade="all, delete-orphan"
    )
    interviews = db.relationship(
        "Interview", backref="student", lazy=True, cascade="all, delete-orphan"
    )

    role = "student"

    @property
    def is_active(self):
        return bool(self.active)

    def get_id(self):
        return f"student:{self.id}"

    def to_dict(self, include_records=False):
        data = {
            "id": self.id,
            "studentId": self.student_id,
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "batchId": self.batch_id,
            "active": bool(self.active),
            "photo": self.photo or "",
            "profileComplete": bool(self.profile_complete),
            "education": self.education or [],
            "experience": self.experience,
            "resumeStatus": self.resume_status,
            # The printed QR code carries the system id
            "qrCode": self.id,
        }
        if include_records:
            data["marks"] = [m.to_dict() for m in self.marks]
            data["attendance"] = [a.to_dict() for a in self.attendance_records]
        return data

    def __repr__(self):
        return f"<Student {self.student_id}>"
