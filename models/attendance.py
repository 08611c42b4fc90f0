from extensions import db

ATTENDANCE_TYPES = ("class", "lab", "hr_session")


class AttendanceRecord(db.Model):
    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.String(64),
        db.ForeignKey("students.id"),
        nullable=False
    )

    date = db.Column(db.Date, nullable=False)
    type = db.Column(db.Enum(*ATTENDANCE_TYPES, name="attendance_type"), nullable=False)
    present = db.Column(db.Boolean, nullable=False, default=True)
    in_time = db.Column(db.String(20), nullable=True)
    out_time = db.Column(db.String(20), nullable=True)
    session_name = db.Column(db.String(120), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("student_id", "date", "type", name="unique_student_date_type"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "date": self.date.isoformat(),
            "type": self.type,
            "present": bool(self.present),
            "inTime": self.in_time,
            "outTime": self.out_time,
            "sessionName": self.session_name,
        }

    def __repr__(self):
        return f"<AttendanceRecord student={self.student_id} {self.date} {self.type}>"
