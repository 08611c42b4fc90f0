import uuid

from extensions import db

MARK_TYPES = ("exam", "mock")


class Mark(db.Model):
    __tablename__ = "marks"

    id = db.Column(db.String(100), primary_key=True, default=lambda: str(uuid.uuid4()))

    student_id = db.Column(
        db.String(64),
        db.ForeignKey("students.id"),
        nullable=False
    )

    exam = db.Column(db.String(100), nullable=False)
    score = db.Column(db.Float, nullable=False)
    type = db.Column(db.Enum(*MARK_TYPES, name="mark_type"), nullable=False)
    date = db.Column(db.Date, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("student_id", "exam", "date", "type", name="unique_student_exam_date_type"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "exam": self.exam,
            "score": self.score,
            "type": self.type,
            "date": self.date.isoformat(),
        }

    def __repr__(self):
        return f"<Mark student={self.student_id} {self.exam} {self.date}>"
