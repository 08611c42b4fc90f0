import uuid

from extensions import db


class Schedule(db.Model):
    __tablename__ = "schedules"

    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    batch_id = db.Column(
        db.String(64),
        db.ForeignKey("batches.id"),
        nullable=False
    )
    task = db.Column(db.String(255), nullable=False)
    assigned_date = db.Column(db.Date, nullable=False)
    submission_date = db.Column(db.Date, nullable=False)
    submitted_date = db.Column(db.Date, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "batchId": self.batch_id,
            "task": self.task,
            "assignedDate": self.assigned_date.isoformat(),
            "submissionDate": self.submission_date.isoformat(),
            "submittedDateByStudent": self.submitted_date.isoformat() if self.submitted_date else None,
        }

    def __repr__(self):
        return f"<Schedule {self.task}>"
