import uuid

from extensions import db

MONTHLY_COUNT_KEYS = ("classes", "labs", "exams", "mocks")


class Batch(db.Model):
    __tablename__ = "batches"

    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    batch_number = db.Column(db.String(50), unique=True, nullable=False)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    batch_type = db.Column(db.String(20), nullable=False, default="MCD")
    qr_code = db.Column(db.Text, default="")
    attendance_types = db.Column(db.JSON, default=list)
    # {"2024-02": {"classes": 20, "labs": 8, "exams": 2, "mocks": 1}}
    monthly_data = db.Column(db.JSON, default=dict)

    students = db.relationship("Student", backref="batch", lazy=True)
    schedules = db.relationship(
        "Schedule", backref="batch", lazy=True, cascade="all, delete-orphan"
    )

    def planned_for(self, month):
        planned = (self.monthly_data or {}).get(month) or {}
        return {key: int(planned.get(key) or 0) for key in MONTHLY_COUNT_KEYS}

    def to_dict(self):
        return {
            "id": self.id,
            "batchNumber": self.batch_number,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "batchType": self.batch_type,
            "qrCode": self.qr_code or "",
            "attendanceTypes": self.attendance_types or [],
            "monthlyData": self.monthly_data or {},
            "students": [s.id for s in self.students],
        }

    def __repr__(self):
        return f"<Batch {self.batch_number}>"
