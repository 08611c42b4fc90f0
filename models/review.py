from extensions import db


class ResumeReview(db.Model):
    __tablename__ = "resume_reviews"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(64), db.ForeignKey("students.id"), nullable=False)
    batch_id = db.Column(db.String(64), nullable=True)
    date = db.Column(db.Date, nullable=False)
    match_score = db.Column(db.Float, nullable=True)
    resume_text = db.Column(db.Text, nullable=True)
    job_description = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "batchId": self.batch_id,
            "date": self.date.isoformat(),
            "matchScore": self.match_score,
            "resumeText": self.resume_text,
            "jobDescription": self.job_description,
        }


class Interview(db.Model):
    __tablename__ = "interviews"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(64), db.ForeignKey("students.id"), nullable=False)
    interview_mode = db.Column(db.String(50), nullable=True)
    focus_area = db.Column(db.String(100), nullable=True)
    questions = db.Column(db.JSON, default=list)
    answers = db.Column(db.JSON, default=list)
    scores = db.Column(db.JSON, default=dict)
    feedback = db.Column(db.JSON, default=dict)
    date = db.Column(db.Date, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "interviewMode": self.interview_mode,
            "focusArea": self.focus_area,
            "questions": self.questions or [],
            "answers": self.answers or [],
            "scores": self.scores or {},
            "feedback": self.feedback or {},
            "date": self.date.isoformat(),
        }
