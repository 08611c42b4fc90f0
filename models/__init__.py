from .user import User
from .batch import Batch
from .student import Student
from .mark import Mark
from .attendance import AttendanceRecord
from .schedule import Schedule
from .review import ResumeReview, Interview
__all__ = ["User", "Batch", "Student", "Mark", "AttendanceRecord", "Schedule", "ResumeReview", "Interview"]
