from werkzeug.security import check_password_hash

from extensions import db
from models import Student, User


def authenticate_admin(username: str, password: str):
    user = User.query.filter_by(username=username).first()

    if not user:
        return None

    if not check_password_hash(user.password_hash, password):
        return None

    if user.is_active is False:
        return None

    return user


def authenticate_student(email: str, password: str):
    # New students sign in with their mobile number until they change it
    student = Student.query.filter_by(email=email).first()

    if not student:
        return None

    if not check_password_hash(student.password_hash, password):
        return None

    if not student.active:
        return None

    return student


def load_account(session_id: str):
    """Resolve the Flask-Login session id ("admin:<id>" or "student:<id>")."""
    role, _, key = (session_id or "").partition(":")
    if role == "admin" and key.isdigit():
        return db.session.get(User, int(key))
    if role == "student" and key:
        return db.session.get(Student, key)
    return None
