from functools import wraps
from flask import jsonify
from flask_login import current_user


def role_required(*roles):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # 1. Check if user is logged in
            if not current_user.is_authenticated:
                return jsonify({"error": "Authentication required"}), 401

            # 2. Check if user has the correct role ("admin" or "student")
            if getattr(current_user, "role", None) not in roles:
                return jsonify({"error": "Access Denied: You do not have the required role."}), 403

            return func(*args, **kwargs)
        return wrapper
    return decorator


def is_admin():
    return current_user.is_authenticated and getattr(current_user, "role", None) == "admin"


def can_access_student(student_id):
    """Admins see every student; a student only sees their own records."""
    if is_admin():
        return True
    return current_user.is_authenticated and getattr(current_user, "id", None) == student_id
