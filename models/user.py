from extensions import db
from flask_login import UserMixin


class User(UserMixin, db.Model):
    """Admin account. Students sign in through the Student model."""
    __tablename__ = "users"

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False, default="Admin User")

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    role = "admin"

    # Flask-Login looks for "id"; admins and students share one loader,
    # so the role is part of the session id.
    def get_id(self):
        return f"admin:{self.user_id}"

    def __repr__(self):
        return f"<User {self.username}>"
