from flask import current_app
from werkzeug.security import generate_password_hash

from extensions import db
from models.user import User


def seed_admin():
    username = current_app.config["ADMIN_USERNAME"]

    existing = User.query.filter_by(username=username).first()
    if not existing:
        db.session.add(
            User(
                username=username,
                name="Admin User",
                password_hash=generate_password_hash(current_app.config["ADMIN_PASSWORD"]),
                is_active=True
            )
        )

    db.session.commit()
    print(f"✅ Admin account verified ({username})")


def run_seed():
    db.create_all()
    seed_admin()
