from flask import Blueprint, request, jsonify, current_app, session
from flask_login import current_user, login_required, login_user, logout_user
from services.auth_service import authenticate_admin, authenticate_student

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def account_payload(account):
    if account.role == "admin":
        return {
            "id": "admin",
            "role": "admin",
            "name": account.name,
            "profileComplete": True,
        }
    return {
        "id": account.id,
        "role": "student",
        "name": account.name,
        "profileComplete": bool(account.profile_complete),
    }


# =========================================================
# LOGIN ROUTE
# =========================================================
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    identifier = (data.get("identifier") or "").strip()
    credential = data.get("credential") or ""
    role = data.get("role") or "student"

    # 1. Basic Validation
    if not identifier or not credential:
        return jsonify({"message": "Identifier and credential are required"}), 400

    # 2. Authenticate against the right table
    if role == "admin":
        account = authenticate_admin(identifier, credential)
        if not account:
            return jsonify({"message": "Invalid admin credentials"}), 401
    else:
        account = authenticate_student(identifier, credential)
        if not account:
            return jsonify({"message": "Invalid student credentials"}), 401

    login_user(account)
    current_app.logger.info("%s login: %s", account.role.capitalize(), identifier)

    return jsonify(account_payload(account))


# =========================================================
# LOGOUT ROUTE
# =========================================================
@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    session.clear()
    return jsonify({"status": "logged_out"})


@auth_bp.route("/me")
@login_required
def me():
    return jsonify(account_payload(current_user))
