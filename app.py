import logging

from flask import Flask, jsonify
from config.config import Config
from extensions import db, login_manager, migrate, socketio

# Route Imports
from routes.auth_routes import auth_bp
from routes.student_routes import student_bp
from routes.batch_routes import batch_bp
from routes.marks_routes import marks_bp
from routes.attendance_routes import attendance_bp
from routes.report_routes import report_bp
from routes.review_routes import review_bp

# Model Imports (needed so Flask-Migrate sees every table)
from models.user import User
from models.batch import Batch
from models.student import Student
from models.mark import Mark
from models.attendance import AttendanceRecord
from models.schedule import Schedule
from models.review import ResumeReview, Interview

from services.auth_service import load_account
from services.import_rows import ImportValidationError
from utils.seed_data import run_seed


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app.logger.setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Initialize Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    socketio.init_app(app, cors_allowed_origins=app.config["SOCKETIO_CORS_ORIGINS"])
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(session_id):
        return load_account(session_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    @app.errorhandler(ImportValidationError)
    def handle_validation_error(exc):
        db.session.rollback()
        return jsonify({"error": str(exc), "message": str(exc)}), 400

    @app.cli.command("seed")
    def seed_command():
        """Create missing tables and the default admin account."""
        run_seed()

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(batch_bp)
    app.register_blueprint(marks_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(report_bp)
    app.register_blueprint(review_bp)

    return app

if __name__ == "__main__":
    app = create_app()
    socketio.run(app, host="0.0.0.0", port=3003, debug=True)
