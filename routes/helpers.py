from flask import current_app, jsonify

from extensions import db
from services.bulk_import import BulkImporter, ImportStoreError
from services.import_rows import ImportValidationError
from services.notifier import notify_data_changed


def run_bulk_import(kind, rows, success_message, **context):
    """Run one upload and turn the outcome into the JSON response."""
    try:
        result = BulkImporter(db.session, notify_data_changed).run(kind, rows, **context)
    except ImportValidationError as exc:
        return jsonify({"error": str(exc), "message": str(exc)}), 400
    except ImportStoreError as exc:
        current_app.logger.error("Bulk %s upload failed: %s", kind, exc)
        return jsonify({"error": str(exc), "message": str(exc)}), 500

    return jsonify({"message": success_message, **result.to_dict()}), 201


def commit_and_notify():
    db.session.commit()
    notify_data_changed()
