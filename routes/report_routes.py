from flask import Blueprint, request, jsonify, send_file, current_app

from extensions import db
from models import Batch
from services.reports import (
    UPLOAD_TEMPLATES, XLSX_MIMETYPE,
    build_email_preview, build_monthly_report, build_upload_template, export_report
)
from utils.dates import is_valid_month
from utils.decorators import role_required

report_bp = Blueprint("reports", __name__, url_prefix="/api")


def load_report_request():
    """Resolve batchId/month query args. Returns (report, error_response)."""
    batch_id = request.args.get("batchId")
    month = request.args.get("month")

    if not batch_id or not month:
        return None, (jsonify({"error": "batchId and month are required"}), 400)
    if not is_valid_month(month):
        return None, (jsonify({"error": f"Invalid month: {month}. Expected YYYY-MM."}), 400)

    batch = db.session.get(Batch, batch_id)
    if not batch:
        return None, (jsonify({"error": "Batch not found"}), 404)

    return build_monthly_report(batch, month), None


@report_bp.route("/reports/monthly")
@role_required("admin")
def monthly_report():
    report, error = load_report_request()
    if error:
        return error
    return jsonify(report)


@report_bp.route("/reports/monthly/export")
@role_required("admin")
def export_monthly_report():
    report, error = load_report_request()
    if error:
        return error

    file_format = request.args.get("format", "csv")
    try:
        output, mimetype, download_name = export_report(report, file_format)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return send_file(
        output,
        mimetype=mimetype,
        as_attachment=True,
        download_name=download_name
    )


@report_bp.route("/reports/monthly/email-preview")
@role_required("admin")
def email_preview():
    report, error = load_report_request()
    if error:
        return error

    messages = build_email_preview(report)
    current_app.logger.info(
        "Prepared %d report e-mails for batch %s (%s)",
        len(messages), report["batchNumber"], report["month"]
    )
    return jsonify({"batchNumber": report["batchNumber"], "month": report["month"], "messages": messages})


@report_bp.route("/templates/<kind>")
@role_required("admin")
def download_template(kind):
    if kind not in UPLOAD_TEMPLATES:
        return jsonify({"error": f"Unknown template: {kind}"}), 404

    return send_file(
        build_upload_template(kind),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f"{kind}_upload_template.xlsx"
    )
