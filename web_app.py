"""
Flask web app that shows a shared QR code to anyone holding its link.
"""

import logging
import os

from flask import Flask, Response, abort, current_app, jsonify, render_template

from config import create_supabase_client, log_level
from database import QRCodeStore
from errors import RemoteServiceError
from expiry import is_expired, minutes_remaining, utcnow
from utils.qr_generator import decode_data_url

logging.basicConfig(level=log_level())
logger = logging.getLogger(__name__)

app = Flask(__name__)


def get_store():
    store = current_app.config.get("QR_STORE")
    if store is None:
        store = QRCodeStore(create_supabase_client(use_service_key=True))
        current_app.config["QR_STORE"] = store
    return store


# -----------------------------
# Helper: Get Record By ID
# -----------------------------
def get_record(record_id):
    try:
        return get_store().get(record_id)
    except RemoteServiceError as exc:
        logger.error("Database Error: %s", exc)
        abort(503)


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


@app.route("/qr/<record_id>/image.png")
def qr_image(record_id):
    record = get_record(record_id)
    if not record:
        abort(404)
    if is_expired(record):
        abort(410)
    try:
        png = decode_data_url(record.get("qr_url") or "")
    except ValueError as exc:
        logger.error("Stored QR image for %s is unreadable: %s", record_id, exc)
        abort(404)
    return Response(
        png,
        mimetype="image/png",
        headers={"Content-Disposition": 'inline; filename="qrcode.png"'},
    )


# -----------------------------
# Main Route
# -----------------------------
@app.route("/qr/<record_id>")
def qr_detail(record_id):
    record = get_record(record_id)
    if not record:
        return render_template("qr_not_found.html"), 404

    now = utcnow()
    if is_expired(record, now):
        return render_template("qr_expired.html", expires_at=record["expiry_time"]), 410

    return render_template(
        "qr_detail.html",
        record=record,
        files=record.get("files") or [],
        minutes_left=minutes_remaining(record, now),
    )


# -----------------------------
# Run Server
# -----------------------------
if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    app.run(host=host, port=port, debug=False)
