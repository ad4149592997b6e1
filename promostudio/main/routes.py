"""
promostudio/main/routes.py
──────────────────────────
Service-level routes: index summary and health check.
"""
from datetime import datetime

from flask import current_app, jsonify
from sqlalchemy import text

from promostudio import db
from promostudio.main import main


@main.route("/")
def index():
    from promostudio.promotions.models import PromotionRecord

    counts = dict(
        db.session.query(PromotionRecord.status, db.func.count(PromotionRecord.id))
        .group_by(PromotionRecord.status)
        .all()
    )
    return jsonify({
        "service": "promostudio",
        "promotions": counts,
    })


@main.route("/health")
def health():
    """Health check for load balancers and monitoring."""
    status = "ok"
    failures = []

    try:
        db.session.execute(text("SELECT 1"))
    except Exception as e:
        status = "error"
        failures.append(f"DB: {str(e)}")
        current_app.logger.error(f"Health check failed (DB): {e}")

    response = {
        "status": status,
        "timestamp": datetime.utcnow().isoformat(),
        "details": {
            "db": "ok" if not failures else "error",
        }
    }
    if failures:
        response["failures"] = failures

    return jsonify(response), (200 if status == "ok" else 503)
