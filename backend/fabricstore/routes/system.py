# backend/fabricstore/routes/system.py
"""
System health endpoint.

Unauthenticated; reports database reachability and basic table counts so the
desktop shell can tell "server down" apart from "not logged in".
"""

import time

from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import Catalog, Roll, User
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        details = {
            "users": db.session.query(User).count(),
            "catalogs": db.session.query(Catalog).count(),
            "rolls": db.session.query(Roll).count(),
        }
        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "details": details,
        }
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


@system_bp.get("/api/health")
def health_route():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "success": healthy,
        "data": {
            "status": database["status"],
            "timestamp": to_utc_z(utcnow()),
            "checks": {"database": database},
        },
    }
    return jsonify(body), 200 if healthy else 503
