"""
Health Endpoints
"""

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from mediarelay.config.gcs_config import gcs_health_check
from mediarelay.config.redis_config import redis_health_check
from mediarelay.domain.blob_storage.blob_store import BlobStore

system_bp = Blueprint("system", __name__)


@system_bp.route("/healthz", methods=["GET"])
def healthz():
    """Liveness check; touches no backend."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return jsonify({"ok": True, "time": now}), 200


@system_bp.route("/healthz/ready", methods=["GET"])
def readiness():
    """
    Readiness check over the configured registry and storage backends.

    Returns 200 when every backend in use is reachable, 503 otherwise.
    """
    health_status, status_code = _get_health_status()
    return jsonify(health_status), status_code


def _get_health_status():
    config = current_app.relay_config
    health_status = {
        "status": "ok",
        "registry": config.registry_backend,
        "storage": config.storage_backend,
        "celery": "available" if getattr(current_app, "celery", None) is not None else "unavailable",
    }

    if config.registry_backend == "redis":
        if redis_health_check():
            health_status["registry"] = "connected"
        else:
            health_status["registry"] = "disconnected"
            health_status["status"] = "degraded"

    if config.storage_backend == "gcs":
        client = getattr(current_app.container.resolve(BlobStore), "client", None)
        if client is not None and gcs_health_check(client, config.storage_bucket):
            health_status["storage"] = "connected"
        else:
            health_status["storage"] = "unreachable"
            health_status["status"] = "degraded"

    if health_status["celery"] != "available":
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
