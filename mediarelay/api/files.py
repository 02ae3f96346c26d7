"""
Signed File Endpoint

Serves objects from the local blob store behind HMAC-signed URLs. Only
registered when STORAGE_BACKEND=local; with GCS, signed URLs point at
Google directly.
"""

from io import BytesIO

from flask import Blueprint, abort, current_app, jsonify, request, send_file

from mediarelay.domain.blob_storage.blob_store import BlobStore
from mediarelay.domain.errors import BlobStoreError

files_bp = Blueprint("files", __name__)


@files_bp.route("/files/<bucket>/<path:key>", methods=["GET"])
def download_file(bucket, key):
    blob_store = current_app.container.resolve(BlobStore)

    expires = request.args.get("expires")
    signature = request.args.get("signature")

    if not blob_store.verify_signature(bucket, key, expires, signature):
        current_app.logger.warning(f"[FILES] Invalid or expired signature for {bucket}/{key}")
        return jsonify({"success": False, "message": "Invalid or expired signature"}), 403

    try:
        data, content_type = blob_store.open_object(bucket, key)
    except BlobStoreError as e:
        current_app.logger.info(f"[FILES] Not served {bucket}/{key}: {e}")
        abort(404)

    return send_file(
        BytesIO(data),
        mimetype=content_type,
        download_name=key.rsplit("/", 1)[-1],
        max_age=0,
    )
