"""
Upload Endpoint

POST /upload accepts one multipart file and answers with the short link.
"""

from flask import Blueprint, current_app, jsonify, request

from mediarelay.application.upload_service import UploadService
from mediarelay.domain.errors import (
    ErrorCategory,
    StorageWriteError,
    UploadRejectedError,
    create_error_response,
)

upload_bp = Blueprint("upload", __name__)

# "audio" is the field name older clients post under
FILE_FIELDS = ("audio", "file")


def _uploaded_file():
    for field in FILE_FIELDS:
        uploaded = request.files.get(field)
        if uploaded is not None and uploaded.filename:
            return uploaded
    return None


def _public_base_url() -> str:
    configured = current_app.relay_config.public_base_url
    return configured or request.host_url.rstrip("/")


def _error(category: ErrorCategory):
    body, status_code = create_error_response(category)
    return jsonify(body), status_code


@upload_bp.route("/upload", methods=["POST"])
def upload():
    """
    Store an uploaded media file and return its links.

    Responses:
        200: {success, receiverUrl, absoluteReceiverUrl, legacyReceiverUrl}
        400: No file / Unsupported file type
        413: File too large
        500: Upload failed
    """
    uploaded = _uploaded_file()

    try:
        upload_service = current_app.container.resolve(UploadService)
        if uploaded is None:
            result = upload_service.upload(None, None, None)
        else:
            result = upload_service.upload(uploaded.filename, uploaded.read(), uploaded.mimetype)

    except UploadRejectedError as e:
        current_app.logger.info(f"[UPLOAD] Rejected: {e}")
        return _error(e.category)
    except StorageWriteError as e:
        current_app.logger.error(f"[UPLOAD] Storage write failed: {e}")
        return _error(ErrorCategory.UPLOAD_FAILED)
    except Exception as e:
        current_app.logger.exception(f"[UPLOAD] Unexpected error: {str(e)}")
        return _error(ErrorCategory.UPLOAD_FAILED)

    return jsonify(result.to_response(_public_base_url())), 200
