from flask import Blueprint, send_from_directory
from app.services import storage
from app.utils import error

storage_bp = Blueprint("storage", __name__, url_prefix="/storage")


@storage_bp.route("/<bucket>/<path:path>", methods=["GET"])
def serve_file(bucket, path):
    """Public read access to uploaded images."""
    if bucket not in storage.BUCKET_LIMITS:
        return error("Bucket not found", status=404)
    return send_from_directory(storage.bucket_directory(bucket), path, max_age=3600)
