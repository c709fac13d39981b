"""Local object storage: named buckets under ``STORAGE_ROOT`` with public URLs."""
import logging
import os
import time

from flask import current_app
from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

LOGO_BUCKET = "restaurant-logos"
MENU_ITEM_BUCKET = "menu-items"
BUCKET_LIMITS = {
    LOGO_BUCKET: 2 * 1024 * 1024,
    MENU_ITEM_BUCKET: 5 * 1024 * 1024,
}
IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


class StorageError(Exception):
    pass


def _bucket_dir(bucket):
    if bucket not in BUCKET_LIMITS:
        raise StorageError("Unknown bucket")
    return os.path.join(current_app.config["STORAGE_ROOT"], bucket)


def _file_size(file_storage):
    stream = file_storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _verify_image(file_storage):
    stream = file_storage.stream
    try:
        with Image.open(stream) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise StorageError("Only image files are allowed")
    finally:
        stream.seek(0)


def public_url(bucket, path):
    base = current_app.config.get("PUBLIC_BASE_URL", "").rstrip("/")
    return f"{base}/storage/{bucket}/{path}"


def save_image(bucket, folder, file_storage):
    """Store an uploaded image as ``<folder>/<timestamp>.<ext>``; returns ``(path, url)``."""
    if file_storage is None or not file_storage.filename:
        raise StorageError("No file uploaded")
    filename = secure_filename(file_storage.filename)
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    mimetype = file_storage.mimetype or ""
    if ext not in IMAGE_EXTENSIONS or (mimetype and not mimetype.startswith("image/")):
        raise StorageError("Only image files are allowed")
    limit = BUCKET_LIMITS.get(bucket)
    if limit is None:
        raise StorageError("Unknown bucket")
    if _file_size(file_storage) > limit:
        raise StorageError(f"File too large (max {limit // (1024 * 1024)}MB)")
    _verify_image(file_storage)

    folder = secure_filename(str(folder))
    path = f"{folder}/{int(time.time() * 1000)}.{ext}"
    target = os.path.join(_bucket_dir(bucket), folder)
    os.makedirs(target, exist_ok=True)
    file_storage.save(os.path.join(_bucket_dir(bucket), path))
    logger.info("stored %s/%s", bucket, path)
    return path, public_url(bucket, path)


def remove(bucket, path):
    if not path:
        return False
    full = os.path.join(_bucket_dir(bucket), path)
    if os.path.isfile(full):
        os.remove(full)
        logger.info("removed %s/%s", bucket, path)
        return True
    return False


def bucket_directory(bucket):
    return _bucket_dir(bucket)
