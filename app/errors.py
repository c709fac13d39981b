import logging
from flask import Blueprint, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
from app.utils.responses import error
from models import db

logger = logging.getLogger(__name__)

errors_bp = Blueprint("errors_bp", __name__)


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    if isinstance(e, RequestEntityTooLarge):
        return error("Uploaded file is too large", status=413)
    msg = e.description or getattr(e, "name", "HTTP Error")
    return error(msg, status=e.code, code=e.code)


@errors_bp.app_errorhandler(IntegrityError)
def handle_integrity_error(e):
    db.session.rollback()
    logger.warning("constraint violation on %s %s: %s", request.method, request.path, e.orig)
    return error("The request conflicts with existing data", status=409)


@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logger.exception("Unhandled exception on %s %s", request.method, request.path)
    return error(
        "An unexpected error occurred. Please try again later.",
        status=500,
        code=500,
    )
