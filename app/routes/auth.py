from flask import Blueprint, request, current_app
from flask_limiter.util import get_remote_address
from extensions import limiter
from app.version import API_PREFIX
from app.schemas.auth import (
    LoginRequest,
    PasswordRecoveryRequest,
    PasswordResetRequest,
    PasswordUpdateRequest,
    SignUpRequest,
)
from app.services import auth_service
from app.services.auth_service import AuthError, RegistrationClosed
from app.tasks.notifications import dispatch, send_password_reset_email_task
from app.utils import (
    auth_required,
    decode_token,
    error,
    internal_error_response,
    ok,
    transactional,
    validate_schema,
    TokenError,
    token_pair,
)
from models import db
from models.user import UserProfile

auth_bp = Blueprint("auth", __name__, url_prefix=f"{API_PREFIX}/auth")


@auth_bp.route("/signup", methods=["POST"])
@validate_schema(SignUpRequest)
def signup():
    """
    Register a restaurant owner account
    ---
    tags:
      - Auth
    responses:
      201:
        description: Account created with tokens
      403:
        description: Registration disabled
    """
    data: SignUpRequest = request.validated_data
    try:
        with transactional("Failed to register user"):
            user = auth_service.register(data)
    except RegistrationClosed as e:
        return error(str(e), status=403)
    except AuthError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    return ok({"user": user.to_dict(), **token_pair(user)}, message="Account created", status=201)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["LOGIN_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many logins from this IP",
)
@validate_schema(LoginRequest)
def login():
    """
    Sign in with email and password
    ---
    tags:
      - Auth
    responses:
      200:
        description: Access and refresh tokens
      401:
        description: Invalid credentials
    """
    data: LoginRequest = request.validated_data
    try:
        user = auth_service.authenticate(data.email, data.password)
    except AuthError as e:
        return error(str(e), status=401)
    return ok({"user": user.to_dict(), **token_pair(user)})


@auth_bp.route("/refresh", methods=["POST"])
def refresh_tokens():
    j = request.get_json(silent=True) or {}
    token = j.get("refresh_token", "")
    try:
        payload = decode_token(token, expected_type="refresh")
    except TokenError as e:
        return error(str(e), status=401)
    user = db.session.get(UserProfile, int(payload["sub"]))
    if not user:
        return error("User not found", status=401)
    return ok(token_pair(user))


@auth_bp.route("/logout", methods=["POST"])
@auth_required
def logout():
    return ok(message="Logged out")


@auth_bp.route("/me", methods=["GET"])
@auth_required
def me():
    return ok({"user": request.user.to_dict()})


@auth_bp.route("/password", methods=["PUT"])
@auth_required
@validate_schema(PasswordUpdateRequest)
def update_password():
    data: PasswordUpdateRequest = request.validated_data
    try:
        with transactional("Failed to update password"):
            request.user.set_password(data.password)
    except Exception:
        return internal_error_response()
    return ok(message="Password updated")


@auth_bp.route("/password/recover", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["RECOVERY_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many recovery requests from this IP",
)
@validate_schema(PasswordRecoveryRequest)
def recover_password():
    data: PasswordRecoveryRequest = request.validated_data
    try:
        with transactional("Failed to create reset token"):
            user, token = auth_service.create_reset_token(data.email)
    except Exception:
        return internal_error_response()
    if user:
        base = current_app.config.get("PUBLIC_BASE_URL", "").rstrip("/")
        dispatch(send_password_reset_email_task, user.email, f"{base}/reset-password?token={token}")
    # Same answer for unknown emails
    return ok(message="If the email is registered, a reset link has been sent")


@auth_bp.route("/password/reset", methods=["POST"])
@validate_schema(PasswordResetRequest)
def reset_password():
    data: PasswordResetRequest = request.validated_data
    try:
        with transactional("Failed to reset password"):
            auth_service.reset_password(data.token, data.password)
    except AuthError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    return ok(message="Password updated")
