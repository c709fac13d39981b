import logging
import secrets
from datetime import timedelta

from flask import current_app

from models import db
from models.platform import PlatformSettings
from models.user import PasswordResetToken, UserProfile, UserRole
from app.utils.timezones import utcnow

logger = logging.getLogger(__name__)

DEFAULT_SIGNUP_ROLE = "restaurant_admin"


class AuthError(Exception):
    pass


class RegistrationClosed(AuthError):
    pass


def find_by_email(email):
    return UserProfile.query.filter(db.func.lower(UserProfile.email) == email.lower()).first()


def registration_open():
    settings = PlatformSettings.current()
    return settings.enable_registration if settings else True


def register(data):
    """Create profile and role together (no commit)."""
    if not registration_open():
        raise RegistrationClosed("Registration is currently disabled")
    if find_by_email(data.email):
        raise AuthError("Email already registered")
    user = UserProfile(email=data.email.lower(), name=data.name, phone=data.phone)
    user.set_password(data.password)
    user.role_row = UserRole(role=DEFAULT_SIGNUP_ROLE)
    db.session.add(user)
    db.session.flush()
    logger.info("user %s registered", user.id)
    return user


def authenticate(email, password):
    user = find_by_email(email)
    if not user or not user.check_password(password):
        raise AuthError("Invalid email or password")
    return user


def create_reset_token(email):
    """Issue a single-use reset token, or None for unknown emails (no commit)."""
    user = find_by_email(email)
    if not user:
        return None, None
    token = secrets.token_urlsafe(32)
    db.session.add(PasswordResetToken(user_id=user.id, token=token))
    return user, token


def reset_password(token, password):
    row = PasswordResetToken.query.filter_by(token=token).first()
    lifetime = timedelta(minutes=current_app.config["PASSWORD_RESET_LIFETIME_MIN"])
    if not row or row.used or utcnow() - row.created_at > lifetime:
        raise AuthError("Invalid or expired reset token")
    user = db.session.get(UserProfile, row.user_id)
    user.set_password(password)
    row.used = True
    return user
