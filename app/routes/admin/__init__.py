from flask import Blueprint, request
from app.version import API_PREFIX
from app.utils import auth_required, role_required

admin_bp = Blueprint("admin", __name__, url_prefix=f"{API_PREFIX}/admin")


@auth_required
@role_required("super_admin")
def _super_admin():
    return None


@admin_bp.before_request
def _enforce_admin_role():
    """Ensure the requester is an authenticated super admin."""
    if request.method == "OPTIONS":
        return None
    return _super_admin()

from . import users  # noqa: E402
from . import platform  # noqa: E402
