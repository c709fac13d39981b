from flask import Blueprint, request
from app.version import API_PREFIX
from app.utils import auth_required

restaurants_bp = Blueprint("restaurants", __name__, url_prefix=f"{API_PREFIX}/restaurants")


@auth_required
def _authenticated():
    return None


@restaurants_bp.before_request
def _enforce_login():
    """Every restaurant endpoint needs a signed-in user."""
    if request.method == "OPTIONS":
        return None
    return _authenticated()

from . import restaurants  # noqa: E402
from . import payments  # noqa: E402
from . import menu  # noqa: E402
from . import tables  # noqa: E402
from . import orders  # noqa: E402
from . import team  # noqa: E402
from . import reports  # noqa: E402
