from flask import Blueprint, abort, make_response
from app.version import API_PREFIX
from app.utils import error
from models.restaurant import Restaurant

public_bp = Blueprint("public", __name__, url_prefix=f"{API_PREFIX}/public")

CART_HEADER = "X-Cart-Session"


def active_restaurant(slug):
    """Restaurant by slug, hidden once an admin deactivates it."""
    restaurant = Restaurant.query.filter_by(slug=slug).first()
    if not restaurant or not restaurant.is_active:
        abort(make_response(error("Restaurant not found", status=404)))
    return restaurant

from . import menu  # noqa: E402
from . import cart  # noqa: E402
from . import orders  # noqa: E402
