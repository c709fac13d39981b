from app.services import qr, restaurant_service
from app.utils import error, ok
from models.platform import PLATFORM_DEFAULTS, PlatformSettings
from models.restaurant import Table
from . import public_bp, active_restaurant


@public_bp.route("/platform", methods=["GET"])
def platform_info():
    settings = PlatformSettings.current()
    return ok({"settings": settings.to_dict() if settings else dict(PLATFORM_DEFAULTS)})


@public_bp.route("/restaurants/<slug>/menu", methods=["GET"])
def restaurant_menu(slug):
    """
    Public menu of a restaurant
    ---
    tags:
      - Public
    parameters:
      - name: slug
        in: path
        type: string
        required: true
    responses:
      200:
        description: Restaurant, active menu, categories with available items
      404:
        description: Unknown or inactive restaurant
    """
    restaurant = active_restaurant(slug)
    return ok(restaurant_service.public_menu(restaurant))


@public_bp.route("/restaurants/<slug>/payment-methods", methods=["GET"])
def restaurant_payment_methods(slug):
    restaurant = active_restaurant(slug)
    methods = restaurant_service.enabled_payment_methods(restaurant)
    return ok({"payment_methods": [m.to_dict() for m in methods]})


@public_bp.route("/restaurants/<slug>/tables/<token>", methods=["GET"])
def resolve_table(slug, token):
    """Table behind a scanned QR code."""
    restaurant = active_restaurant(slug)
    table = Table.query.filter_by(restaurant_id=restaurant.id, qr_code_token=token).first()
    if not table or not table.is_active:
        return error("Table not found", status=404)
    data = table.to_dict()
    data["menu_url"] = qr.table_menu_url(restaurant, table)
    return ok({"table": data})
