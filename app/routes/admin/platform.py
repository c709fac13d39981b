from flask import request
from app.schemas.admin import PlatformSettingsRequest
from app.services import reports
from app.utils import error, internal_error_response, ok, transactional, validate_schema
from models import db
from models.platform import PLATFORM_DEFAULTS, PlatformSettings
from models.restaurant import Restaurant
from models.user import UserProfile
from . import admin_bp


@admin_bp.route("/restaurants", methods=["GET"])
def list_all_restaurants():
    restaurants = Restaurant.query.order_by(Restaurant.created_at.desc()).all()
    owners = {u.id: u for u in UserProfile.query.filter(
        UserProfile.id.in_({r.owner_id for r in restaurants})
    ).all()} if restaurants else {}
    result = []
    for restaurant in restaurants:
        data = restaurant.to_dict()
        owner = owners.get(restaurant.owner_id)
        data["owner_email"] = owner.email if owner else None
        result.append(data)
    return ok({"restaurants": result})


@admin_bp.route("/restaurants/<int:restaurant_id>/toggle-active", methods=["POST"])
def toggle_restaurant(restaurant_id):
    """
    Activate or deactivate a restaurant; inactive restaurants disappear from the public menu
    ---
    tags:
      - Admin
    responses:
      200:
        description: New state
      404:
        description: Unknown restaurant
    """
    restaurant = db.session.get(Restaurant, restaurant_id)
    if not restaurant:
        return error("Restaurant not found", status=404)
    restaurant.is_active = not restaurant.is_active
    try:
        with transactional("Failed to toggle restaurant"):
            pass
    except Exception:
        return internal_error_response()
    state = "activated" if restaurant.is_active else "deactivated"
    return ok({"restaurant": restaurant.to_dict()}, message=f"Restaurant {state}")


@admin_bp.route("/statistics", methods=["GET"])
def statistics():
    return ok({"statistics": reports.platform_statistics()})


@admin_bp.route("/platform-settings", methods=["GET"])
def get_platform_settings():
    settings = PlatformSettings.current()
    return ok({"settings": settings.to_dict() if settings else dict(PLATFORM_DEFAULTS)})


@admin_bp.route("/platform-settings", methods=["PUT"])
@validate_schema(PlatformSettingsRequest)
def update_platform_settings():
    settings = PlatformSettings.current()
    if settings is None:
        settings = PlatformSettings(**PLATFORM_DEFAULTS)
        db.session.add(settings)
    for key, value in request.validated_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(settings, key, value)
    try:
        with transactional("Failed to save platform settings"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"settings": settings.to_dict()}, message="Settings saved")
