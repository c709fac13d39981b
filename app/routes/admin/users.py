from flask import request
from app.schemas.admin import RoleRequest, UserRestaurantsRequest
from app.utils import error, internal_error_response, ok, transactional, validate_schema
from models import db
from models.restaurant import Restaurant, RestaurantPermission, DEFAULT_MEMBER_PERMISSIONS
from models.user import UserProfile, UserRole
from . import admin_bp


def _user_dict(user):
    data = user.to_dict()
    data["restaurant_ids"] = [
        row.restaurant_id
        for row in RestaurantPermission.query.filter_by(user_id=user.id).all()
    ]
    return data


@admin_bp.route("/users", methods=["GET"])
def list_users():
    """
    Every account with its role and restaurant links
    ---
    tags:
      - Admin
    responses:
      200:
        description: Users, newest first
    """
    users = UserProfile.query.order_by(UserProfile.created_at.desc()).all()
    return ok({"users": [_user_dict(u) for u in users]})


@admin_bp.route("/users/<int:user_id>/role", methods=["PUT"])
@validate_schema(RoleRequest)
def set_user_role(user_id):
    user = db.session.get(UserProfile, user_id)
    if not user:
        return error("User not found", status=404)
    role = request.validated_data.role
    if user.role_row:
        user.role_row.role = role
    else:
        user.role_row = UserRole(role=role)
    try:
        with transactional("Failed to update user role"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"user": user.to_dict()}, message="Role updated")


@admin_bp.route("/users/<int:user_id>/restaurants", methods=["GET"])
def user_restaurants(user_id):
    user = db.session.get(UserProfile, user_id)
    if not user:
        return error("User not found", status=404)
    return ok({"restaurant_ids": _user_dict(user)["restaurant_ids"]})


@admin_bp.route("/users/<int:user_id>/restaurants", methods=["PUT"])
@validate_schema(UserRestaurantsRequest)
def set_user_restaurants(user_id):
    """Replace the user's restaurant links; new links get the default member flags."""
    user = db.session.get(UserProfile, user_id)
    if not user:
        return error("User not found", status=404)
    wanted = set(request.validated_data.restaurant_ids)
    if wanted:
        found = {r.id for r in Restaurant.query.filter(Restaurant.id.in_(wanted)).all()}
        missing = wanted - found
        if missing:
            return error(f"Unknown restaurant ids: {sorted(missing)}", status=400)
    rows = {row.restaurant_id: row for row in RestaurantPermission.query.filter_by(user_id=user.id).all()}
    try:
        with transactional("Failed to update user restaurants"):
            for restaurant_id, row in rows.items():
                if restaurant_id not in wanted:
                    db.session.delete(row)
            for restaurant_id in wanted - set(rows):
                db.session.add(RestaurantPermission(
                    user_id=user.id,
                    restaurant_id=restaurant_id,
                    permissions=dict(DEFAULT_MEMBER_PERMISSIONS),
                ))
    except Exception:
        return internal_error_response()
    return ok({"restaurant_ids": sorted(wanted)}, message="Restaurants updated")
