from flask import request, g
from app.schemas.restaurant import CreateRestaurantRequest, UpdateRestaurantRequest
from app.services import restaurant_service, reports, storage
from app.services.restaurant_service import RestaurantValidationError
from app.services.storage import StorageError
from app.utils import (
    error,
    internal_error_response,
    ok,
    restaurant_access,
    role_required,
    transactional,
    validate_schema,
)
from . import restaurants_bp


@restaurants_bp.route("", methods=["GET"])
def list_restaurants():
    """
    Restaurants the caller owns or works at
    ---
    tags:
      - Restaurants
    responses:
      200:
        description: Restaurants with ownership and module permissions
    """
    return ok({"restaurants": restaurant_service.visible_restaurants(request.user)})


@restaurants_bp.route("", methods=["POST"])
@role_required(["super_admin", "restaurant_admin:create_restaurant"])
@validate_schema(CreateRestaurantRequest)
def create_restaurant():
    """
    Create a restaurant with its default menu
    ---
    tags:
      - Restaurants
    responses:
      201:
        description: Restaurant created
      400:
        description: Validation error or slug in use
    """
    data: CreateRestaurantRequest = request.validated_data
    try:
        with transactional("Failed to create restaurant"):
            restaurant = restaurant_service.create_restaurant(request.user, data)
    except RestaurantValidationError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    return ok({"restaurant": restaurant.to_dict()}, message="Restaurant created", status=201)


@restaurants_bp.route("/slug", methods=["GET"])
def suggest_slug():
    name = (request.args.get("name") or "").strip()
    if len(name) < 2:
        return error("Name must have at least 2 characters", status=400)
    return ok({"slug": restaurant_service.generate_restaurant_slug(name)})


@restaurants_bp.route("/<int:restaurant_id>", methods=["GET"])
@restaurant_access()
def get_restaurant(restaurant_id):
    restaurant = request.restaurant
    data = restaurant.to_dict()
    data["is_owner"] = restaurant.owner_id == request.user.id
    data["permissions"] = g.restaurant_permissions
    return ok({"restaurant": data})


@restaurants_bp.route("/<int:restaurant_id>", methods=["PUT"])
@restaurant_access("settings")
@validate_schema(UpdateRestaurantRequest)
def update_restaurant(restaurant_id):
    data: UpdateRestaurantRequest = request.validated_data
    try:
        with transactional("Failed to update restaurant"):
            restaurant = restaurant_service.update_restaurant(request.restaurant, data)
    except RestaurantValidationError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    return ok({"restaurant": restaurant.to_dict()}, message="Restaurant updated")


@restaurants_bp.route("/<int:restaurant_id>/logo", methods=["POST"])
@restaurant_access("settings")
def upload_logo(restaurant_id):
    restaurant = request.restaurant
    old_path = restaurant.logo_path
    try:
        path, url = storage.save_image(storage.LOGO_BUCKET, restaurant.id, request.files.get("file"))
    except StorageError as e:
        return error(str(e), status=400)
    restaurant.logo_path = path
    restaurant.logo_url = url
    try:
        with transactional("Failed to save restaurant logo"):
            pass
    except Exception:
        storage.remove(storage.LOGO_BUCKET, path)
        return internal_error_response()
    if old_path and old_path != path:
        storage.remove(storage.LOGO_BUCKET, old_path)
    return ok({"logo_url": url}, message="Logo updated")


@restaurants_bp.route("/<int:restaurant_id>/logo", methods=["DELETE"])
@restaurant_access("settings")
def delete_logo(restaurant_id):
    restaurant = request.restaurant
    old_path = restaurant.logo_path
    restaurant.logo_path = None
    restaurant.logo_url = None
    try:
        with transactional("Failed to remove restaurant logo"):
            pass
    except Exception:
        return internal_error_response()
    storage.remove(storage.LOGO_BUCKET, old_path)
    return ok(message="Logo removed")


@restaurants_bp.route("/<int:restaurant_id>/dashboard", methods=["GET"])
@restaurant_access()
def dashboard(restaurant_id):
    return ok({"stats": reports.dashboard_stats(request.restaurant)})


@restaurants_bp.route("/<int:restaurant_id>/orders", methods=["DELETE"])
@restaurant_access("settings")
def purge_orders(restaurant_id):
    """
    Delete orders older than a range
    ---
    tags:
      - Restaurants
    parameters:
      - name: older_than
        in: query
        type: string
        enum: [all, 7days, 30days, 3months, 6months, 1year]
    responses:
      200:
        description: Number of deleted orders
    """
    older_than = request.args.get("older_than", "")
    try:
        with transactional("Failed to delete orders"):
            deleted = restaurant_service.purge_orders(request.restaurant, older_than)
    except RestaurantValidationError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    return ok({"deleted": deleted}, message=f"{deleted} orders deleted")
