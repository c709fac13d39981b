from decimal import Decimal
from flask import request
from sqlalchemy import func
from app.schemas.menu import (
    CategoryRequest,
    MenuItemRequest,
    MenuItemUpdateRequest,
    MenuUpdateRequest,
    ReorderRequest,
)
from app.services import restaurant_service, storage
from app.services.storage import StorageError
from app.utils import error, internal_error_response, ok, restaurant_access, transactional, validate_schema
from models import db
from models.menu import Category, Menu, MenuItem
from . import restaurants_bp


def _menu_or_none(restaurant):
    return restaurant_service.active_menu(restaurant) or Menu.query.filter_by(
        restaurant_id=restaurant.id
    ).first()


def _next_position(model, menu_id):
    current = db.session.query(func.max(model.position)).filter(model.menu_id == menu_id).scalar()
    return (current if current is not None else -1) + 1


def _category_or_none(menu, category_id):
    category = db.session.get(Category, category_id) if category_id else None
    if not category or category.menu_id != menu.id:
        return None
    return category


def _item_or_none(menu, item_id):
    item = db.session.get(MenuItem, item_id)
    if not item or item.menu_id != menu.id:
        return None
    return item


def _reorder(model, menu, ids):
    rows = {row.id: row for row in model.query.filter(model.menu_id == menu.id, model.id.in_(ids)).all()}
    if len(rows) != len(set(ids)):
        return False
    for position, row_id in enumerate(ids):
        rows[row_id].position = position
    return True


@restaurants_bp.route("/<int:restaurant_id>/menu", methods=["GET"])
@restaurant_access("menu_editor")
def get_menu(restaurant_id):
    """
    Full menu for the editor, unavailable items included
    ---
    tags:
      - Menu
    responses:
      200:
        description: Menu, categories and items
      404:
        description: Restaurant has no menu
    """
    menu = _menu_or_none(request.restaurant)
    if not menu:
        return error("Menu not found", status=404)
    return ok({
        "menu": menu.to_dict(),
        "categories": [c.to_dict() for c in menu.categories],
        "items": [i.to_dict() for i in menu.items],
    })


@restaurants_bp.route("/<int:restaurant_id>/menu", methods=["PUT"])
@restaurant_access("menu_editor")
@validate_schema(MenuUpdateRequest)
def update_menu(restaurant_id):
    menu = _menu_or_none(request.restaurant)
    if not menu:
        return error("Menu not found", status=404)
    for key, value in request.validated_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(menu, key, value)
    try:
        with transactional("Failed to update menu"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"menu": menu.to_dict()}, message="Menu updated")


@restaurants_bp.route("/<int:restaurant_id>/menu/categories", methods=["POST"])
@restaurant_access("menu_editor")
@validate_schema(CategoryRequest)
def add_category(restaurant_id):
    menu = _menu_or_none(request.restaurant)
    if not menu:
        return error("Menu not found", status=404)
    data: CategoryRequest = request.validated_data
    category = Category(
        menu_id=menu.id,
        name=data.name,
        description=data.description,
        position=_next_position(Category, menu.id),
    )
    try:
        with transactional("Failed to add category"):
            db.session.add(category)
    except Exception:
        return internal_error_response()
    return ok({"category": category.to_dict()}, message="Category added", status=201)


@restaurants_bp.route("/<int:restaurant_id>/menu/categories/reorder", methods=["POST"])
@restaurant_access("menu_editor")
@validate_schema(ReorderRequest)
def reorder_categories(restaurant_id):
    menu = _menu_or_none(request.restaurant)
    if not menu or not _reorder(Category, menu, request.validated_data.ids):
        return error("Unknown category in order list", status=400)
    try:
        with transactional("Failed to reorder categories"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"categories": [c.to_dict() for c in Category.query.filter_by(menu_id=menu.id).order_by(Category.position).all()]})


@restaurants_bp.route("/<int:restaurant_id>/menu/categories/<int:category_id>", methods=["PUT"])
@restaurant_access("menu_editor")
@validate_schema(CategoryRequest)
def update_category(restaurant_id, category_id):
    menu = _menu_or_none(request.restaurant)
    category = _category_or_none(menu, category_id) if menu else None
    if not category:
        return error("Category not found", status=404)
    data: CategoryRequest = request.validated_data
    category.name = data.name
    category.description = data.description
    try:
        with transactional("Failed to update category"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"category": category.to_dict()}, message="Category updated")


@restaurants_bp.route("/<int:restaurant_id>/menu/categories/<int:category_id>", methods=["DELETE"])
@restaurant_access("menu_editor")
def delete_category(restaurant_id, category_id):
    menu = _menu_or_none(request.restaurant)
    category = _category_or_none(menu, category_id) if menu else None
    if not category:
        return error("Category not found", status=404)
    try:
        with transactional("Failed to delete category"):
            MenuItem.query.filter_by(category_id=category.id).update({"category_id": None})
            db.session.delete(category)
    except Exception:
        return internal_error_response()
    return ok(message="Category deleted")


def _apply_item_fields(item, fields, menu):
    if "category_id" in fields and fields["category_id"] is not None:
        if not _category_or_none(menu, fields["category_id"]):
            return "Category not found"
    for key, value in fields.items():
        if key == "price" and value is not None:
            value = Decimal(str(value))
        if key == "options" and value is not None:
            value = [dict(o) for o in value]
        if value is None and key not in ("category_id", "description"):
            continue
        setattr(item, key, value)
    return None


@restaurants_bp.route("/<int:restaurant_id>/menu/items", methods=["POST"])
@restaurant_access("menu_editor")
@validate_schema(MenuItemRequest)
def add_item(restaurant_id):
    """
    Add a menu item
    ---
    tags:
      - Menu
    responses:
      201:
        description: Item created
    """
    menu = _menu_or_none(request.restaurant)
    if not menu:
        return error("Menu not found", status=404)
    item = MenuItem(menu_id=menu.id, position=_next_position(MenuItem, menu.id), options=[])
    problem = _apply_item_fields(item, request.validated_data.model_dump(), menu)
    if problem:
        return error(problem, status=400)
    try:
        with transactional("Failed to add menu item"):
            db.session.add(item)
    except Exception:
        return internal_error_response()
    return ok({"item": item.to_dict()}, message="Item added", status=201)


@restaurants_bp.route("/<int:restaurant_id>/menu/items/reorder", methods=["POST"])
@restaurant_access("menu_editor")
@validate_schema(ReorderRequest)
def reorder_items(restaurant_id):
    menu = _menu_or_none(request.restaurant)
    if not menu or not _reorder(MenuItem, menu, request.validated_data.ids):
        return error("Unknown item in order list", status=400)
    try:
        with transactional("Failed to reorder items"):
            pass
    except Exception:
        return internal_error_response()
    return ok(message="Items reordered")


@restaurants_bp.route("/<int:restaurant_id>/menu/items/<int:item_id>", methods=["PUT"])
@restaurant_access("menu_editor")
@validate_schema(MenuItemUpdateRequest)
def update_item(restaurant_id, item_id):
    menu = _menu_or_none(request.restaurant)
    item = _item_or_none(menu, item_id) if menu else None
    if not item:
        return error("Item not found", status=404)
    problem = _apply_item_fields(item, request.validated_data.model_dump(exclude_unset=True), menu)
    if problem:
        return error(problem, status=400)
    try:
        with transactional("Failed to update menu item"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"item": item.to_dict()}, message="Item updated")


@restaurants_bp.route("/<int:restaurant_id>/menu/items/<int:item_id>/toggle", methods=["POST"])
@restaurant_access("menu_editor")
def toggle_item(restaurant_id, item_id):
    menu = _menu_or_none(request.restaurant)
    item = _item_or_none(menu, item_id) if menu else None
    if not item:
        return error("Item not found", status=404)
    item.is_available = not item.is_available
    try:
        with transactional("Failed to toggle item availability"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"item": item.to_dict()}, message="Item availability updated")


@restaurants_bp.route("/<int:restaurant_id>/menu/items/<int:item_id>", methods=["DELETE"])
@restaurant_access("menu_editor")
def delete_item(restaurant_id, item_id):
    menu = _menu_or_none(request.restaurant)
    item = _item_or_none(menu, item_id) if menu else None
    if not item:
        return error("Item not found", status=404)
    image_path = item.image_path
    try:
        with transactional("Failed to delete menu item"):
            db.session.delete(item)
    except Exception:
        return internal_error_response()
    storage.remove(storage.MENU_ITEM_BUCKET, image_path)
    return ok(message="Item deleted")


@restaurants_bp.route("/<int:restaurant_id>/menu/items/<int:item_id>/image", methods=["POST"])
@restaurant_access("menu_editor")
def upload_item_image(restaurant_id, item_id):
    menu = _menu_or_none(request.restaurant)
    item = _item_or_none(menu, item_id) if menu else None
    if not item:
        return error("Item not found", status=404)
    old_path = item.image_path
    try:
        path, url = storage.save_image(storage.MENU_ITEM_BUCKET, restaurant_id, request.files.get("file"))
    except StorageError as e:
        return error(str(e), status=400)
    item.image_path = path
    item.image_url = url
    try:
        with transactional("Failed to save item image"):
            pass
    except Exception:
        storage.remove(storage.MENU_ITEM_BUCKET, path)
        return internal_error_response()
    if old_path and old_path != path:
        storage.remove(storage.MENU_ITEM_BUCKET, old_path)
    return ok({"image_url": url}, message="Image updated")
