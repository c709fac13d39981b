import logging

import pandas as pd
from sqlalchemy import func

from models import db
from models.menu import Menu
from models.order import Order
from models.restaurant import PaymentMethod, Restaurant, RestaurantPermission
from app.auth.permissions import restaurant_permissions
from app.utils.slug import slugify
from app.utils.timezones import utcnow

logger = logging.getLogger(__name__)

DEFAULT_MENU_TITLE = "Main Menu"
DEFAULT_MENU_DESCRIPTION = "Our delicious menu"

# DateOffset per purge range; None deletes everything
PURGE_RANGES = {
    "all": None,
    "7days": pd.DateOffset(days=7),
    "30days": pd.DateOffset(days=30),
    "3months": pd.DateOffset(months=3),
    "6months": pd.DateOffset(months=6),
    "1year": pd.DateOffset(years=1),
}


class RestaurantValidationError(Exception):
    pass


def slug_taken(slug, exclude_id=None) -> bool:
    query = Restaurant.query.filter(Restaurant.slug == slug)
    if exclude_id is not None:
        query = query.filter(Restaurant.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def generate_restaurant_slug(name: str) -> str:
    """Unique slug for ``name``: the plain slug, then ``-2``, ``-3``..."""
    base = slugify(name) or "restaurant"
    candidate, n = base, 1
    while slug_taken(candidate):
        n += 1
        candidate = f"{base}-{n}"
    return candidate


def create_restaurant(owner, data) -> Restaurant:
    """Insert the restaurant and its default active menu (no commit)."""
    if slug_taken(data.slug):
        raise RestaurantValidationError("Slug already in use")
    restaurant = Restaurant(
        owner_id=owner.id,
        name=data.name,
        slug=data.slug,
        address=data.address,
        phone=data.phone,
        email=data.email,
        timezone=data.timezone,
        currency=data.currency,
        is_active=True,
    )
    db.session.add(restaurant)
    db.session.flush()
    db.session.add(
        Menu(
            restaurant_id=restaurant.id,
            title=DEFAULT_MENU_TITLE,
            description=DEFAULT_MENU_DESCRIPTION,
            is_active=True,
        )
    )
    logger.info("restaurant %s created by user %s", restaurant.slug, owner.id)
    return restaurant


def update_restaurant(restaurant, data) -> Restaurant:
    fields = data.model_dump(exclude_unset=True)
    if "slug" in fields and fields["slug"] and slug_taken(fields["slug"], exclude_id=restaurant.id):
        raise RestaurantValidationError("Slug already in use")
    for key, value in fields.items():
        if key in ("name", "slug", "timezone", "currency") and value is None:
            continue
        setattr(restaurant, key, value)
    return restaurant


def visible_restaurants(user):
    """Restaurants ``user`` can open, annotated with ownership and flags."""
    if user.role == "super_admin":
        restaurants = Restaurant.query.order_by(Restaurant.created_at.desc()).all()
    else:
        member_ids = db.session.query(RestaurantPermission.restaurant_id).filter(
            RestaurantPermission.user_id == user.id
        )
        restaurants = (
            Restaurant.query.filter(
                db.or_(Restaurant.owner_id == user.id, Restaurant.id.in_(member_ids))
            )
            .order_by(Restaurant.created_at.desc())
            .all()
        )
    result = []
    for restaurant in restaurants:
        data = restaurant.to_dict()
        data["is_owner"] = restaurant.owner_id == user.id
        data["permissions"] = restaurant_permissions(user, restaurant)
        result.append(data)
    return result


def active_menu(restaurant):
    return (
        Menu.query.filter_by(restaurant_id=restaurant.id, is_active=True)
        .order_by(Menu.created_at.asc())
        .first()
    )


def public_menu(restaurant) -> dict:
    """Active menu with ordered categories and available items only."""
    menu = active_menu(restaurant)
    data = {
        "restaurant": restaurant.to_dict(),
        "menu": menu.to_dict() if menu else None,
        "categories": [],
        "uncategorized": [],
    }
    if not menu:
        return data
    available = [item for item in menu.items if item.is_available]
    by_category = {}
    for item in available:
        by_category.setdefault(item.category_id, []).append(item.to_dict())
    for category in menu.categories:
        entry = category.to_dict()
        entry["items"] = by_category.get(category.id, [])
        data["categories"].append(entry)
    data["uncategorized"] = by_category.get(None, [])
    return data


def enabled_payment_methods(restaurant):
    return (
        PaymentMethod.query.filter_by(restaurant_id=restaurant.id, is_enabled=True)
        .order_by(PaymentMethod.position.asc())
        .all()
    )


def next_payment_position(restaurant) -> int:
    current = (
        db.session.query(func.max(PaymentMethod.position))
        .filter(PaymentMethod.restaurant_id == restaurant.id)
        .scalar()
    )
    return (current or 0) + 1


def purge_orders(restaurant, older_than: str, now=None) -> int:
    """Delete orders created before the cutoff of ``older_than``; returns the count."""
    if older_than not in PURGE_RANGES:
        raise RestaurantValidationError("Invalid range")
    offset = PURGE_RANGES[older_than]
    query = Order.query.filter(Order.restaurant_id == restaurant.id)
    if offset is not None:
        cutoff = (pd.Timestamp(now or utcnow()) - offset).to_pydatetime()
        query = query.filter(Order.created_at < cutoff)
    orders = query.all()
    for order in orders:
        db.session.delete(order)
    logger.info("purged %s orders from restaurant %s (%s)", len(orders), restaurant.id, older_than)
    return len(orders)
