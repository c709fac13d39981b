"""
Central registry of allowed actions per role, and per-restaurant module access.
"""
from models.restaurant import MODULES, RestaurantPermission

ROLE_SCOPES = {
    "super_admin":      {"*"},
    "restaurant_admin": {"create_restaurant"},
    "staff":            set(),
}

def role_has_scope(role: str, action: str) -> bool:
    scopes = ROLE_SCOPES.get(role, set())
    return "*" in scopes or action in scopes


def full_access():
    return {module: True for module in MODULES}


def restaurant_permissions(user, restaurant):
    """Module flags ``user`` holds on ``restaurant``, or None without access.

    Owners and super admins hold every module.
    """
    if user.role == "super_admin" or restaurant.owner_id == user.id:
        return full_access()
    row = RestaurantPermission.query.filter_by(
        user_id=user.id, restaurant_id=restaurant.id
    ).first()
    return row.flags() if row else None
