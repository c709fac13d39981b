"""Restaurant team: accounts that work at a restaurant and their module flags."""
import logging

from models import db
from models.restaurant import RestaurantPermission
from models.user import UserProfile, UserRole

logger = logging.getLogger(__name__)


class TeamError(Exception):
    pass


def list_members(restaurant):
    rows = (
        RestaurantPermission.query.filter_by(restaurant_id=restaurant.id)
        .order_by(RestaurantPermission.created_at.asc())
        .all()
    )
    return [
        {
            "id": row.id,
            "user_id": row.user_id,
            "name": row.user.name,
            "email": row.user.email,
            "phone": row.user.phone,
            "role": row.user.role,
            "permissions": row.flags(),
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
        for row in rows
    ]


def add_member(restaurant, data):
    """Create the account, its role and its permission row in one go (no commit).

    Everything is added to the current session so the caller's transaction
    either provisions the member fully or not at all.
    """
    email = data.email.lower()
    if UserProfile.query.filter(db.func.lower(UserProfile.email) == email).first():
        raise TeamError("A user with this email is already registered")
    user = UserProfile(email=email, name=data.name, phone=data.phone)
    user.set_password(data.password)
    user.role_row = UserRole(role=data.role)
    db.session.add(user)
    db.session.flush()
    row = RestaurantPermission(
        user_id=user.id,
        restaurant_id=restaurant.id,
        permissions=data.permissions.model_dump(),
    )
    db.session.add(row)
    logger.info("team member %s added to restaurant %s", user.id, restaurant.id)
    return row


def _member(restaurant, member_id):
    row = db.session.get(RestaurantPermission, member_id)
    if not row or row.restaurant_id != restaurant.id:
        raise TeamError("Team member not found")
    return row


def update_permissions(restaurant, member_id, flags):
    row = _member(restaurant, member_id)
    row.permissions = flags.model_dump()
    return row


def remove_member(restaurant, member_id):
    row = _member(restaurant, member_id)
    db.session.delete(row)
    return row.user_id
