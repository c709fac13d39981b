from functools import wraps
from flask import request, g
from .responses import error
from app.auth.permissions import role_has_scope, restaurant_permissions
from .jwt import decode_token, TokenError
from models import db
from models.user import UserProfile
from models.restaurant import Restaurant


STREAM_SUFFIX = "/stream"


def _bearer():
    auth = request.headers.get("Authorization", "")
    if not auth and request.path.endswith(STREAM_SUFFIX):
        # EventSource cannot send headers
        auth = request.args.get("access_token", "")
    return auth


def auth_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        auth = _bearer()
        if not auth:
            return error("Auth header missing", status=401)
        token = auth.split(" ", 1)[1] if auth.startswith("Bearer ") else auth
        try:
            payload = decode_token(token, expected_type="access")
        except TokenError as e:
            return error(str(e), status=401)

        user = db.session.get(UserProfile, int(payload["sub"]))
        if not user:
            return error("User not found", status=401)
        g.user_id = user.id
        g.role = user.role or payload.get("role")
        request.user = user
        return func(*args, **kwargs)

    return wrapper


def _to_set(obj):
    return set(obj) if isinstance(obj, (list, tuple, set)) else {obj}


def role_required(required):
    """Authorize based on user role or scoped action."""
    required_set = _to_set(required)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            role = getattr(g, "role", None)
            if not role:
                return error("Role missing", status=403)
            for entry in required_set:
                if ":" in entry:
                    r, action = entry.split(":", 1)
                    if (r == "*" or role == r) and role_has_scope(role, action):
                        break
                else:
                    if role == entry:
                        break
            else:
                return error("Forbidden", status=403)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def restaurant_access(*modules, owner_only=False):
    """Load ``restaurant_id`` from the URL and check the caller's module flags.

    Any one of ``modules`` is enough; with none given, membership suffices.
    Must run after :func:`auth_required`.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            restaurant = db.session.get(Restaurant, kwargs.get("restaurant_id"))
            if not restaurant:
                return error("Restaurant not found", status=404)
            user = request.user
            perms = restaurant_permissions(user, restaurant)
            if perms is None:
                return error("Unauthorized", status=403)
            if owner_only and not (user.role == "super_admin" or restaurant.owner_id == user.id):
                return error("Only the restaurant owner can do this", status=403)
            if modules and not any(perms.get(m) for m in modules):
                return error("Forbidden", status=403)
            request.restaurant = restaurant
            g.restaurant_permissions = perms
            return fn(*args, **kwargs)

        return wrapper

    return decorator
