from .auth import auth_bp
from .restaurants import restaurants_bp
from .public import public_bp
from .admin import admin_bp
from .storage import storage_bp


__all__ = [
    'auth_bp',
    'restaurants_bp',
    'public_bp',
    'admin_bp',
    'storage_bp',
]
