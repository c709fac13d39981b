from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import BigInteger, Integer

# Use BigInteger in production but fall back to Integer for SQLite
BIGINT = BigInteger().with_variant(Integer, "sqlite")

db = SQLAlchemy()


def isoformat(value):
    return value.isoformat() if value is not None else None


# Re-export common models for convenience
from .user import UserProfile, UserRole, PasswordResetToken  # noqa: F401,E402
from .restaurant import Restaurant, RestaurantPermission, Table, PaymentMethod  # noqa: F401,E402
from .menu import Menu, Category, MenuItem  # noqa: F401,E402
from .order import Order, OrderItem, OrderStatusLog  # noqa: F401,E402
from .platform import PlatformSettings  # noqa: F401,E402
