import uuid
from datetime import datetime
from models import db, BIGINT, isoformat

MODULES = ("menu_editor", "qr_codes", "orders", "kitchen", "settings", "reports")
DEFAULT_MEMBER_PERMISSIONS = {
    "menu_editor": True,
    "qr_codes": True,
    "orders": True,
    "kitchen": True,
    "settings": False,
    "reports": True,
}


def _token():
    return uuid.uuid4().hex


class Restaurant(db.Model):
    __tablename__ = "restaurant"

    id = db.Column(BIGINT, primary_key=True)
    owner_id = db.Column(BIGINT, db.ForeignKey("user_profile.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    address = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    logo_url = db.Column(db.String(500), nullable=True)
    logo_path = db.Column(db.String(300), nullable=True)
    timezone = db.Column(db.String(64), default="Africa/Maputo")
    currency = db.Column(db.String(8), default="MZN")
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship("UserProfile", backref=db.backref("restaurants", lazy=True))
    menus = db.relationship("Menu", backref="restaurant", cascade="all, delete-orphan", lazy=True)
    tables = db.relationship("Table", backref="restaurant", cascade="all, delete-orphan", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "slug": self.slug,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "logo_url": self.logo_url,
            "timezone": self.timezone,
            "currency": self.currency,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
        }


class RestaurantPermission(db.Model):
    __tablename__ = "restaurant_permission"
    __table_args__ = (
        db.UniqueConstraint("user_id", "restaurant_id", name="uq_restaurant_permission_user"),
    )

    id = db.Column(BIGINT, primary_key=True)
    user_id = db.Column(BIGINT, db.ForeignKey("user_profile.id"), nullable=False)
    restaurant_id = db.Column(BIGINT, db.ForeignKey("restaurant.id"), nullable=False)
    permissions = db.Column(db.JSON, nullable=False, default=lambda: dict(DEFAULT_MEMBER_PERMISSIONS))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("UserProfile", lazy=True)
    restaurant = db.relationship("Restaurant", backref=db.backref("permission_rows", cascade="all, delete-orphan", lazy=True))

    def flags(self):
        stored = self.permissions or {}
        return {module: bool(stored.get(module, False)) for module in MODULES}


class Table(db.Model):
    __tablename__ = "restaurant_table"

    id = db.Column(BIGINT, primary_key=True)
    restaurant_id = db.Column(BIGINT, db.ForeignKey("restaurant.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    qr_code_token = db.Column(db.String(64), unique=True, nullable=False, default=_token)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def regenerate_token(self):
        self.qr_code_token = _token()

    def to_dict(self):
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "qr_code_token": self.qr_code_token,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
        }


class PaymentMethod(db.Model):
    __tablename__ = "payment_method"

    id = db.Column(BIGINT, primary_key=True)
    restaurant_id = db.Column(BIGINT, db.ForeignKey("restaurant.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    is_enabled = db.Column(db.Boolean, default=True)
    position = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    restaurant = db.relationship("Restaurant", backref=db.backref("payment_methods", cascade="all, delete-orphan", lazy=True))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "is_enabled": self.is_enabled,
            "position": self.position,
        }
