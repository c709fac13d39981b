from datetime import datetime
from models import db, BIGINT, isoformat


class Menu(db.Model):
    __tablename__ = "menu"

    id = db.Column(BIGINT, primary_key=True)
    restaurant_id = db.Column(BIGINT, db.ForeignKey("restaurant.id"), nullable=False, index=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    categories = db.relationship(
        "Category", backref="menu", cascade="all, delete-orphan", lazy=True,
        order_by="Category.position",
    )
    items = db.relationship(
        "MenuItem", backref="menu", cascade="all, delete-orphan", lazy=True,
        order_by="MenuItem.position",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "title": self.title,
            "description": self.description,
            "is_active": self.is_active,
        }


class Category(db.Model):
    __tablename__ = "category"

    id = db.Column(BIGINT, primary_key=True)
    menu_id = db.Column(BIGINT, db.ForeignKey("menu.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    position = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "menu_id": self.menu_id,
            "name": self.name,
            "description": self.description,
            "position": self.position,
        }


class MenuItem(db.Model):
    __tablename__ = "menu_item"

    id = db.Column(BIGINT, primary_key=True)
    menu_id = db.Column(BIGINT, db.ForeignKey("menu.id"), nullable=False, index=True)
    category_id = db.Column(BIGINT, db.ForeignKey("category.id"), nullable=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    image_url = db.Column(db.String(500), nullable=True)
    image_path = db.Column(db.String(300), nullable=True)
    prep_time_minutes = db.Column(db.Integer, default=15)
    is_available = db.Column(db.Boolean, default=True)
    position = db.Column(db.Integer, default=0)
    # [{"name": "Large", "price": 2.0, "type": "size"}, {"name": "Cheese", "price": 1.5, "type": "extra"}]
    options = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = db.relationship("Category", backref=db.backref("items", lazy=True, order_by="MenuItem.position"))

    def options_of(self, kind):
        return [o for o in (self.options or []) if o.get("type", "extra") == kind]

    def to_dict(self):
        return {
            "id": self.id,
            "menu_id": self.menu_id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "image_url": self.image_url,
            "prep_time_minutes": self.prep_time_minutes,
            "is_available": self.is_available,
            "position": self.position,
            "options": list(self.options or []),
            "updated_at": isoformat(self.updated_at),
        }
