from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Numeric, Integer
from models import db, BIGINT, isoformat


class Order(db.Model):
    __tablename__ = "order"
    __table_args__ = (
        db.Index("ix_order_restaurant_status", "restaurant_id", "order_status"),
        db.Index("ix_order_restaurant_created", "restaurant_id", "created_at"),
        db.UniqueConstraint("restaurant_id", "order_number", name="uq_order_restaurant_number"),
    )
    __feed_table__ = "orders"

    id = Column(BIGINT, primary_key=True)
    restaurant_id = Column(BIGINT, ForeignKey("restaurant.id"), nullable=False)
    table_id = Column(BIGINT, ForeignKey("restaurant_table.id", ondelete="SET NULL"), nullable=True)
    order_number = Column(String(20), nullable=False)
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(30), nullable=True)
    notes = Column(Text, nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    order_status = Column(String(20), default="new")  # new, preparing, ready, delivered, cancelled
    payment_status = Column(String(20), default="pending")  # pending, paid
    payment_method = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    restaurant = db.relationship("Restaurant", backref=db.backref("orders", lazy=True, cascade="all, delete-orphan"))
    table = db.relationship("Table", lazy=True)
    items = db.relationship("OrderItem", backref="order", cascade="all, delete-orphan", lazy=True)
    status_logs = db.relationship("OrderStatusLog", backref="order", cascade="all, delete-orphan", lazy=True)

    def feed_record(self):
        """Column snapshot published on the change feed."""
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "order_status": self.order_status,
            "payment_status": self.payment_status,
            "total_amount": float(self.total_amount) if self.total_amount is not None else None,
            "updated_at": isoformat(self.updated_at),
        }

    def to_dict(self, with_items=True):
        data = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "order_number": self.order_number,
            "table_id": self.table_id,
            "table_name": self.table.name if self.table else None,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "notes": self.notes,
            "total_amount": float(self.total_amount),
            "order_status": self.order_status,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if with_items:
            data["items"] = [oi.to_dict() for oi in self.items]
        return data


class OrderItem(db.Model):
    __tablename__ = "order_item"
    id = db.Column(BIGINT, primary_key=True)
    order_id = db.Column(BIGINT, db.ForeignKey("order.id"), nullable=False, index=True)
    menu_item_id = db.Column(BIGINT, db.ForeignKey("menu_item.id", ondelete="SET NULL"), nullable=True)
    name = db.Column(db.String(100), nullable=False)
    quantity = db.Column(Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    # {"size": {"name", "price"} | None, "extras": [{"name", "price"}]}
    options = db.Column(db.JSON, nullable=True)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)

    def to_dict(self):
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.price),
            "options": self.options or {},
            "subtotal": float(self.subtotal),
        }


class OrderStatusLog(db.Model):
    __tablename__ = "order_status_log"
    id = Column(BIGINT, primary_key=True)
    order_id = Column(BIGINT, ForeignKey("order.id"), nullable=False)
    status = Column(String(30), nullable=False)
    updated_by = Column(String(255), nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "order_id": self.order_id,
            "status": self.status,
            "updated_by": self.updated_by,
            "timestamp": isoformat(self.timestamp),
        }
