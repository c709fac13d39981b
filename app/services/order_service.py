import logging
from decimal import Decimal
from typing import List, Optional

from models import db
from models.order import Order, OrderItem, OrderStatusLog
from models.restaurant import PaymentMethod, Table
from app.services import order_status
from app.services.cart import Cart, CartLine, quantize
from app.utils.timezones import day_bounds, local_today, utcnow

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    pass


class OrderNotFound(Exception):
    pass


def generate_order_number(restaurant, now=None) -> str:
    """Next ``YYMMDD-NNN`` number of the restaurant's local day."""
    day = local_today(restaurant.timezone, now)
    prefix = day.strftime("%y%m%d")
    numbers = (
        db.session.query(Order.order_number)
        .filter(Order.restaurant_id == restaurant.id, Order.order_number.like(f"{prefix}-%"))
        .all()
    )
    seq = max((int(n.split("-", 1)[1]) for (n,) in numbers), default=0) + 1
    return f"{prefix}-{seq:03d}"


def place_order(
    restaurant,
    cart: Cart,
    customer_name: str,
    payment_method_id: Optional[int],
    customer_phone: Optional[str] = None,
    notes: Optional[str] = None,
    table_token: Optional[str] = None,
    lines: Optional[List[CartLine]] = None,
) -> Order:
    """Turn the cart into an order; the caller commits and then drops the
    ordered lines from the cart.

    Totals and items come from one snapshot of the lines (``lines``, or the
    cart as it is on entry), so edits that land mid-checkout stay in the cart.
    """
    if not restaurant.is_active:
        raise CheckoutError("Restaurant is not accepting orders")
    if cart is None:
        raise CheckoutError("Cart is empty")
    if lines is None:
        lines = cart.snapshot()
    if not lines or sum(line.quantity for line in lines) == 0:
        raise CheckoutError("Cart is empty")
    if cart.restaurant_id != restaurant.id:
        raise CheckoutError("Cart belongs to another restaurant")
    if not (customer_name or "").strip():
        raise CheckoutError("Customer name is required")
    if not payment_method_id:
        raise CheckoutError("Select a payment method")
    method = db.session.get(PaymentMethod, payment_method_id)
    if not method or method.restaurant_id != restaurant.id or not method.is_enabled:
        raise CheckoutError("Payment method not available")

    table = None
    if table_token:
        table = Table.query.filter_by(
            qr_code_token=table_token, restaurant_id=restaurant.id
        ).first()
        if not table or not table.is_active:
            raise CheckoutError("Table not found")

    order = Order(
        restaurant_id=restaurant.id,
        table_id=table.id if table else None,
        order_number=generate_order_number(restaurant),
        customer_name=customer_name.strip(),
        customer_phone=customer_phone or None,
        notes=notes or None,
        total_amount=quantize(sum((line.line_total for line in lines), Decimal("0"))),
        order_status=order_status.NEW,
        payment_status="pending",
        payment_method=method.name,
    )
    db.session.add(order)
    db.session.flush()

    for line in lines:
        db.session.add(
            OrderItem(
                order_id=order.id,
                menu_item_id=line.menu_item_id,
                name=line.name,
                quantity=line.quantity,
                price=quantize(line.unit_price),
                options=line.options(),
                subtotal=quantize(line.line_total),
            )
        )
    db.session.add(OrderStatusLog(order_id=order.id, status=order_status.NEW, updated_by=customer_name.strip()))
    logger.info("order %s placed at restaurant %s", order.order_number, restaurant.id)
    return order


def change_status(order: Order, target: str, actor: str) -> str:
    """Apply one legal transition; raises InvalidTransition otherwise.

    The row is only updated while it still holds the status this session
    read, so a concurrent change makes the call fail instead of being
    overwritten.
    """
    current = order.order_status
    order_status.ensure_transition(current, target)
    now = utcnow()
    claimed = (
        Order.query.filter_by(id=order.id, order_status=current)
        .update({"order_status": target, "updated_at": now}, synchronize_session=False)
    )
    if not claimed:
        db.session.refresh(order)
        raise order_status.InvalidTransition(order.order_status, target)
    # attribute writes mark the order dirty so the change feed sees it
    order.order_status = target
    order.updated_at = now
    db.session.add(OrderStatusLog(order_id=order.id, status=target, updated_by=actor))
    return target


def advance_order(order: Order, actor: str, expected: Optional[str] = None) -> str:
    """Move one step along new -> preparing -> ready -> delivered.

    ``expected`` guards against double clicks: the request names the status
    it wants and fails if the order already moved.
    """
    target = order_status.next_status(order.order_status)
    if expected is not None and expected != target:
        raise order_status.InvalidTransition(order.order_status, expected)
    return change_status(order, target, actor)


def cancel_order(order: Order, actor: str) -> str:
    return change_status(order, order_status.CANCELLED, actor)


def find_order(restaurant, order_number: str) -> Order:
    order = Order.query.filter_by(restaurant_id=restaurant.id, order_number=order_number).first()
    if not order:
        raise OrderNotFound(order_number)
    return order


def customer_orders(restaurant, customer_name: str, limit: int = 20):
    return (
        Order.query.filter_by(restaurant_id=restaurant.id, customer_name=customer_name)
        .order_by(Order.created_at.desc())
        .limit(limit)
        .all()
    )


def kitchen_board(restaurant) -> dict:
    """Orders grouped by status, newest first within each column."""
    since, _ = day_bounds(local_today(restaurant.timezone), restaurant.timezone)
    orders = (
        Order.query.filter(Order.restaurant_id == restaurant.id)
        .filter(
            db.or_(
                Order.order_status.in_(order_status.PENDING + (order_status.READY,)),
                Order.created_at >= since,
            )
        )
        .order_by(Order.created_at.desc())
        .all()
    )
    board = {status: [] for status in order_status.STATUSES}
    for order in orders:
        board.setdefault(order.order_status, []).append(order.to_dict())
    return {
        "columns": board,
        "counts": {status: len(rows) for status, rows in board.items()},
    }
