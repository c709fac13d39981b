from flask import current_app, request, Response
from flask_limiter.util import get_remote_address
from extensions import limiter
from app import realtime
from app.metrics import ORDERS_PLACED
from app.schemas.order import CheckoutRequest, CustomerOrdersQuery
from app.services import order_service, order_status
from app.services.order_service import CheckoutError, OrderNotFound
from app.utils import error, internal_error_response, ok, run_in_transaction, validate_schema
from models import db
from models.order import Order
from . import public_bp, active_restaurant, CART_HEADER


def _tracking(order):
    data = order.to_dict()
    data["status"] = order_status.describe(order.order_status)
    return data


@public_bp.route("/restaurants/<slug>/orders", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["ORDER_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many orders from this IP",
)
@validate_schema(CheckoutRequest)
def checkout(slug):
    """
    Place an order from the guest cart
    ---
    tags:
      - Public
    parameters:
      - name: X-Cart-Session
        in: header
        type: string
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [customer_name, payment_method_id]
          properties:
            customer_name:
              type: string
            customer_phone:
              type: string
            notes:
              type: string
            payment_method_id:
              type: integer
            table_token:
              type: string
    responses:
      201:
        description: Order placed, cart emptied
      400:
        description: Empty cart, missing name or payment method
    """
    restaurant = active_restaurant(slug)
    data: CheckoutRequest = request.validated_data
    store = current_app.extensions["cart_store"]
    token = request.headers.get(CART_HEADER)
    cart = store.peek(token)
    lines = cart.snapshot() if cart is not None else None
    try:
        order = run_in_transaction(
            order_service.place_order,
            restaurant,
            cart,
            data.customer_name,
            data.payment_method_id,
            customer_phone=data.customer_phone,
            notes=data.notes,
            table_token=data.table_token,
            lines=lines,
            message="Failed to place order",
            retries=2,
        )
    except CheckoutError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    ORDERS_PLACED.inc()
    cart.remove_lines(line.id for line in lines)
    return ok(
        {"order_number": order.order_number, "order": _tracking(order), "cart_session": token},
        message="Order placed",
        status=201,
    )


@public_bp.route("/restaurants/<slug>/orders", methods=["GET"])
@validate_schema(CustomerOrdersQuery, source="args")
def my_orders(slug):
    """Recent orders placed under a customer name."""
    restaurant = active_restaurant(slug)
    orders = order_service.customer_orders(restaurant, request.validated_data.customer)
    return ok({"orders": [_tracking(o) for o in orders]})


@public_bp.route("/restaurants/<slug>/orders/<order_number>", methods=["GET"])
def track_order(slug, order_number):
    restaurant = active_restaurant(slug)
    try:
        order = order_service.find_order(restaurant, order_number)
    except OrderNotFound:
        return error("Order not found", status=404)
    return ok({"order": _tracking(order)})


@public_bp.route("/restaurants/<slug>/orders/<order_number>/stream", methods=["GET"])
def track_order_stream(slug, order_number):
    """Server-sent events: the order's status every time it changes."""
    restaurant = active_restaurant(slug)
    try:
        order = order_service.find_order(restaurant, order_number)
    except OrderNotFound:
        return error("Order not found", status=404)
    app = current_app._get_current_object()
    order_id = order.id
    subscription = realtime.subscribe_for(
        app,
        "orders",
        events=(realtime.UPDATE,),
        match=lambda record: record.get("id") == order_id,
    )

    def snapshot(batch):
        with app.app_context():
            current = db.session.get(Order, order_id)
            if current is None:
                subscription.close()
                return None
            if current.order_status in order_status.TERMINAL and batch:
                subscription.close()
            return {
                "order": _tracking(current),
                "message": order_status.STATUS_MESSAGES.get(current.order_status, ""),
                "cue": order_status.CUE_STATUS_CHANGE if batch else None,
            }

    stream = realtime.event_stream(
        subscription, snapshot, app.config["REALTIME_KEEPALIVE_SECONDS"], "order"
    )
    return Response(
        stream,
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
