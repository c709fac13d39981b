from flask import request, current_app, Response
from app import realtime
from app.metrics import ORDER_TRANSITIONS
from app.schemas.order import OrderListQuery, StatusChangeRequest
from app.services import order_service, order_status
from app.services.order_status import InvalidTransition
from app.utils import error, internal_error_response, ok, restaurant_access, transactional, validate_schema
from models import db
from models.order import Order, OrderStatusLog
from models.restaurant import Restaurant
from . import restaurants_bp


def _order_or_none(restaurant, order_id):
    order = db.session.get(Order, order_id)
    if not order or order.restaurant_id != restaurant.id:
        return None
    return order


@restaurants_bp.route("/<int:restaurant_id>/orders", methods=["GET"])
@restaurant_access("orders", "kitchen")
@validate_schema(OrderListQuery, source="args")
def list_orders(restaurant_id):
    params: OrderListQuery = request.validated_data
    query = Order.query.filter_by(restaurant_id=restaurant_id)
    if params.status:
        query = query.filter(Order.order_status == params.status)
    orders = query.order_by(Order.created_at.desc()).limit(params.limit).all()
    return ok({"orders": [o.to_dict() for o in orders]})


@restaurants_bp.route("/<int:restaurant_id>/orders/<int:order_id>", methods=["GET"])
@restaurant_access("orders", "kitchen")
def get_order(restaurant_id, order_id):
    order = _order_or_none(request.restaurant, order_id)
    if not order:
        return error("Order not found", status=404)
    history = (
        OrderStatusLog.query.filter_by(order_id=order.id)
        .order_by(OrderStatusLog.timestamp.asc(), OrderStatusLog.id.asc())
        .all()
    )
    data = order.to_dict()
    data["status"] = order_status.describe(order.order_status)
    data["history"] = [h.to_dict() for h in history]
    return ok({"order": data})


@restaurants_bp.route("/<int:restaurant_id>/kitchen", methods=["GET"])
@restaurant_access("kitchen", "orders")
def kitchen_board(restaurant_id):
    return ok({"board": order_service.kitchen_board(request.restaurant)})


@restaurants_bp.route("/<int:restaurant_id>/orders/<int:order_id>/advance", methods=["POST"])
@restaurant_access("kitchen", "orders")
@validate_schema(StatusChangeRequest)
def advance_order(restaurant_id, order_id):
    """
    Move an order one step forward
    ---
    tags:
      - Kitchen
    parameters:
      - name: body
        in: body
        schema:
          type: object
          properties:
            status:
              type: string
              description: Expected next status, rejected if the order moved meanwhile
    responses:
      200:
        description: New status
      409:
        description: Transition not allowed
    """
    order = _order_or_none(request.restaurant, order_id)
    if not order:
        return error("Order not found", status=404)
    expected = request.validated_data.status
    try:
        with transactional("Failed to update order status"):
            new_status = order_service.advance_order(order, request.user.email, expected=expected)
    except InvalidTransition as e:
        return error(str(e), status=409)
    except Exception:
        return internal_error_response()
    ORDER_TRANSITIONS.labels(new_status).inc()
    return ok({"order": order.to_dict(), "status": order_status.describe(new_status)},
              message=f"Order marked as {new_status}")


@restaurants_bp.route("/<int:restaurant_id>/orders/<int:order_id>/cancel", methods=["POST"])
@restaurant_access("kitchen", "orders")
def cancel_order(restaurant_id, order_id):
    order = _order_or_none(request.restaurant, order_id)
    if not order:
        return error("Order not found", status=404)
    try:
        with transactional("Failed to cancel order"):
            order_service.cancel_order(order, request.user.email)
    except InvalidTransition as e:
        return error(str(e), status=409)
    except Exception:
        return internal_error_response()
    ORDER_TRANSITIONS.labels(order_status.CANCELLED).inc()
    return ok({"order": order.to_dict()}, message="Order cancelled")


@restaurants_bp.route("/<int:restaurant_id>/kitchen/stream", methods=["GET"])
@restaurant_access("kitchen", "orders")
def kitchen_stream(restaurant_id):
    """Server-sent events: the kitchen board, re-sent after each burst of order changes."""
    app = current_app._get_current_object()
    subscription = realtime.subscribe_for(
        app,
        "orders",
        events=realtime.EVENTS,
        match=lambda record: record.get("restaurant_id") == restaurant_id,
    )

    def snapshot(batch):
        with app.app_context():
            restaurant = db.session.get(Restaurant, restaurant_id)
            if restaurant is None:
                subscription.close()
                return None
            cue = order_status.CUE_NEW_ORDER if any(ev.event == realtime.INSERT for ev in batch) else None
            return {
                "board": order_service.kitchen_board(restaurant),
                "changes": [ev.to_dict() for ev in batch],
                "cue": cue,
            }

    stream = realtime.event_stream(
        subscription, snapshot, app.config["REALTIME_KEEPALIVE_SECONDS"], "kitchen"
    )
    return Response(
        stream,
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
