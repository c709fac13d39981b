from flask import request
from app.schemas.restaurant import PaymentMethodRequest, PaymentMethodUpdateRequest
from app.services import restaurant_service
from app.utils import error, internal_error_response, ok, restaurant_access, transactional, validate_schema
from models import db
from models.restaurant import PaymentMethod
from . import restaurants_bp


def _method_or_none(restaurant, method_id):
    method = db.session.get(PaymentMethod, method_id)
    if not method or method.restaurant_id != restaurant.id:
        return None
    return method


@restaurants_bp.route("/<int:restaurant_id>/payment-methods", methods=["GET"])
@restaurant_access()
def list_payment_methods(restaurant_id):
    methods = (
        PaymentMethod.query.filter_by(restaurant_id=restaurant_id)
        .order_by(PaymentMethod.position.asc())
        .all()
    )
    return ok({"payment_methods": [m.to_dict() for m in methods]})


@restaurants_bp.route("/<int:restaurant_id>/payment-methods", methods=["POST"])
@restaurant_access("settings")
@validate_schema(PaymentMethodRequest)
def add_payment_method(restaurant_id):
    data: PaymentMethodRequest = request.validated_data
    method = PaymentMethod(
        restaurant_id=restaurant_id,
        name=data.name,
        is_enabled=data.is_enabled,
        position=restaurant_service.next_payment_position(request.restaurant),
    )
    try:
        with transactional("Failed to add payment method"):
            db.session.add(method)
    except Exception:
        return internal_error_response()
    return ok({"payment_method": method.to_dict()}, message="Payment method added", status=201)


@restaurants_bp.route("/<int:restaurant_id>/payment-methods/<int:method_id>", methods=["PATCH"])
@restaurant_access("settings")
@validate_schema(PaymentMethodUpdateRequest)
def update_payment_method(restaurant_id, method_id):
    method = _method_or_none(request.restaurant, method_id)
    if not method:
        return error("Payment method not found", status=404)
    data: PaymentMethodUpdateRequest = request.validated_data
    if data.name is not None:
        method.name = data.name
    if data.is_enabled is not None:
        method.is_enabled = data.is_enabled
    try:
        with transactional("Failed to update payment method"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"payment_method": method.to_dict()}, message="Payment method updated")


@restaurants_bp.route("/<int:restaurant_id>/payment-methods/<int:method_id>", methods=["DELETE"])
@restaurant_access("settings")
def delete_payment_method(restaurant_id, method_id):
    method = _method_or_none(request.restaurant, method_id)
    if not method:
        return error("Payment method not found", status=404)
    try:
        with transactional("Failed to delete payment method"):
            db.session.delete(method)
    except Exception:
        return internal_error_response()
    return ok(message="Payment method deleted")
