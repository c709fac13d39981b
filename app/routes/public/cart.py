"""Guest cart endpoints. The cart lives in the process-local CartStore and is
addressed by the ``X-Cart-Session`` header; every response echoes the token."""
from flask import current_app, request
from app.schemas.order import CartAddRequest, CartQuantityRequest
from app.services.cart import Modifier
from app.utils import error, ok, validate_schema
from models import db
from models.menu import MenuItem
from . import public_bp, active_restaurant, CART_HEADER


def _store():
    return current_app.extensions["cart_store"]


def _cart_response(token, cart, message="Success", status=200):
    response, code = ok({"cart_session": token, "cart": cart.to_dict()}, message=message, status=status)
    response.headers[CART_HEADER] = token
    return response, code


def _resolve_options(item, size_name, extra_names):
    """Match requested option names against the item; prices come from the menu."""
    size = None
    if size_name:
        match = next((o for o in item.options_of("size") if o.get("name") == size_name), None)
        if match is None:
            return None, None, f"Unknown size: {size_name}"
        size = Modifier.from_dict(match)
    extras = []
    available = {o.get("name"): o for o in item.options_of("extra")}
    for name in extra_names:
        if name not in available:
            return None, None, f"Unknown extra: {name}"
        extras.append(Modifier.from_dict(available[name]))
    return size, extras, None


@public_bp.route("/restaurants/<slug>/cart", methods=["GET"])
def get_cart(slug):
    restaurant = active_restaurant(slug)
    token, cart = _store().open(request.headers.get(CART_HEADER), restaurant.id)
    return _cart_response(token, cart)


@public_bp.route("/restaurants/<slug>/cart/items", methods=["POST"])
@validate_schema(CartAddRequest)
def add_to_cart(slug):
    """
    Add a menu item to the guest cart
    ---
    tags:
      - Public
    parameters:
      - name: X-Cart-Session
        in: header
        type: string
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            menu_item_id:
              type: integer
            quantity:
              type: integer
            size:
              type: string
            extras:
              type: array
              items:
                type: string
    responses:
      201:
        description: Updated cart
      400:
        description: Item unavailable or unknown option
    """
    restaurant = active_restaurant(slug)
    data: CartAddRequest = request.validated_data
    item = db.session.get(MenuItem, data.menu_item_id)
    if not item or item.menu.restaurant_id != restaurant.id:
        return error("Menu item not found", status=404)
    if not item.is_available:
        return error("Menu item is not available", status=400)
    size, extras, problem = _resolve_options(item, data.size, data.extras)
    if problem:
        return error(problem, status=400)
    token, cart = _store().open(request.headers.get(CART_HEADER), restaurant.id)
    cart.add_line(
        menu_item_id=item.id,
        name=item.name,
        unit_price=item.price,
        quantity=data.quantity,
        size=size,
        extras=extras,
        image_url=item.image_url,
    )
    return _cart_response(token, cart, message="Item added to cart", status=201)


@public_bp.route("/restaurants/<slug>/cart/items/<line_id>", methods=["PATCH"])
@validate_schema(CartQuantityRequest)
def update_cart_line(slug, line_id):
    restaurant = active_restaurant(slug)
    token, cart = _store().open(request.headers.get(CART_HEADER), restaurant.id)
    if cart.get(line_id) is None:
        return error("Cart line not found", status=404)
    cart.set_quantity(line_id, request.validated_data.quantity)
    return _cart_response(token, cart)


@public_bp.route("/restaurants/<slug>/cart/items/<line_id>", methods=["DELETE"])
def remove_cart_line(slug, line_id):
    restaurant = active_restaurant(slug)
    token, cart = _store().open(request.headers.get(CART_HEADER), restaurant.id)
    cart.remove_line(line_id)
    return _cart_response(token, cart, message="Item removed")


@public_bp.route("/restaurants/<slug>/cart", methods=["DELETE"])
def clear_cart(slug):
    restaurant = active_restaurant(slug)
    token, cart = _store().open(request.headers.get(CART_HEADER), restaurant.id)
    cart.clear()
    return _cart_response(token, cart, message="Cart cleared")
