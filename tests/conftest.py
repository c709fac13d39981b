import io
import os
import sys
from decimal import Decimal

import pytest
from PIL import Image

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault('APP_ENV', 'testing')

from models import db  # noqa: E402
from models.menu import Category, Menu, MenuItem  # noqa: E402
from models.restaurant import PaymentMethod, Restaurant, RestaurantPermission, Table  # noqa: E402
from models.user import UserProfile, UserRole  # noqa: E402
from app.config import TestingConfig  # noqa: E402
from app.version import API_PREFIX  # noqa: E402


def make_app(**overrides):
    """Fresh app on the testing config; keyword arguments override settings."""
    from app import create_app
    config = type("OverrideConfig", (TestingConfig,), overrides) if overrides else TestingConfig
    return create_app(config)


@pytest.fixture(scope='session')
def app_instance(tmp_path_factory):
    return make_app(STORAGE_ROOT=str(tmp_path_factory.mktemp("storage")))


@pytest.fixture(scope='function')
def app(app_instance):
    with app_instance.app_context():
        db.drop_all()
        db.create_all()
        yield app_instance
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


def obtain_token(client, email, role="restaurant_admin"):
    resp = client.post("/__auth/login_stub", json={"email": email, "role": role})
    return resp.get_json()["data"]["access"]


def create_user(email, role="restaurant_admin", password="secret123", name="Test User"):
    user = UserProfile(email=email, name=name)
    user.set_password(password)
    user.role_row = UserRole(role=role)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def owner(app):
    return create_user("owner@example.com", name="Owner")


@pytest.fixture
def owner_token(client, owner):
    return obtain_token(client, owner.email)


def build_restaurant(owner):
    """Restaurant with one menu, two categories, three items, a table and two payment methods."""
    r = Restaurant(owner_id=owner.id, name="Casa Lena", slug="casa-lena", timezone="Africa/Maputo", currency="MZN")
    db.session.add(r)
    db.session.flush()
    menu = Menu(restaurant_id=r.id, title="Main Menu", description="Our delicious menu")
    db.session.add(menu)
    db.session.flush()
    burgers = Category(menu_id=menu.id, name="Burgers", position=0)
    drinks = Category(menu_id=menu.id, name="Drinks", position=1)
    db.session.add_all([burgers, drinks])
    db.session.flush()
    db.session.add_all([
        MenuItem(
            menu_id=menu.id,
            category_id=burgers.id,
            name="Burger",
            price=Decimal("10.00"),
            position=0,
            options=[
                {"name": "Large", "price": 2.0, "type": "size"},
                {"name": "Cheese", "price": 1.5, "type": "extra"},
                {"name": "Bacon", "price": 1.0, "type": "extra"},
            ],
        ),
        MenuItem(menu_id=menu.id, category_id=drinks.id, name="Soda", price=Decimal("3.00"), position=1, options=[]),
        MenuItem(
            menu_id=menu.id, category_id=drinks.id, name="Juice", price=Decimal("4.00"),
            position=2, options=[], is_available=False,
        ),
    ])
    db.session.add(Table(restaurant_id=r.id, name="Table 1", qr_code_token="tabletoken1"))
    db.session.add_all([
        PaymentMethod(restaurant_id=r.id, name="Cash", position=1),
        PaymentMethod(restaurant_id=r.id, name="M-Pesa", position=2),
    ])
    db.session.commit()
    return r


@pytest.fixture
def restaurant(app, owner):
    return build_restaurant(owner)


def menu_item(name):
    return MenuItem.query.filter_by(name=name).first()


def payment_method(name):
    return PaymentMethod.query.filter_by(name=name).first()


def add_member(restaurant, email, role="staff", **flags):
    user = create_user(email, role=role)
    perms = {
        "menu_editor": False,
        "qr_codes": False,
        "orders": False,
        "kitchen": False,
        "settings": False,
        "reports": False,
    }
    perms.update(flags)
    db.session.add(RestaurantPermission(user_id=user.id, restaurant_id=restaurant.id, permissions=perms))
    db.session.commit()
    return user


def place_order(client, slug="casa-lena", items=(("Burger", 1),), customer="Ana", method="Cash", **extra):
    """Fill a fresh cart through the public API and check out; returns the checkout response."""
    session = None
    for name, qty in items:
        headers = {"X-Cart-Session": session} if session else {}
        resp = client.post(
            f"{API_PREFIX}/public/restaurants/{slug}/cart/items",
            json={"menu_item_id": menu_item(name).id, "quantity": qty},
            headers=headers,
        )
        assert resp.status_code == 201, resp.get_json()
        session = resp.get_json()["data"]["cart_session"]
    body = {"customer_name": customer, "payment_method_id": payment_method(method).id}
    body.update(extra)
    return client.post(
        f"{API_PREFIX}/public/restaurants/{slug}/orders",
        json=body,
        headers={"X-Cart-Session": session},
    )


def png_bytes(size=(4, 4), color=(200, 40, 40)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()
