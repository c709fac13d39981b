from models.platform import PlatformSettings
from models.order import Order
from models.user import UserProfile
from tests.conftest import place_order


def test_create_super_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-super-admin", "--email", "Root@Example.com", "--password", "secret123"])
    assert result.exit_code == 0, result.output
    user = UserProfile.query.filter_by(email="root@example.com").one()
    assert user.role == "super_admin"
    assert user.check_password("secret123")


def test_seed_platform_settings_is_idempotent(app):
    runner = app.test_cli_runner()
    assert "created" in runner.invoke(args=["seed-platform-settings"]).output
    assert "already present" in runner.invoke(args=["seed-platform-settings"]).output
    assert PlatformSettings.query.count() == 1


def test_purge_orders(app, client, restaurant):
    place_order(client)
    runner = app.test_cli_runner()
    result = runner.invoke(args=["purge-orders", "casa-lena", "--older-than", "all"])
    assert result.exit_code == 0, result.output
    assert "1 orders deleted" in result.output
    assert Order.query.count() == 0


def test_purge_orders_unknown_restaurant(app):
    result = app.test_cli_runner().invoke(args=["purge-orders", "nowhere"])
    assert result.exit_code != 0
    assert "nowhere" in result.output
