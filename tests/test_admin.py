import pytest

from app.version import API_PREFIX
from models.platform import PlatformSettings
from models.restaurant import RestaurantPermission
from models.user import UserProfile
from tests.conftest import auth_header, create_user, obtain_token

ADMIN = f"{API_PREFIX}/admin"


@pytest.fixture
def admin_token(client):
    return obtain_token(client, "root@example.com", role="super_admin")


@pytest.mark.parametrize("role", ["restaurant_admin", "staff"])
def test_admin_routes_need_super_admin(client, app, role):
    token = obtain_token(client, f"{role}@example.com", role=role)
    assert client.get(f"{ADMIN}/users", headers=auth_header(token)).status_code == 403
    assert client.get(f"{ADMIN}/users").status_code == 401


def test_list_users_and_change_role(client, admin_token):
    user = create_user("chef@example.com")
    users = client.get(f"{ADMIN}/users", headers=auth_header(admin_token)).get_json()["data"]["users"]
    assert {u["email"] for u in users} == {"root@example.com", "chef@example.com"}

    resp = client.put(f"{ADMIN}/users/{user.id}/role", json={"role": "staff"}, headers=auth_header(admin_token))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["role"] == "staff"
    bad = client.put(f"{ADMIN}/users/{user.id}/role", json={"role": "god"}, headers=auth_header(admin_token))
    assert bad.status_code == 400
    assert client.put(f"{ADMIN}/users/999/role", json={"role": "staff"}, headers=auth_header(admin_token)).status_code == 404


def test_assign_user_restaurants(client, admin_token, restaurant):
    user = create_user("chef@example.com", role="staff")
    url = f"{ADMIN}/users/{user.id}/restaurants"
    resp = client.put(url, json={"restaurant_ids": [restaurant.id]}, headers=auth_header(admin_token))
    assert resp.status_code == 200
    row = RestaurantPermission.query.filter_by(user_id=user.id).one()
    assert row.flags()["kitchen"] is True
    assert row.flags()["settings"] is False
    assert client.get(url, headers=auth_header(admin_token)).get_json()["data"]["restaurant_ids"] == [restaurant.id]

    assert client.put(url, json={"restaurant_ids": [999]}, headers=auth_header(admin_token)).status_code == 400
    assert client.put(url, json={"restaurant_ids": []}, headers=auth_header(admin_token)).status_code == 200
    assert RestaurantPermission.query.count() == 0


def test_toggle_restaurant_hides_public_menu(client, admin_token, restaurant):
    url = f"{ADMIN}/restaurants/{restaurant.id}/toggle-active"
    resp = client.post(url, headers=auth_header(admin_token))
    assert resp.get_json()["data"]["restaurant"]["is_active"] is False
    assert client.get(f"{API_PREFIX}/public/restaurants/casa-lena/menu").status_code == 404
    client.post(url, headers=auth_header(admin_token))
    assert client.get(f"{API_PREFIX}/public/restaurants/casa-lena/menu").status_code == 200

    listed = client.get(f"{ADMIN}/restaurants", headers=auth_header(admin_token)).get_json()["data"]["restaurants"]
    assert listed[0]["owner_email"] == "owner@example.com"


def test_statistics(client, admin_token, restaurant):
    stats = client.get(f"{ADMIN}/statistics", headers=auth_header(admin_token)).get_json()["data"]["statistics"]
    assert stats["totals"]["restaurants"] == 1
    assert stats["totals"]["users"] == UserProfile.query.count()
    assert len(stats["growth"]) == 7
    assert stats["growth"][-1]["restaurants"] == 1


def test_platform_settings_roundtrip(client, admin_token):
    hdr = auth_header(admin_token)
    assert client.get(f"{ADMIN}/platform-settings", headers=hdr).get_json()["data"]["settings"]["enable_registration"] is True
    resp = client.put(f"{ADMIN}/platform-settings", json={"enable_registration": False, "platform_name": "Prato"}, headers=hdr)
    assert resp.status_code == 200
    assert PlatformSettings.query.count() == 1
    settings = client.get(f"{API_PREFIX}/public/platform").get_json()["data"]["settings"]
    assert settings["platform_name"] == "Prato"
    assert settings["enable_registration"] is False
    signup = client.post(f"{API_PREFIX}/auth/signup", json={"name": "Late", "email": "late@example.com", "password": "secret123"})
    assert signup.status_code == 403
