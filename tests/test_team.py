from app.version import API_PREFIX
from models.restaurant import RestaurantPermission
from models.user import UserProfile
from tests.conftest import add_member, auth_header, obtain_token


def _url(restaurant, suffix=""):
    return f"{API_PREFIX}/restaurants/{restaurant.id}/team{suffix}"


def _new_member(**overrides):
    body = {
        "name": "Carla Cook",
        "email": "carla@example.com",
        "password": "secret123",
        "role": "staff",
        "permissions": {"menu_editor": False, "kitchen": True, "orders": True, "reports": False},
    }
    body.update(overrides)
    return body


def test_owner_adds_member_who_can_log_in(client, owner_token, restaurant, caplog):
    caplog.set_level("INFO")
    resp = client.post(_url(restaurant), json=_new_member(), headers=auth_header(owner_token))
    assert resp.status_code == 201
    member = resp.get_json()["data"]["member"]
    assert member["email"] == "carla@example.com"
    assert member["role"] == "staff"
    assert member["permissions"]["kitchen"] is True
    assert member["permissions"]["settings"] is False
    assert any("welcome" in r.getMessage() for r in caplog.records)

    login = client.post(f"{API_PREFIX}/auth/login", json={"email": "carla@example.com", "password": "secret123"})
    token = login.get_json()["data"]["access_token"]
    assert client.get(f"{API_PREFIX}/restaurants/{restaurant.id}/kitchen", headers=auth_header(token)).status_code == 200
    assert client.get(f"{API_PREFIX}/restaurants/{restaurant.id}/menu", headers=auth_header(token)).status_code == 403


def test_duplicate_email_leaves_nothing_behind(client, owner_token, restaurant):
    assert client.post(_url(restaurant), json=_new_member(), headers=auth_header(owner_token)).status_code == 201
    again = client.post(_url(restaurant), json=_new_member(name="Other"), headers=auth_header(owner_token))
    assert again.status_code == 400
    assert UserProfile.query.filter_by(email="carla@example.com").count() == 1
    assert RestaurantPermission.query.count() == 1


def test_update_and_remove_member(client, owner_token, restaurant):
    member = add_member(restaurant, "cook@example.com", kitchen=True)
    row = RestaurantPermission.query.filter_by(user_id=member.id).one()
    hdr = auth_header(owner_token)
    listed = client.get(_url(restaurant), headers=hdr).get_json()["data"]["members"]
    assert [m["email"] for m in listed] == ["cook@example.com"]

    flags = {"menu_editor": True, "qr_codes": False, "orders": False, "kitchen": False, "settings": False, "reports": True}
    resp = client.put(_url(restaurant, f"/{row.id}"), json={"permissions": flags}, headers=hdr)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["permissions"] == flags

    assert client.delete(_url(restaurant, f"/{row.id}"), headers=hdr).status_code == 200
    assert RestaurantPermission.query.count() == 0
    assert client.delete(_url(restaurant, f"/{row.id}"), headers=hdr).status_code == 404


def test_team_is_owner_only(client, restaurant):
    manager = add_member(restaurant, "manager@example.com", role="restaurant_admin", settings=True, menu_editor=True)
    token = obtain_token(client, manager.email)
    assert client.get(_url(restaurant), headers=auth_header(token)).status_code == 403
    assert client.post(_url(restaurant), json=_new_member(), headers=auth_header(token)).status_code == 403


def test_super_admin_manages_any_team(client, restaurant):
    token = obtain_token(client, "root@example.com", role="super_admin")
    assert client.get(_url(restaurant), headers=auth_header(token)).status_code == 200
