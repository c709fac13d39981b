import json

import pytest
import sqlalchemy as sa

from app.services import order_service
from app.services.order_status import InvalidTransition
from app.version import API_PREFIX
from models import db
from models.order import Order, OrderStatusLog
from tests.conftest import add_member, auth_header, obtain_token, place_order


def _url(restaurant, suffix=""):
    return f"{API_PREFIX}/restaurants/{restaurant.id}{suffix}"


def _frame_data(chunk):
    text = chunk.decode() if isinstance(chunk, bytes) else chunk
    line = next(line for line in text.splitlines() if line.startswith("data: "))
    return json.loads(line[len("data: "):])


def test_advance_through_happy_path(client, owner_token, restaurant):
    place_order(client)
    order = Order.query.one()
    hdr = auth_header(owner_token)
    for expected in ("preparing", "ready", "delivered"):
        resp = client.post(_url(restaurant, f"/orders/{order.id}/advance"), json={}, headers=hdr)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["order"]["order_status"] == expected
    done = client.post(_url(restaurant, f"/orders/{order.id}/advance"), json={}, headers=hdr)
    assert done.status_code == 409
    statuses = [log.status for log in OrderStatusLog.query.order_by(OrderStatusLog.id).all()]
    assert statuses == ["new", "preparing", "ready", "delivered"]
    assert OrderStatusLog.query.filter_by(status="ready").one().updated_by == "owner@example.com"


def test_advance_with_stale_expected_status_conflicts(client, owner_token, restaurant):
    place_order(client)
    order = Order.query.one()
    hdr = auth_header(owner_token)
    ok = client.post(_url(restaurant, f"/orders/{order.id}/advance"), json={"status": "preparing"}, headers=hdr)
    assert ok.status_code == 200
    # a second click from a board that still shows "new"
    stale = client.post(_url(restaurant, f"/orders/{order.id}/advance"), json={"status": "preparing"}, headers=hdr)
    assert stale.status_code == 409
    assert Order.query.one().order_status == "preparing"


def test_cancel_only_before_ready(client, owner_token, restaurant):
    place_order(client)
    place_order(client, customer="Rui")
    first, second = Order.query.order_by(Order.id).all()
    hdr = auth_header(owner_token)
    assert client.post(_url(restaurant, f"/orders/{first.id}/cancel"), headers=hdr).status_code == 200
    assert db.session.get(Order, first.id).order_status == "cancelled"
    assert client.post(_url(restaurant, f"/orders/{first.id}/advance"), json={}, headers=hdr).status_code == 409

    client.post(_url(restaurant, f"/orders/{second.id}/advance"), json={}, headers=hdr)
    client.post(_url(restaurant, f"/orders/{second.id}/advance"), json={}, headers=hdr)
    assert client.post(_url(restaurant, f"/orders/{second.id}/cancel"), headers=hdr).status_code == 409


@pytest.mark.parametrize("moved_to", ["cancelled", "preparing"])
def test_advance_from_stale_read_does_not_overwrite(client, restaurant, moved_to):
    place_order(client)
    stale = Order.query.one()
    assert stale.order_status == "new"
    # another worker changes the row after this session loaded it
    table = Order.__table__
    db.session.execute(sa.update(table).where(table.c.id == stale.id).values(order_status=moved_to))

    with pytest.raises(InvalidTransition):
        order_service.advance_order(stale, "cook@example.com")
    assert stale.order_status == moved_to
    db.session.commit()

    assert db.session.get(Order, stale.id).order_status == moved_to
    assert [log.status for log in OrderStatusLog.query.all()] == ["new"]


def test_advance_failure_uses_generic_500(client, owner_token, restaurant, monkeypatch):
    place_order(client)
    order = Order.query.one()

    def broken(*args, **kwargs):
        raise RuntimeError("db went away")

    monkeypatch.setattr(order_service, "advance_order", broken)
    resp = client.post(_url(restaurant, f"/orders/{order.id}/advance"), json={}, headers=auth_header(owner_token))
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "An unexpected error occurred, please try again later"
    assert "db went away" not in resp.get_data(as_text=True)


def test_order_list_detail_and_board(client, owner_token, restaurant):
    place_order(client)
    place_order(client, customer="Rui")
    hdr = auth_header(owner_token)
    first = Order.query.order_by(Order.id).first()
    client.post(_url(restaurant, f"/orders/{first.id}/advance"), json={}, headers=hdr)

    listed = client.get(_url(restaurant, "/orders"), query_string={"status": "new"}, headers=hdr)
    assert [o["customer_name"] for o in listed.get_json()["data"]["orders"]] == ["Rui"]
    assert client.get(_url(restaurant, "/orders"), query_string={"status": "bogus"}, headers=hdr).status_code == 400

    detail = client.get(_url(restaurant, f"/orders/{first.id}"), headers=hdr).get_json()["data"]["order"]
    assert [h["status"] for h in detail["history"]] == ["new", "preparing"]
    assert detail["status"]["next"] == "ready"

    board = client.get(_url(restaurant, "/kitchen"), headers=hdr).get_json()["data"]["board"]
    assert board["counts"]["new"] == 1
    assert board["counts"]["preparing"] == 1
    assert board["columns"]["preparing"][0]["customer_name"] == "Ana"


def test_kitchen_requires_kitchen_or_orders_flag(client, restaurant):
    editor = add_member(restaurant, "editor@example.com", menu_editor=True)
    token = obtain_token(client, editor.email, role="staff")
    assert client.get(_url(restaurant, "/kitchen"), headers=auth_header(token)).status_code == 403
    cook = add_member(restaurant, "cook@example.com", kitchen=True)
    token = obtain_token(client, cook.email, role="staff")
    assert client.get(_url(restaurant, "/kitchen"), headers=auth_header(token)).status_code == 200


def test_kitchen_stream_sends_board_then_new_order_cue(client, owner_token, restaurant):
    resp = client.get(_url(restaurant, "/kitchen/stream"), query_string={"access_token": owner_token})
    assert resp.status_code == 200
    assert resp.mimetype == "text/event-stream"
    frames = iter(resp.response)
    try:
        first = _frame_data(next(frames))
        assert first["seq"] == 0
        assert first["board"]["counts"]["new"] == 0
        assert first["cue"] is None

        assert place_order(client).status_code == 201
        second = _frame_data(next(frames))
        assert second["seq"] > 0
        assert second["cue"] == "new-order"
        assert second["board"]["counts"]["new"] == 1
        assert second["changes"][0]["event"] == "INSERT"
    finally:
        resp.close()


def test_customer_stream_reports_status_changes(client, owner_token, restaurant):
    number = place_order(client).get_json()["data"]["order_number"]
    resp = client.get(f"{API_PREFIX}/public/restaurants/casa-lena/orders/{number}/stream")
    assert resp.status_code == 200
    frames = iter(resp.response)
    try:
        first = _frame_data(next(frames))
        assert first["order"]["order_status"] == "new"
        assert first["cue"] is None

        order = Order.query.one()
        client.post(_url(restaurant, f"/orders/{order.id}/advance"), json={}, headers=auth_header(owner_token))
        second = _frame_data(next(frames))
        assert second["order"]["order_status"] == "preparing"
        assert second["message"] == "Your order is being prepared."
        assert second["cue"] == "status-change"
    finally:
        resp.close()
