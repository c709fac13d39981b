from app.version import API_PREFIX
from models.restaurant import Table
from tests.conftest import add_member, auth_header, obtain_token


def _url(restaurant, suffix=""):
    return f"{API_PREFIX}/restaurants/{restaurant.id}/tables{suffix}"


def test_table_lifecycle(client, owner_token, restaurant):
    hdr = auth_header(owner_token)
    resp = client.post(_url(restaurant), json={"name": "Terrace 2"}, headers=hdr)
    assert resp.status_code == 201
    table = resp.get_json()["data"]["table"]
    assert table["menu_url"].endswith(f"/menu/casa-lena?table={table['qr_code_token']}")

    renamed = client.put(_url(restaurant, f"/{table['id']}"), json={"name": "Terrace 3", "is_active": False}, headers=hdr)
    assert renamed.get_json()["data"]["table"]["is_active"] is False

    regenerated = client.post(_url(restaurant, f"/{table['id']}/regenerate"), headers=hdr)
    assert regenerated.get_json()["data"]["table"]["qr_code_token"] != table["qr_code_token"]

    listed = client.get(_url(restaurant), headers=hdr).get_json()["data"]["tables"]
    assert {t["name"] for t in listed} == {"Table 1", "Terrace 3"}

    assert client.delete(_url(restaurant, f"/{table['id']}"), headers=hdr).status_code == 200
    assert Table.query.count() == 1


def test_qr_png(client, owner_token, restaurant):
    table = Table.query.first()
    resp = client.get(_url(restaurant, f"/{table.id}/qr.png"), headers=auth_header(owner_token))
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")


def test_qr_codes_flag_required(client, restaurant):
    cook = add_member(restaurant, "cook@example.com", kitchen=True)
    token = obtain_token(client, cook.email, role="staff")
    assert client.get(_url(restaurant), headers=auth_header(token)).status_code == 403


def test_public_table_lookup(client, restaurant):
    ok = client.get(f"{API_PREFIX}/public/restaurants/casa-lena/tables/tabletoken1")
    assert ok.status_code == 200
    assert ok.get_json()["data"]["table"]["name"] == "Table 1"
    assert client.get(f"{API_PREFIX}/public/restaurants/casa-lena/tables/nope").status_code == 404
