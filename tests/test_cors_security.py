from tests.conftest import make_app


def _client(cors_value):
    return make_app(CORS_ALLOWED_ORIGINS=cors_value).test_client()


def test_cors_preflight_allows_whitelisted_origin():
    client = _client("http://localhost:3000,https://menu.example.com")
    resp = client.open(
        "/__ok",
        method="OPTIONS",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert resp.status_code in (200, 204)
    assert resp.headers.get("Access-Control-Allow-Origin") == "http://localhost:3000"
    vary = resp.headers.get("Vary")
    if vary:
        assert "Origin" in vary


def test_cors_preflight_blocks_disallowed_origin():
    client = _client("https://menu.example.com")
    resp = client.open(
        "/__ok",
        method="OPTIONS",
        headers={
            "Origin": "http://evil.test",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert resp.status_code in (200, 204)
    assert "Access-Control-Allow-Origin" not in resp.headers


def test_preflight_on_protected_route_skips_auth():
    client = _client("*")
    resp = client.open(
        "/api/v1/restaurants",
        method="OPTIONS",
        headers={"Origin": "http://any.test", "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code in (200, 204)


def test_security_headers_and_exposed_headers():
    client = _client("*")
    resp = client.get(
        "/__ok",
        headers={"Origin": "http://any.test", "X-Request-ID": "abc-123"},
    )
    assert resp.status_code == 200
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert resp.headers.get("X-Frame-Options") == "DENY"
    assert resp.headers.get("Referrer-Policy") == "no-referrer"
    assert resp.headers.get("X-Request-ID") == "abc-123"
    expose = resp.headers.get("Access-Control-Expose-Headers", "")
    assert "X-Request-ID" in expose
    assert "X-Cart-Session" in expose
