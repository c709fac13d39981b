import logging

from app.logging import MaskingFilter, RequestIdFilter


def test_request_id_header_and_propagation(client):
    resp = client.get("/__ok", headers={"X-Request-ID": "my-fixed-id-123"})
    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == "my-fixed-id-123"


def test_request_id_generated_when_missing(client):
    resp = client.get("/__ok")
    assert len(resp.headers.get("X-Request-ID")) == 32


def test_logs_include_request_id_attribute(client, caplog):
    caplog.set_level("INFO")
    caplog.handler.addFilter(MaskingFilter())
    caplog.handler.addFilter(RequestIdFilter())
    resp = client.get("/__log", headers={"X-Request-ID": "rid-abc"})
    assert resp.status_code == 200
    assert any(getattr(r, "request_id", "") == "rid-abc" for r in caplog.records)


def test_sensitive_fields_masked_in_info(app, caplog, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    caplog.set_level("INFO")
    caplog.handler.addFilter(MaskingFilter())
    logger = logging.getLogger("mask_test")
    logger.info({"email": "user@example.com", "customer_phone": "841234567", "order_number": "250101-001"})
    record = next(r for r in caplog.records if r.name == "mask_test")
    assert record.msg["email"] == "[REDACTED]"
    assert record.msg["customer_phone"] == "[REDACTED]"
    assert record.msg["order_number"] == "250101-001"


def test_sensitive_fields_visible_in_debug(app, caplog, monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    caplog.set_level("DEBUG")
    caplog.handler.addFilter(MaskingFilter())
    logger = logging.getLogger("mask_test_debug")
    logger.debug({"password": "secret"})
    record = next(r for r in caplog.records if r.name == "mask_test_debug")
    assert record.msg["password"] == "secret"


def test_debug_is_masked_in_production(app, caplog, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    caplog.set_level("DEBUG")
    caplog.handler.addFilter(MaskingFilter())
    logger = logging.getLogger("mask_test_prod")
    logger.debug({"access_token": "abc"})
    record = next(r for r in caplog.records if r.name == "mask_test_prod")
    assert record.msg["access_token"] == "[REDACTED]"


def test_nested_customer_data_is_masked(app, caplog, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    caplog.set_level("INFO")
    caplog.handler.addFilter(MaskingFilter())
    logger = logging.getLogger("mask_nested")
    logger.info({"order": {"customer_phone": "841234567", "items": [{"email": "a@b.c", "name": "Burger"}]}})
    record = next(r for r in caplog.records if r.name == "mask_nested")
    assert record.msg["order"]["customer_phone"] == "[REDACTED]"
    assert record.msg["order"]["items"][0] == {"email": "[REDACTED]", "name": "Burger"}


def test_log_lines_carry_restaurant_context(client, restaurant, caplog):
    caplog.set_level("INFO")
    caplog.handler.addFilter(RequestIdFilter())
    client.get("/api/v1/public/restaurants/casa-lena/menu")
    assert any(getattr(r, "restaurant", None) == "casa-lena" for r in caplog.records)


def test_json_formatter_output(app):
    import json
    from app.logging import JsonFormatter
    record = logging.LogRecord("orders", logging.INFO, __file__, 1, "order %s placed", ("250101-001",), None)
    RequestIdFilter().filter(record)
    line = json.loads(JsonFormatter().format(record))
    assert line["message"] == "order 250101-001 placed"
    assert line["request_id"] == "n/a"
    assert line["restaurant"] == "-"
