
def test_health_check(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json().get('status') == 'ok'


def test_metrics_endpoint(client):
    client.get('/health')
    response = client.get('/metrics')
    assert response.status_code == 200
    assert b'flask_http_request' in response.data


def test_checkout_counts_orders(client, restaurant):
    from prometheus_client import REGISTRY
    from tests.conftest import place_order
    before = REGISTRY.get_sample_value('orders_placed_total') or 0
    assert place_order(client).status_code == 201
    assert REGISTRY.get_sample_value('orders_placed_total') == before + 1
