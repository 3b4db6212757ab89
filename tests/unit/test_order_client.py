"""
Unit tests for the order backend HTTP client.
"""

import pytest
import requests
from unittest.mock import patch

from restaurant.exceptions import OrderBackendError
from restaurant.services.order_client import OrderBackendClient


@pytest.fixture
def client():
    return OrderBackendClient('http://orders.test/', timeout=5)


class TestOrderBackendClient:
    """Tests for request building and error mapping."""

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            OrderBackendClient('')

    def test_place_order_posts_payload(self, client, fake_response):
        payload = {'items': [{'name': 'Paya', 'qty': 1, 'price': 180}], 'discount': 0, 'total': 180, 'totalAmount': 180}

        with patch('restaurant.services.order_client.requests.request') as request:
            request.return_value = fake_response({'_id': 'o1', **payload})
            order = client.place_order(payload, idempotency_key='key-1')

        assert order['_id'] == 'o1'
        args, kwargs = request.call_args
        assert args == ('POST', 'http://orders.test/place-order')
        assert kwargs['json'] == payload
        assert kwargs['headers']['Idempotency-Key'] == 'key-1'
        assert kwargs['timeout'] == 5

    def test_list_orders_passes_date_range(self, client, fake_response):
        with patch('restaurant.services.order_client.requests.request') as request:
            request.return_value = fake_response([])
            client.list_orders('2026-10-01', '2026-10-19')

        args, kwargs = request.call_args
        assert args == ('GET', 'http://orders.test/orders')
        assert kwargs['params'] == {'startDate': '2026-10-01', 'endDate': '2026-10-19'}

    def test_list_orders_without_filters(self, client, fake_response):
        with patch('restaurant.services.order_client.requests.request') as request:
            request.return_value = fake_response([])
            client.list_orders()

        assert request.call_args[1]['params'] is None

    def test_update_and_delete_bodies(self, client, fake_response):
        with patch('restaurant.services.order_client.requests.request') as request:
            request.return_value = fake_response({})
            client.update_order('o1', {'total': 10})
            client.delete_order('o1')

        update_call, delete_call = request.call_args_list
        assert update_call[0] == ('PUT', 'http://orders.test/update-order')
        assert update_call[1]['json'] == {'id': 'o1', 'orderData': {'total': 10}}
        assert delete_call[0] == ('DELETE', 'http://orders.test/delete-order')
        assert delete_call[1]['json'] == {'id': 'o1'}

    def test_http_error_maps_to_backend_error(self, client, fake_response):
        with patch('restaurant.services.order_client.requests.request') as request:
            request.return_value = fake_response(status_code=500, text='boom')
            with pytest.raises(OrderBackendError) as exc_info:
                client.place_order({'items': []})

        assert exc_info.value.upstream_status == 500
        assert exc_info.value.status_code == 502

    def test_connection_error_maps_to_backend_error(self, client):
        with patch('restaurant.services.order_client.requests.request',
                   side_effect=requests.ConnectionError('refused')):
            with pytest.raises(OrderBackendError) as exc_info:
                client.get_stats()

        assert exc_info.value.upstream_status is None

    def test_invalid_json_maps_to_backend_error(self, client, fake_response):
        response = fake_response({})
        response.json.side_effect = ValueError('not json')
        with patch('restaurant.services.order_client.requests.request', return_value=response):
            with pytest.raises(OrderBackendError):
                client.get_stats()
