"""
Integration tests for the order back-office endpoints.
"""

from datetime import datetime, timezone
from unittest.mock import patch

import requests


ORDERS = [
    {
        '_id': 'o1',
        'token': '1',
        'items': [{'name': 'Paya', 'qty': 1, 'price': 180, '_id': 'i1'}],
        'total': 180,
        'totalAmount': 162,
        'discount': 10,
        'date': datetime.now(timezone.utc).isoformat(),
    },
    {
        '_id': 'o2',
        'token': '2',
        'items': [{'name': 'kulch', 'qty': 2, 'price': 20, '_id': 'i2'}],
        'total': 40,
        'date': '2020-01-01T10:00:00.000Z',
    },
]


def test_list_orders(client, fake_response):
    with patch('restaurant.services.order_client.requests.request') as request:
        request.return_value = fake_response(ORDERS)
        response = client.get('/orders?startDate=2020-01-01&endDate=2026-12-31')

    assert response.status_code == 200
    body = response.get_json()
    assert [o['status'] for o in body['orders']] == ['preparing', 'delivered']
    assert body['summary'] == {'count': 2, 'total_cost': 202}
    assert request.call_args[1]['params'] == {'startDate': '2020-01-01', 'endDate': '2026-12-31'}


def test_list_orders_bad_date(client):
    with patch('restaurant.services.order_client.requests.request') as request:
        response = client.get('/orders?startDate=yesterday')

    assert response.status_code == 400
    request.assert_not_called()


def test_list_orders_backend_down(client):
    with patch('restaurant.services.order_client.requests.request',
               side_effect=requests.ConnectionError('refused')):
        response = client.get('/orders')

    assert response.status_code == 502


def test_delete_order(client, fake_response):
    with patch('restaurant.services.order_client.requests.request') as request:
        request.return_value = fake_response({'message': 'deleted'})
        response = client.delete('/orders/o1')

    assert response.status_code == 200
    assert request.call_args[1]['json'] == {'id': 'o1'}


def test_update_order_reprices(client, fake_response):
    def _route(method, url, **kwargs):
        if method == 'GET':
            return fake_response(ORDERS)
        return fake_response({'ok': True})

    with patch('restaurant.services.order_client.requests.request', side_effect=_route) as request:
        response = client.put('/orders/o1', json={'items': {'Paya': 2, 'butter naan': 1}})

    assert response.status_code == 200
    order_data = response.get_json()['orderData']
    assert order_data['total'] == 400
    assert order_data['totalAmount'] == 360
    assert order_data['discount'] == 10

    put_call = request.call_args_list[-1]
    assert put_call[0] == ('PUT', 'http://orders.test/update-order')
    assert put_call[1]['json'] == {'id': 'o1', 'orderData': order_data}


def test_update_unknown_order(client, fake_response):
    with patch('restaurant.services.order_client.requests.request') as request:
        request.return_value = fake_response(ORDERS)
        response = client.put('/orders/missing', json={'items': {'Paya': 1}})

    assert response.status_code == 404


def test_update_order_requires_items(client):
    response = client.put('/orders/o1', json={})
    assert response.status_code == 400


def test_stats(client, fake_response):
    rows = [
        {'_id': 'Paya', 'totalQty': 3, 'totalRevenue': 540},
        {'_id': 'kulch', 'totalQty': 5, 'totalRevenue': 100},
    ]
    with patch('restaurant.services.order_client.requests.request') as request:
        request.return_value = fake_response(rows)
        body = client.get('/stats').get_json()

    assert body['items'] == rows
    assert body['total_revenue'] == 640
    assert body['total_items_sold'] == 8
