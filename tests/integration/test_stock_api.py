"""
Integration tests for the dessert stock API.
"""

from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from restaurant.database import get_session
from restaurant.models import StockRecord


def _stock(slug):
    record = get_session().query(StockRecord).filter_by(slug=slug).populate_existing().first()
    return record.stock if record else None


def test_list_empty(client):
    response = client.get('/api/stock/desserts')
    assert response.status_code == 200
    assert response.get_json() == []


def test_initialize_then_list(client):
    response = client.post('/api/stock/desserts/initialize')
    assert response.status_code == 200
    assert response.get_json() == {'message': 'Desserts initialized successfully'}

    data = client.get('/api/stock/desserts').get_json()
    assert {'slug': 'kubani-ka-mitha', 'stock': 10, 'item': 'kubani ka mitha'} in data
    assert len(data) == 5


def test_initialize_twice_is_idempotent(client):
    client.post('/api/stock/desserts/initialize')
    first = client.get('/api/stock/desserts').get_json()
    client.post('/api/stock/desserts/initialize')
    second = client.get('/api/stock/desserts').get_json()

    assert first == second


def test_put_single(client):
    response = client.put('/api/stock/desserts', json={'slug': 'apricot-delight', 'stock': 12})

    assert response.status_code == 200
    assert response.get_json() == {'slug': 'apricot-delight', 'stock': 12, 'item': 'Apricot delight'}
    assert _stock('apricot-delight') == 12


def test_put_negative_stock_is_rejected(client):
    response = client.put('/api/stock/desserts', json={'slug': 'apricot-delight', 'stock': -2})

    assert response.status_code == 400
    assert 'error' in response.get_json()
    assert _stock('apricot-delight') is None


def test_put_without_body_is_rejected(client):
    response = client.put('/api/stock/desserts', data='not json', content_type='text/plain')
    assert response.status_code == 400


def test_bulk_update(client):
    response = client.put('/api/stock/desserts/bulk', json={'updates': [
        {'slug': 'apricot-delight', 'stock': 1},
        {'slug': 'sitaphal-malai', 'stock': 2},
    ]})

    assert response.status_code == 200
    assert [r['stock'] for r in response.get_json()] == [1, 2]


def test_bulk_update_requires_array(client):
    response = client.put('/api/stock/desserts/bulk', json={'updates': 'all'})
    assert response.status_code == 400


def test_decrement_clamps_and_reports(client):
    client.post('/api/stock/desserts/initialize')

    response = client.post('/api/stock/decrement', json={'items': [
        {'slug': 'shatoot-malai', 'quantity': 3},
        {'slug': 'kubani-ka-mitha', 'quantity': 4},
        {'slug': 'gulab-jamun', 'quantity': 1},
    ]})

    assert response.status_code == 200
    body = response.get_json()
    assert body['message'] == 'Stock updated successfully'
    assert body['updated'] == [
        {'slug': 'shatoot-malai', 'stock': 0, 'item': 'shatoot malai'},
        {'slug': 'kubani-ka-mitha', 'stock': 6, 'item': 'kubani ka mitha'},
    ]


def test_decrement_with_idempotency_key(client):
    client.post('/api/stock/desserts/initialize')
    body = {'items': [{'slug': 'kaddu-ka-kheer', 'quantity': 2}], 'idempotency_key': 'order-9'}

    client.post('/api/stock/decrement', json=body)
    response = client.post('/api/stock/decrement', json=body)

    assert response.get_json()['updated'] == []
    assert _stock('kaddu-ka-kheer') == 6


def test_decrement_requires_items_array(client):
    response = client.post('/api/stock/decrement', json={'items': {'slug': 'paya'}})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Items array is required'}

    response = client.post('/api/stock/decrement', json={})
    assert response.status_code == 400


def test_summary(client):
    client.post('/api/stock/desserts/initialize')

    summary = client.get('/api/stock/desserts/summary').get_json()

    assert summary['total_stock'] == 26
    assert summary['out_of_stock'] == 1
    assert summary['low_stock'] == 2


def test_backend_failure_is_opaque_500(client):
    with patch('restaurant.services.stock_service.list_by_category',
               side_effect=OperationalError('SELECT', {}, Exception('db gone'))):
        response = client.get('/api/stock/desserts')

    assert response.status_code == 500
    assert response.get_json() == {'error': 'Failed to fetch stock'}


def test_decrement_skips_malformed_slug_and_keeps_valid_entries(client):
    client.post('/api/stock/desserts/initialize')

    response = client.post('/api/stock/decrement', json={'items': [
        {'slug': 'kubani-ka-mitha', 'quantity': 1},
        {'slug': ['apricot-delight'], 'quantity': 1},
    ]})

    assert response.status_code == 200
    assert [r['slug'] for r in response.get_json()['updated']] == ['kubani-ka-mitha']
    assert _stock('kubani-ka-mitha') == 9
    assert _stock('apricot-delight') == 5


def test_decrement_with_huge_quantity_clamps(client):
    client.post('/api/stock/desserts/initialize')

    response = client.post('/api/stock/decrement', json={'items': [
        {'slug': 'kubani-ka-mitha', 'quantity': 2**63},
    ]})

    assert response.status_code == 200
    assert _stock('kubani-ka-mitha') == 0


def test_stock_api_follows_configured_category(app, client, monkeypatch):
    monkeypatch.setitem(app.config, 'STOCK_CATEGORY', 'sweets')

    client.post('/api/stock/desserts/initialize')

    assert len(client.get('/api/stock/desserts').get_json()) == 5
    record = get_session().query(StockRecord).filter_by(slug='kubani-ka-mitha').one()
    assert record.category == 'sweets'
