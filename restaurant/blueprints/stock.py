"""Stock blueprint - dessert stock ledger API (machine and admin callers)."""
import logging
from flask import Blueprint, request, jsonify, current_app

from restaurant.database import get_session
from restaurant.exceptions import ValidationError
from restaurant.services import stock_service

logger = logging.getLogger(__name__)

stock_bp = Blueprint('stock', __name__, url_prefix='/api/stock')


def _category() -> str:
    """Stock ledger category shared with checkout and the menu."""
    return current_app.config.get('STOCK_CATEGORY', stock_service.DEFAULT_CATEGORY)


def _error(message: str, status_code: int):
    return jsonify({'error': message}), status_code


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError('JSON object body is required')
    return body


@stock_bp.route('/desserts', methods=['GET'])
def list_desserts():
    """All dessert stock records."""
    try:
        records = stock_service.list_by_category(get_session(), _category())
        return jsonify([r.to_dict() for r in records])
    except Exception:
        logger.exception("[STOCK] Error fetching stock")
        return _error('Failed to fetch stock', 500)


@stock_bp.route('/desserts/summary', methods=['GET'])
def desserts_summary():
    """Totals for the stock admin view (total, out of stock, low stock)."""
    try:
        records = stock_service.list_by_category(get_session(), _category())
        threshold = current_app.config.get('LOW_STOCK_THRESHOLD', 5)
        return jsonify(stock_service.summarize(records, threshold))
    except Exception:
        logger.exception("[STOCK] Error summarizing stock")
        return _error('Failed to fetch stock', 500)


@stock_bp.route('/desserts', methods=['PUT'])
def update_dessert():
    """Upsert one dessert's stock: body {slug, stock}."""
    try:
        body = _json_body()
        record = stock_service.upsert_one(get_session(), body.get('slug'), body.get('stock'), _category())
        return jsonify(record.to_dict())
    except ValidationError as e:
        return _error(e.message, 400)
    except Exception:
        logger.exception("[STOCK] Error updating stock")
        return _error('Failed to update stock', 500)


@stock_bp.route('/desserts/bulk', methods=['PUT'])
def bulk_update_desserts():
    """Upsert many: body {updates: [{slug, stock}]}. Bad entries are skipped."""
    try:
        body = _json_body()
        records, errors = stock_service.upsert_bulk(get_session(), body.get('updates'), _category())
        if errors:
            logger.warning(f"[STOCK] Bulk update skipped {len(errors)} entries: {errors}")
        return jsonify([r.to_dict() for r in records])
    except ValidationError as e:
        return _error(e.message, 400)
    except Exception:
        logger.exception("[STOCK] Error bulk updating stock")
        return _error('Failed to update stock', 500)


@stock_bp.route('/desserts/initialize', methods=['POST'])
def initialize_desserts():
    """Seed the default dessert stock levels."""
    try:
        stock_service.initialize_defaults(get_session(), _category())
        return jsonify({'message': 'Desserts initialized successfully'})
    except Exception:
        logger.exception("[STOCK] Error initializing stock")
        return _error('Failed to initialize stock', 500)


@stock_bp.route('/decrement', methods=['POST'])
def decrement_stock():
    """Decrement stock for ordered items: body {items: [{slug, quantity}], idempotency_key?}."""
    try:
        body = _json_body()
        records = stock_service.decrement(
            get_session(),
            body.get('items'),
            _category(),
            idempotency_key=body.get('idempotency_key')
        )
        return jsonify({
            'message': 'Stock updated successfully',
            'updated': [r.to_dict() for r in records]
        })
    except ValidationError as e:
        return _error(e.message, 400)
    except Exception:
        logger.exception("[STOCK] Error decrementing stock")
        return _error('Failed to update stock', 500)
