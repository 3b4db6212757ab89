"""Menu blueprint - catalog with live dessert stock."""
import logging
from flask import Blueprint, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from restaurant import catalog
from restaurant.database import get_session
from restaurant.services import stock_service

logger = logging.getLogger(__name__)

menu_bp = Blueprint('menu', __name__)


@menu_bp.route('/menu', methods=['GET'])
def menu():
    """Menu sections; desserts carry their current stock when known."""
    category = current_app.config.get('STOCK_CATEGORY', 'desserts')
    try:
        stock_map = stock_service.get_stock_map(get_session(), category)
    except SQLAlchemyError as e:
        # Menu stays usable without stock levels
        logger.warning(f"[STOCK] Could not load stock for menu: {e}")
        get_session().rollback()
        stock_map = {}

    return jsonify({
        'categories': catalog.CATEGORIES,
        'sections': catalog.menu_with_stock(stock_map),
    })


@menu_bp.route('/menu/<slug>', methods=['GET'])
def menu_item(slug):
    """Single purchasable unit by slug."""
    unit = catalog.find_unit(slug)
    if not unit:
        return jsonify({'status': 'error', 'message': f'Menu item not found: {slug}'}), 404
    return jsonify(unit)
