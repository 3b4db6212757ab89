"""Cart blueprint - session cart, pricing and checkout."""
import uuid
from flask import Blueprint, request, session, jsonify, current_app
from flask_wtf.csrf import generate_csrf

from restaurant import catalog
from restaurant.database import get_session
from restaurant.exceptions import NotFoundError, ValidationError, OrderBackendError
from restaurant.services import order_service
from restaurant.services.order_service import json_number
from restaurant.services.cart_service import Cart
from restaurant.services.order_client import OrderBackendClient
from restaurant.services.pricing_service import calculate_totals
from restaurant.blueprints.metrics import orders_placed_total, order_failures_total, stock_decrement_failures_total

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')

CART_KEY = 'cart'
DISCOUNT_KEY = 'cart_discount'


def get_cart() -> Cart:
    """Get cart from the user's session."""
    return Cart.from_dict(session.get(CART_KEY))


def save_cart(cart: Cart) -> None:
    """Save cart to the user's session."""
    session[CART_KEY] = cart.to_dict()
    session.modified = True


def _cart_response(cart: Cart, status_code: int = 200):
    discount = session.get(DISCOUNT_KEY, 0)
    lines = cart.lines
    totals = calculate_totals(lines, discount)
    return jsonify({
        'items': [{**line, 'price': json_number(line['price'])} for line in lines],
        'count': cart.total_count(),
        'subtotal': json_number(totals['subtotal']),
        'discount': json_number(totals['discount_percent']),
        'discount_amount': json_number(totals['discount_amount']),
        'total': totals['total'],
        'total_amount': totals['total_amount'],
        'csrf_token': generate_csrf(),
        'order_key': uuid.uuid4().hex,
    }), status_code


def _slug_from_body() -> str:
    body = request.get_json(silent=True) or {}
    slug = body.get('slug') if isinstance(body, dict) else None
    if not isinstance(slug, str) or not slug:
        raise ValidationError('slug is required')
    return slug


@cart_bp.route('', methods=['GET'])
def view_cart():
    return _cart_response(get_cart())


@cart_bp.route('/add', methods=['POST'])
def add_to_cart():
    """Add one unit of a catalog item to the cart."""
    slug = _slug_from_body()
    unit = catalog.find_unit(slug)
    if not unit:
        raise NotFoundError(f'Menu item not found: {slug}')

    cart = get_cart()
    cart.add({
        'slug': unit['slug'],
        'display_name': unit['item'],
        'price': unit['price'],
        'image': unit['image'],
    })
    save_cart(cart)
    return _cart_response(cart)


@cart_bp.route('/remove', methods=['POST'])
def remove_from_cart():
    """Remove one unit; the line disappears at zero."""
    slug = _slug_from_body()
    cart = get_cart()
    cart.remove(slug)
    save_cart(cart)
    return _cart_response(cart)


@cart_bp.route('/clear', methods=['POST'])
def clear_cart():
    cart = get_cart()
    cart.clear()
    save_cart(cart)
    return _cart_response(cart)


@cart_bp.route('/discount', methods=['PUT'])
def set_discount():
    """Store the discount as entered; pricing clamps it to [0, 100]."""
    body = request.get_json(silent=True) or {}
    session[DISCOUNT_KEY] = body.get('discount') if isinstance(body, dict) else None
    return _cart_response(get_cart())


@cart_bp.route('/checkout', methods=['POST'])
def checkout():
    """Place the order for the current cart."""
    body = request.get_json(silent=True) or {}
    order_key = body.get('order_key') if isinstance(body, dict) else None
    if order_key is not None and (not isinstance(order_key, str) or not order_key or len(order_key) > 64):
        raise ValidationError('order_key must be a string of at most 64 characters')

    cart = get_cart()
    try:
        result = order_service.place_order(
            cart,
            session.get(DISCOUNT_KEY, 0),
            OrderBackendClient.from_app(),
            get_session(),
            idempotency_key=order_key,
            category=current_app.config.get('STOCK_CATEGORY', 'desserts')
        )
    except OrderBackendError:
        order_failures_total.inc()
        raise

    orders_placed_total.inc()
    if not result['stock_synced']:
        stock_decrement_failures_total.inc()

    save_cart(cart)
    session[DISCOUNT_KEY] = 0

    return jsonify({
        'status': 'ok',
        'message': 'Order placed successfully',
        'order': result['order'],
        'order_key': result['idempotency_key'],
        'stock_synced': result['stock_synced'],
        'stock_updated': result['stock_updated'],
    }), 201
