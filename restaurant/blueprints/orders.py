"""Orders blueprint - back-office views over the order backend."""
from flask import Blueprint, request, jsonify

from restaurant.exceptions import NotFoundError, ValidationError
from restaurant.services import order_service
from restaurant.services.order_client import OrderBackendClient

orders_bp = Blueprint('orders', __name__)


@orders_bp.route('/orders', methods=['GET'])
def list_orders():
    """Orders with derived delivery status, optionally filtered by date range."""
    start_date = order_service.validate_date_param(request.args.get('startDate'), 'startDate')
    end_date = order_service.validate_date_param(request.args.get('endDate'), 'endDate')

    orders = OrderBackendClient.from_app().list_orders(start_date, end_date)
    orders = order_service.annotate_orders(orders or [])

    return jsonify({
        'orders': orders,
        'summary': order_service.summarize_orders(orders),
    })


@orders_bp.route('/orders/<order_id>', methods=['DELETE'])
def delete_order(order_id):
    OrderBackendClient.from_app().delete_order(order_id)
    return jsonify({'status': 'ok', 'message': 'Order deleted'})


@orders_bp.route('/orders/<order_id>', methods=['PUT'])
def update_order(order_id):
    """Reprice an order from edited quantities: body {items: {name: qty}, discount?}."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or 'items' not in body:
        raise ValidationError('items is required')

    client = OrderBackendClient.from_app()
    order = next((o for o in client.list_orders() or [] if o.get('_id') == order_id), None)
    if order is None:
        raise NotFoundError(f'Order not found: {order_id}')

    order_data = order_service.reprice_order(order, body['items'], body.get('discount'))
    client.update_order(order_id, order_data)

    return jsonify({'status': 'ok', 'message': 'Order updated', 'orderData': order_data})


@orders_bp.route('/stats', methods=['GET'])
def stats():
    """Per-item sales with overall revenue and items sold."""
    rows = OrderBackendClient.from_app().get_stats() or []
    return jsonify(order_service.summarize_stats(rows))
