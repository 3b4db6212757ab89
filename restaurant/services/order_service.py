"""
Order service - cart checkout workflow and order back-office helpers.

Checkout places the order on the external order backend first; only when
that succeeds is stock decremented for stock-tracked items. The order is
authoritative: a failed decrement is logged and reported, never rolled
back into the order.
"""
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from restaurant import catalog
from restaurant.exceptions import EmptyCartError, ValidationError
from restaurant.services import stock_service
from restaurant.services.cart_service import Cart
from restaurant.services.order_client import OrderBackendClient
from restaurant.services.pricing_service import calculate_totals

logger = logging.getLogger(__name__)

PREPARING_HOURS = 1
DELIVERING_HOURS = 2


def json_number(value: Decimal):
    """Decimal to int when whole, float otherwise."""
    value = Decimal(value)
    return int(value) if value == value.to_integral_value() else float(value)


def build_order_payload(lines: List[Dict[str, Any]], totals: Dict[str, Any]) -> Dict[str, Any]:
    """Order payload in the shape the order backend expects."""
    return {
        'items': [
            {
                'name': line['display_name'],
                'qty': line['quantity'],
                'price': json_number(line['price']),
            }
            for line in lines
        ],
        'discount': json_number(totals['discount_percent']),
        'total': totals['total'],
        'totalAmount': totals['total_amount'],
    }


def place_order(
    cart: Cart,
    discount: Any,
    order_client: OrderBackendClient,
    session: Session,
    idempotency_key: Optional[str] = None,
    category: str = stock_service.DEFAULT_CATEGORY
) -> Dict[str, Any]:
    """
    Turn the cart into a persisted order.

    1. Price the cart (discount clamped to [0, 100]).
    2. Submit the order; an OrderBackendError propagates and leaves the
       cart untouched with no stock change.
    3. Decrement stock for stock-tracked lines (best-effort, at most once
       per idempotency key).
    4. Clear the cart.

    Raises:
        EmptyCartError: if the cart has no lines.
        OrderBackendError: if the order backend call fails.
    """
    if cart.is_empty():
        raise EmptyCartError('Cannot place an order with an empty cart')

    lines = cart.lines
    totals = calculate_totals(lines, discount)
    payload = build_order_payload(lines, totals)
    idempotency_key = idempotency_key or uuid.uuid4().hex

    order = order_client.place_order(payload, idempotency_key=idempotency_key)

    tracked = [
        {'slug': line['slug'], 'quantity': line['quantity']}
        for line in lines
        if line['slug'] in catalog.STOCK_TRACKED_SLUGS
    ]

    stock_synced = True
    stock_updated = []
    if tracked:
        try:
            records = stock_service.decrement(session, tracked, category, idempotency_key=idempotency_key)
            stock_updated = [r.to_dict() for r in records]
        except Exception:
            # Order already stands; stock sync is advisory
            logger.exception(f"[ORDER] Stock decrement failed for order {idempotency_key}")
            session.rollback()
            stock_synced = False

    cart.clear()
    logger.info(f"[ORDER] Checkout complete ({idempotency_key}), totalAmount={totals['total_amount']}")

    return {
        'order': order,
        'payload': payload,
        'idempotency_key': idempotency_key,
        'stock_synced': stock_synced,
        'stock_updated': stock_updated,
    }


def parse_order_date(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp from the backend; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_order_status(order_date: datetime, now: Optional[datetime] = None) -> str:
    """preparing for the first hour, delivering for the second, then delivered."""
    now = now or datetime.now(timezone.utc)
    hours = (now - order_date).total_seconds() / 3600
    if hours < PREPARING_HOURS:
        return 'preparing'
    if hours < DELIVERING_HOURS:
        return 'delivering'
    return 'delivered'


def annotate_orders(orders: List[Dict[str, Any]], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    annotated = []
    for order in orders:
        order_date = parse_order_date(order.get('date'))
        status = get_order_status(order_date, now) if order_date else None
        annotated.append({**order, 'status': status})
    return annotated


def summarize_orders(orders: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Order count and total cost (discounted amount, falling back to total)."""
    return {
        'count': len(orders),
        'total_cost': sum(order.get('totalAmount') or order.get('total') or 0 for order in orders),
    }


def validate_date_param(value: Optional[str], name: str) -> Optional[str]:
    """Accept YYYY-MM-DD or nothing."""
    if not value:
        return None
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise ValidationError(f'{name} must be a date in YYYY-MM-DD format')
    return value


def reprice_order(order: Dict[str, Any], quantities: Any, discount: Any = None) -> Dict[str, Any]:
    """
    Rebuild an existing order's data from edited item quantities.

    Prices come from the catalog by item name, falling back to the price
    already on the order, then 0. Items with quantity 0 are dropped. The
    order's own discount is kept unless a new one is given.
    """
    if not isinstance(quantities, dict):
        raise ValidationError('items must map item names to quantities')

    existing_prices = {item.get('name'): item.get('price', 0) for item in order.get('items', [])}

    items = []
    for name, qty in quantities.items():
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 0:
            raise ValidationError(f'Invalid quantity for {name}')
        if qty == 0:
            continue
        price = catalog.price_for_name(name)
        if price is None:
            price = existing_prices.get(name) or 0
        items.append({'name': name, 'qty': qty, 'price': price})

    if discount is None:
        discount = order.get('discount') or 0
    totals = calculate_totals(items, discount, qty_key='qty')

    return {
        'items': items,
        'total': totals['total'],
        'totalAmount': totals['total_amount'],
        'discount': json_number(totals['discount_percent']),
    }


def summarize_stats(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        'items': rows,
        'total_revenue': sum(row.get('totalRevenue', 0) for row in rows),
        'total_items_sold': sum(row.get('totalQty', 0) for row in rows),
    }
