"""HTTP client for the external order backend (orders, stats)."""
import logging
import time
import requests
from typing import Dict, Any, List, Optional
from flask import current_app

from restaurant.blueprints.metrics import order_backend_request_seconds
from restaurant.exceptions import OrderBackendError

logger = logging.getLogger(__name__)


class OrderBackendClient:
    """Client for the external service that persists orders."""

    def __init__(self, base_url: str, timeout: int = 10):
        """
        Initialize order backend client.

        Args:
            base_url: Root URL of the order backend, e.g. http://localhost:3001
            timeout: Seconds to wait for each request
        """
        if not base_url:
            raise ValueError("ORDER_BACKEND_URL is required")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = {'Content-Type': 'application/json'}

    @classmethod
    def from_app(cls) -> 'OrderBackendClient':
        """Build a client from the current Flask app config."""
        return cls(
            current_app.config['ORDER_BACKEND_URL'],
            timeout=current_app.config.get('ORDER_BACKEND_TIMEOUT', 10)
        )

    def _request(self, method: str, path: str, headers: Optional[Dict[str, str]] = None, **kwargs) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            OrderBackendError: on connection failure, timeout, non-2xx status
                or an undecodable body.
        """
        url = f"{self.base_url}{path}"
        started_at = time.perf_counter()
        outcome = 'ok'
        try:
            response = requests.request(
                method, url,
                headers={**self.headers, **(headers or {})},
                timeout=self.timeout,
                **kwargs
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            outcome = 'http_error'
            status = e.response.status_code if e.response is not None else None
            logger.error(f"[ORDER] {method} {path} failed with {status}: {e.response.text if e.response is not None else e}")
            raise OrderBackendError(f"Order backend returned {status}", upstream_status=status)
        except requests.RequestException as e:
            outcome = 'unreachable'
            logger.error(f"[ORDER] {method} {path} unreachable: {e}")
            raise OrderBackendError("Order backend unreachable")
        finally:
            order_backend_request_seconds.labels(
                method=method, path=path, outcome=outcome
            ).observe(time.perf_counter() - started_at)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.error(f"[ORDER] {method} {path} returned a non-JSON body")
            raise OrderBackendError("Order backend returned an invalid response")

    def place_order(self, payload: Dict[str, Any], idempotency_key: Optional[str] = None) -> Dict[str, Any]:
        """
        Persist a new order.

        Args:
            payload: {items: [{name, qty, price}], discount, total, totalAmount}
            idempotency_key: Sent as Idempotency-Key so the backend can drop retries

        Returns:
            The order record created by the backend
        """
        headers = {'Idempotency-Key': idempotency_key} if idempotency_key else None
        logger.info(f"[ORDER] Placing order ({len(payload.get('items', []))} items, totalAmount={payload.get('totalAmount')})")
        order = self._request('POST', '/place-order', json=payload, headers=headers)
        logger.info(f"[ORDER] Order placed: {order.get('_id') if isinstance(order, dict) else order}")
        return order

    def list_orders(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Orders, optionally limited to a date range (YYYY-MM-DD)."""
        params = {}
        if start_date:
            params['startDate'] = start_date
        if end_date:
            params['endDate'] = end_date
        return self._request('GET', '/orders', params=params or None)

    def delete_order(self, order_id: str) -> Dict[str, Any]:
        logger.info(f"[ORDER] Deleting order {order_id}")
        return self._request('DELETE', '/delete-order', json={'id': order_id})

    def update_order(self, order_id: str, order_data: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"[ORDER] Updating order {order_id}")
        return self._request('PUT', '/update-order', json={'id': order_id, 'orderData': order_data})

    def get_stats(self) -> List[Dict[str, Any]]:
        """Per-item sales aggregates: [{_id: itemName, totalQty, totalRevenue}]."""
        return self._request('GET', '/stats')
