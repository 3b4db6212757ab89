"""Cart Service - session-scoped cart aggregate (merge by slug)."""

from decimal import Decimal
from typing import Optional, Dict, Any, List


class Cart:
    """
    In-memory cart keyed by slug.

    At most one line exists per slug and every line has quantity >= 1;
    a line decremented to 0 is removed. The cart is never persisted to
    the database: it is serialized into the user's session with
    `to_dict()` and rebuilt with `from_dict()`.
    """

    def __init__(self, lines: Optional[List[Dict[str, Any]]] = None):
        self._lines: Dict[str, Dict[str, Any]] = {}
        for line in lines or []:
            qty = int(line.get('quantity', 0))
            if qty < 1 or not line.get('slug'):
                continue
            self._lines[line['slug']] = self._make_line(line, qty)

    @staticmethod
    def _make_line(line_input: Dict[str, Any], quantity: int) -> Dict[str, Any]:
        return {
            'slug': line_input['slug'],
            'display_name': line_input.get('display_name') or line_input['slug'],
            'price': Decimal(str(line_input.get('price', 0))),
            'image': line_input.get('image'),
            'quantity': quantity,
        }

    def add(self, line_input: Dict[str, Any]) -> Dict[str, Any]:
        """Add one unit; merges into the existing line for the same slug."""
        slug = line_input['slug']
        line = self._lines.get(slug)
        if line:
            line['quantity'] += 1
        else:
            line = self._make_line(line_input, 1)
            self._lines[slug] = line
        return dict(line)

    def remove(self, slug: str) -> None:
        """Remove one unit; drops the line when it reaches 0. No-op if absent."""
        line = self._lines.get(slug)
        if not line:
            return
        if line['quantity'] > 1:
            line['quantity'] -= 1
        else:
            del self._lines[slug]

    def clear(self) -> None:
        self._lines.clear()

    def total_count(self) -> int:
        """Sum of quantities across all lines."""
        return sum(line['quantity'] for line in self._lines.values())

    def get(self, slug: str) -> Optional[Dict[str, Any]]:
        line = self._lines.get(slug)
        return dict(line) if line else None

    @property
    def lines(self) -> List[Dict[str, Any]]:
        return [dict(line) for line in self._lines.values()]

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the session (Decimals stored as strings)."""
        return {
            'items': [
                {**line, 'price': str(line['price'])}
                for line in self._lines.values()
            ]
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Cart':
        return cls((data or {}).get('items', []))
