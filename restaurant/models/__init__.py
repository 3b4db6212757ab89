"""Models package - exports all SQLAlchemy models."""
from restaurant.models.stock_record import StockRecord
from restaurant.models.stock_decrement import StockDecrement

__all__ = ['StockRecord', 'StockDecrement']
