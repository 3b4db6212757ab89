"""Stock Decrement model."""
from sqlalchemy import Column, BigInteger, Integer, String, DateTime
from sqlalchemy.sql import func
from restaurant.database import Base


class StockDecrement(Base):
    """Record of an applied decrement, keyed by the order's idempotency key."""

    __tablename__ = 'stock_decrement'

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    # Idempotency key to prevent double decrement on double-submit
    idempotency_key = Column(String(64), unique=True, nullable=False, index=True)
    category = Column(String(60), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<StockDecrement(idempotency_key='{self.idempotency_key}')>"
