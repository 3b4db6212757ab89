"""Stock Record model."""
from sqlalchemy import Column, BigInteger, Integer, String, DateTime, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func
from restaurant.database import Base


class StockRecord(Base):
    """Per-slug stock counter, scoped to a menu category."""

    __tablename__ = 'stock_record'
    __table_args__ = (
        UniqueConstraint('slug', 'category', name='uq_stock_record_slug_category'),
        CheckConstraint('stock >= 0', name='ck_stock_record_stock_non_negative'),
    )

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    slug = Column(String(120), nullable=False, index=True)
    item = Column(String(200), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(60), nullable=False, default='desserts')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            'slug': self.slug,
            'stock': self.stock,
            'item': self.item,
        }

    def __repr__(self):
        return f"<StockRecord(slug='{self.slug}', stock={self.stock}, category='{self.category}')>"
