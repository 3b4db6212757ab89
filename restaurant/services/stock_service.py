"""
Stock ledger service.

Per-slug integer stock counters scoped to a menu category. Stock is
never negative: writes reject negative values and decrements are a
single conditional UPDATE clamped at zero, evaluated by the database so
concurrent orders cannot lose an update.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from restaurant.catalog import DEFAULT_DESSERT_STOCK, stock_item_name
from restaurant.exceptions import ValidationError
from restaurant.models import StockDecrement, StockRecord

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = 'desserts'

# Upper bound of the stock column (32-bit INTEGER)
MAX_STOCK = 2**31 - 1


def _validate_slug(slug: Any) -> str:
    if not isinstance(slug, str) or not slug.strip():
        raise ValidationError('slug is required')
    return slug.strip()


def _validate_stock(stock: Any) -> int:
    """Stock must be a non-negative whole number."""
    if isinstance(stock, bool) or not isinstance(stock, (int, float)):
        raise ValidationError('stock must be a number')
    if isinstance(stock, float):
        if not stock.is_integer():
            raise ValidationError('stock must be a whole number')
        stock = int(stock)
    if stock < 0:
        raise ValidationError('stock cannot be negative')
    if stock > MAX_STOCK:
        raise ValidationError(f'stock cannot exceed {MAX_STOCK}')
    return stock


def _parse_quantity(quantity: Any) -> Optional[int]:
    """
    Positive whole quantity, or None when the entry should be skipped.

    Capped at MAX_STOCK: no record holds more, so the clamp still yields 0.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        return None
    if isinstance(quantity, float) and not quantity.is_integer():
        return None
    quantity = int(quantity)
    return min(quantity, MAX_STOCK) if quantity > 0 else None


def list_by_category(session: Session, category: str = DEFAULT_CATEGORY) -> List[StockRecord]:
    """All stock records of a category."""
    return session.query(StockRecord).filter(
        StockRecord.category == category
    ).order_by(StockRecord.id).all()


def get_record(session: Session, slug: str, category: str = DEFAULT_CATEGORY) -> Optional[StockRecord]:
    return session.query(StockRecord).filter(
        StockRecord.slug == slug,
        StockRecord.category == category
    ).first()


def get_stock_map(session: Session, category: str = DEFAULT_CATEGORY) -> Dict[str, int]:
    """{slug: stock} for a category, served from cache when available."""
    def _load():
        return {r.slug: r.stock for r in list_by_category(session, category)}

    try:
        from restaurant.services.cache_service import get_cache
        cache = get_cache()
    except RuntimeError:
        return _load()

    from flask import current_app
    ttl = current_app.config.get('CACHE_STOCK_TTL', 30)
    return cache.memoize('stock', category, _load, ttl=ttl)


def _apply_upsert(session: Session, slug: str, stock: int, category: str) -> StockRecord:
    """Create or overwrite a record inside the current transaction."""
    record = get_record(session, slug, category)
    if record:
        record.stock = stock
        record.item = stock_item_name(slug)
        session.flush()
        return record

    record = StockRecord(slug=slug, item=stock_item_name(slug), stock=stock, category=category)
    try:
        with session.begin_nested():
            session.add(record)
            session.flush()
    except IntegrityError:
        # Inserted concurrently by another writer: overwrite theirs (last write wins)
        record = get_record(session, slug, category)
        record.stock = stock
        session.flush()
    return record


def upsert_one(session: Session, slug: Any, stock: Any, category: str = DEFAULT_CATEGORY) -> StockRecord:
    """
    Create the record if absent, otherwise overwrite its stock.

    Raises:
        ValidationError: if slug is missing or stock is negative / not a whole number.
    """
    slug = _validate_slug(slug)
    stock = _validate_stock(stock)

    try:
        record = _apply_upsert(session, slug, stock, category)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info(f"[STOCK] Set {category}/{slug} = {stock}")
    _invalidate_stock_cache(category)
    return record


def upsert_bulk(
    session: Session,
    updates: Any,
    category: str = DEFAULT_CATEGORY
) -> Tuple[List[StockRecord], List[Dict[str, Any]]]:
    """
    Apply upsert semantics to every entry, best-effort.

    A failing entry is rolled back on its own savepoint and reported;
    the remaining entries are still processed.

    Returns:
        (records written, [{'slug', 'error'}] for skipped entries)
    """
    if not isinstance(updates, list):
        raise ValidationError('updates array is required')

    results = []
    errors = []
    for entry in updates:
        slug = entry.get('slug') if isinstance(entry, dict) else None
        try:
            if not isinstance(entry, dict):
                raise ValidationError('update entry must be an object')
            clean_slug = _validate_slug(slug)
            stock = _validate_stock(entry.get('stock'))
            with session.begin_nested():
                results.append(_apply_upsert(session, clean_slug, stock, category))
        except (ValidationError, SQLAlchemyError) as e:
            message = e.message if isinstance(e, ValidationError) else 'write failed'
            logger.warning(f"[STOCK] Bulk entry skipped ({slug}): {e}")
            errors.append({'slug': slug, 'error': message})

    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info(f"[STOCK] Bulk upsert {category}: {len(results)} written, {len(errors)} skipped")
    _invalidate_stock_cache(category)
    return results, errors


def initialize_defaults(session: Session, category: str = DEFAULT_CATEGORY) -> List[StockRecord]:
    """Seed the default dessert stock levels (upsert, safe to re-run)."""
    records, _ = upsert_bulk(session, [dict(entry) for entry in DEFAULT_DESSERT_STOCK], category)
    return records


def decrement(
    session: Session,
    items: Any,
    category: str = DEFAULT_CATEGORY,
    idempotency_key: Optional[str] = None
) -> List[StockRecord]:
    """
    Decrement stock for ordered items, clamped at zero.

    Entries without a string slug or with a non-positive quantity are skipped,
    as are slugs with no record. When an idempotency key is given, a
    second call with the same key is a no-op.

    Returns:
        The records actually touched, with their new stock.
    """
    if not isinstance(items, list):
        raise ValidationError('Items array is required')
    if idempotency_key is not None and (not isinstance(idempotency_key, str) or len(idempotency_key) > 64):
        raise ValidationError('idempotency_key must be a string of at most 64 characters')

    try:
        if idempotency_key:
            if session.query(StockDecrement).filter_by(idempotency_key=idempotency_key).first():
                logger.info(f"[STOCK] Decrement {idempotency_key} already applied, skipping")
                return []
            try:
                with session.begin_nested():
                    session.add(StockDecrement(idempotency_key=idempotency_key, category=category))
                    session.flush()
            except IntegrityError:
                logger.info(f"[STOCK] Decrement {idempotency_key} applied concurrently, skipping")
                return []

        touched = []
        for entry in items:
            if not isinstance(entry, dict):
                continue
            slug = entry.get('slug')
            qty = _parse_quantity(entry.get('quantity'))
            if not isinstance(slug, str) or not slug.strip() or qty is None:
                continue
            slug = slug.strip()

            session.execute(
                update(StockRecord)
                .where(StockRecord.slug == slug, StockRecord.category == category)
                .values(
                    stock=case((StockRecord.stock > qty, StockRecord.stock - qty), else_=0),
                    updated_at=func.now()
                )
                .execution_options(synchronize_session=False)
            )
            record = session.query(StockRecord).filter(
                StockRecord.slug == slug,
                StockRecord.category == category
            ).populate_existing().first()
            if record:
                touched.append(record)

        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    if touched:
        logger.info(f"[STOCK] Decremented {', '.join(f'{r.slug}={r.stock}' for r in touched)}")
        _invalidate_stock_cache(category)
    return touched


def summarize(records: List[StockRecord], low_threshold: int = 5) -> Dict[str, Any]:
    """Totals for the stock admin view."""
    return {
        'total_stock': sum(r.stock for r in records),
        'out_of_stock': sum(1 for r in records if r.stock == 0),
        'low_stock': sum(1 for r in records if 0 < r.stock <= low_threshold),
        'records': [r.to_dict() for r in records],
    }


def _invalidate_stock_cache(category: str):
    """Gracefully attempt to invalidate the stock cache."""
    try:
        from restaurant.services.cache_service import get_cache
        get_cache().delete('stock', category)
    except RuntimeError:
        pass
