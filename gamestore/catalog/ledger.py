"""
Stock ledger.

A unit is claimed with a single conditional UPDATE on ``is_sold``, so two
requests can never hand out the same StockEntry, whatever the database
isolation level is.
"""
from django.db.models import Count, Q
from django.utils import timezone

from catalog.models import StockEntry
from config.exceptions import OutOfStock

# logging
from logger import get_logger

logger = get_logger("gamestore.catalog")

# candidates read per round; losers of a race move on to the next id
CLAIM_BATCH = 5


def allocate_unit(product_id):
    """Claim one unsold unit of ``product_id`` or raise ``OutOfStock``."""
    while True:
        candidates = list(
            StockEntry.objects.filter(product_id=product_id, is_sold=False)
            .order_by("id")
            .values_list("id", flat=True)[:CLAIM_BATCH]
        )
        if not candidates:
            raise OutOfStock()

        for stock_id in candidates:
            claimed = StockEntry.objects.filter(id=stock_id, is_sold=False).update(
                is_sold=True, sold_at=timezone.now()
            )
            if claimed:
                return StockEntry.objects.get(id=stock_id)
        logger.info(f"stock claim lost race for product {product_id}, retrying")


def release_unit(stock):
    """Put a claimed unit back on sale."""
    StockEntry.objects.filter(id=stock.id, is_sold=True).update(is_sold=False, sold_at=None)
    stock.is_sold = False
    stock.sold_at = None


def with_available_count(queryset):
    return queryset.annotate(
        available_count=Count("stock", filter=Q(stock__is_sold=False))
    )


def available_count(product):
    return StockEntry.objects.filter(product=product, is_sold=False).count()
