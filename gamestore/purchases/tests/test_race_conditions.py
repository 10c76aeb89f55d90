from decimal import Decimal

import pytest

from accounts.models import User
from catalog import ledger
from catalog.models import StockEntry
from config.exceptions import OutOfStock
from purchases.models import PurchaseRecord
from purchases.recorder import purchase

pytestmark = pytest.mark.django_db(transaction=True)

UNITS = 3
BUYERS = 8


def test_concurrent_buyers_never_exceed_stock(make_user, make_product, run_concurrently):
    product = make_product(price="10", units=UNITS)
    buyer_ids = [make_user(f"buyer{i}", point="100").id for i in range(BUYERS)]

    outcomes = run_concurrently(
        lambda buyer_id: purchase(User.objects.get(id=buyer_id), product.id), buyer_ids
    )

    sold = [record for record, error in outcomes if error is None]
    errors = [error for _, error in outcomes if error is not None]
    assert len(sold) == UNITS
    assert len(errors) == BUYERS - UNITS
    assert all(isinstance(error, OutOfStock) for error in errors)

    stock_ids = [record.stock_id for record in sold]
    assert len(set(stock_ids)) == len(stock_ids)
    assert PurchaseRecord.objects.count() == UNITS
    assert StockEntry.objects.filter(product=product, is_sold=True).count() == UNITS
    assert ledger.available_count(product) == 0

    spent = sum(Decimal("100") - user.point for user in User.objects.filter(id__in=buyer_ids))
    assert spent == UNITS * Decimal("10")


def test_one_buyer_racing_own_balance(make_user, make_product, run_concurrently):
    # enough points for two units, five requests at once
    product = make_product(price="40", units=5)
    buyer = make_user(point="80")

    outcomes = run_concurrently(
        lambda _: purchase(User.objects.get(id=buyer.id), product.id), range(5)
    )

    assert sum(1 for _, error in outcomes if error is None) == 2
    buyer.refresh_from_db()
    assert buyer.point == Decimal("0")
    assert ledger.available_count(product) == 3
    assert PurchaseRecord.objects.filter(buyer=buyer).count() == 2
