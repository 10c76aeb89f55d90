from decimal import Decimal

import pytest

from catalog import ledger
from catalog.models import StockEntry
from config.exceptions import InsufficientBalance, OutOfStock, ProductNotFound
from purchases.models import PurchaseRecord
from purchases.recorder import purchase

pytestmark = pytest.mark.django_db


def test_purchase_example(make_user, make_product):
    buyer = make_user(point="150")
    product = make_product(price="100", units=1)

    record = purchase(buyer, product.id)

    buyer.refresh_from_db()
    assert buyer.point == Decimal("50")
    assert ledger.available_count(product) == 0
    assert PurchaseRecord.objects.count() == 1
    assert record.price == Decimal("100")
    assert record.product_name == "Valorant Account"
    assert record.category_name == "Valorant"
    assert record.buyer_username == "buyer"
    assert (record.username, record.password) == ("val0", "pw0")
    assert record.stock.is_sold


def test_buyer_instance_is_refreshed(make_user, make_product):
    buyer = make_user(point="150")
    product = make_product(price="100")
    purchase(buyer, product.id)
    assert buyer.point == Decimal("50")


def test_repeated_purchases(make_user, make_product):
    buyer = make_user(point="1000")
    product = make_product(price="120", units=5)

    for _ in range(5):
        purchase(buyer, product.id)

    buyer.refresh_from_db()
    assert buyer.point == Decimal("1000") - 5 * Decimal("120")
    assert PurchaseRecord.objects.filter(buyer=buyer).count() == 5


def test_more_requests_than_units(make_user, make_product):
    product = make_product(price="10", units=3)
    buyers = [make_user(f"buyer{i}", point="100") for i in range(5)]

    sold, rejected = [], 0
    for buyer in buyers:
        try:
            sold.append(purchase(buyer, product.id))
        except OutOfStock:
            rejected += 1

    assert len(sold) == 3
    assert rejected == 2
    assert len({record.stock_id for record in sold}) == 3


def test_insufficient_balance_changes_nothing(make_user, make_product):
    buyer = make_user(point="99.99")
    product = make_product(price="100", units=1)

    with pytest.raises(InsufficientBalance):
        purchase(buyer, product.id)

    buyer.refresh_from_db()
    assert buyer.point == Decimal("99.99")
    assert StockEntry.objects.get(product=product).is_sold is False
    assert not PurchaseRecord.objects.exists()


def test_exact_balance(make_user, make_product):
    buyer = make_user(point="100")
    product = make_product(price="100")
    purchase(buyer, product.id)
    buyer.refresh_from_db()
    assert buyer.point == Decimal("0")


def test_out_of_stock_does_not_debit(make_user, make_product):
    buyer = make_user(point="500")
    product = make_product(price="100", units=0)

    with pytest.raises(OutOfStock):
        purchase(buyer, product.id)

    buyer.refresh_from_db()
    assert buyer.point == Decimal("500")


def test_unknown_product(user):
    with pytest.raises(ProductNotFound):
        purchase(user, 424242)


def test_snapshot_survives_product_deletion(make_user, make_product):
    buyer = make_user(point="150")
    product = make_product(price="100")
    record = purchase(buyer, product.id)

    product.delete()

    record.refresh_from_db()
    assert record.product is None
    assert record.stock is None
    assert record.product_name == "Valorant Account"
    assert record.password == "pw0"
