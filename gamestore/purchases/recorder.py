from django.db import transaction
from django.db.models import F

from accounts.models import User
from catalog.models import Product
from catalog.ledger import allocate_unit, release_unit
from config.exceptions import ProductNotFound, InsufficientBalance

from .models import PurchaseRecord

# logging
from logger import get_logger

logger = get_logger("gamestore.purchases")


def purchase(buyer, product_id):
    """Sell one unit of ``product_id`` to ``buyer``.

    Inside one transaction: claim a stock unit, then debit the buyer with a
    conditional UPDATE (``point >= price``), then write the snapshot record.
    A failed debit puts the unit back and nothing is committed.

    Raises ``ProductNotFound``, ``OutOfStock`` or ``InsufficientBalance``.
    """
    with transaction.atomic():
        product = Product.objects.select_related("category").filter(id=product_id).first()
        if product is None:
            raise ProductNotFound()

        stock = allocate_unit(product.id)

        debited = User.objects.filter(id=buyer.id, point__gte=product.price).update(
            point=F("point") - product.price
        )
        if not debited:
            release_unit(stock)
            raise InsufficientBalance()

        record = PurchaseRecord.objects.create(
            buyer=buyer,
            product=product,
            stock=stock,
            product_name=product.name,
            category_name=product.category.name,
            price=product.price,
            buyer_username=buyer.username,
            username=stock.username,
            password=stock.password,
        )

    buyer.refresh_from_db(fields=["point"])
    logger.info(
        f"purchase {record.id} : {buyer.username} bought {product.name} "
        f"(stock {stock.id}) for {product.price}"
    )
    return record
