from django.db import models
from accounts.models import User
from catalog.models import Product, StockEntry


class PurchaseRecord(models.Model):
    """Immutable receipt of one sold stock unit.

    Product, category, price and credentials are copied at purchase time so
    the record survives later edits or deletion of the product.
    """

    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="purchases")
    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, null=True, blank=True, related_name="purchases"
    )
    # one record per consumed unit
    stock = models.OneToOneField(
        StockEntry, on_delete=models.SET_NULL, null=True, blank=True, related_name="purchase"
    )
    product_name = models.CharField(max_length=200)
    category_name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    buyer_username = models.CharField(max_length=30)
    username = models.CharField(max_length=255)
    password = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.buyer_username} - {self.product_name}"
