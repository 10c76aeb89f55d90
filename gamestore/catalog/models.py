from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from accounts.models import BaseModel


class Category(BaseModel):
    name = models.CharField(max_length=100)
    image_url = models.TextField(blank=True)
    image_public_id = models.CharField(max_length=255, blank=True)  # cloudinary

    def __str__(self):
        return self.name


class Product(BaseModel):
    name = models.CharField(max_length=200)
    detail = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0"))]
    )
    category = models.ForeignKey(
        Category, on_delete=models.CASCADE, related_name="products"
    )
    image_url = models.TextField(blank=True)
    image_public_id = models.CharField(max_length=255, blank=True)
    is_featured = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0), name="product_price_non_negative"
            ),
        ]

    def __str__(self):
        return self.name


class StockEntry(BaseModel):
    """One sellable account credential of a product.

    Credentials are stored as plain text, buyers get them back verbatim.
    Sold entries are kept for the purchase history.
    """

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="stock")
    username = models.CharField(max_length=255)
    password = models.CharField(max_length=255)
    is_sold = models.BooleanField(default=False)
    sold_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["product", "is_sold"], name="stock_product_sold_idx")]

    def __str__(self):
        return f"{self.product_id}:{self.username}"
