from decimal import Decimal

from rest_framework import serializers

from .models import Category, Product, StockEntry
from . import ledger


# category ----------------------------------------------------------
class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "image_url", "created_at", "updated_at"]


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    image = serializers.FileField(required=False, write_only=True)


# product -----------------------------------------------------------
class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)
    available_count = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "detail",
            "price",
            "category",
            "category_name",
            "image_url",
            "is_featured",
            "available_count",
            "created_at",
            "updated_at",
        ]

    def get_available_count(self, obj):
        # annotated by ledger.with_available_count on list queries
        count = getattr(obj, "available_count", None)
        if count is None:
            count = ledger.available_count(obj)
        return count


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    detail = serializers.CharField(required=False, allow_blank=True, default="")
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    is_featured = serializers.BooleanField(required=False, default=False)
    image = serializers.FileField(required=False, write_only=True)


# stock -------------------------------------------------------------
class StockEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = StockEntry
        fields = [
            "id",
            "product",
            "username",
            "password",
            "is_sold",
            "sold_at",
            "created_at",
        ]
        read_only_fields = ["id", "product", "is_sold", "sold_at", "created_at"]
