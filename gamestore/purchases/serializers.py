from rest_framework import serializers
from .models import PurchaseRecord


class PurchaseRecordSerializer(serializers.ModelSerializer):
    """A buyer's own receipt, credentials included."""

    image_url = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseRecord
        fields = [
            "id",
            "product",
            "product_name",
            "category_name",
            "price",
            "image_url",
            "username",
            "password",
            "created_at",
        ]

    def get_image_url(self, obj):
        # product may have been deleted since, the snapshot still stands
        return obj.product.image_url if obj.product else ""


class SalesLogSerializer(serializers.ModelSerializer):
    sold_at = serializers.DateTimeField(source="created_at")

    class Meta:
        model = PurchaseRecord
        fields = [
            "id",
            "product_name",
            "category_name",
            "price",
            "buyer_username",
            "username",
            "password",
            "sold_at",
        ]
