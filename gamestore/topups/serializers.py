from django.conf import settings
from rest_framework import serializers

from .models import TopupRecord


class RedeemLinkSerializer(serializers.Serializer):
    link = serializers.CharField(max_length=255)

    def validate_link(self, value):
        value = value.strip()
        if not value.startswith(settings.GIFT_LINK_PREFIX):
            raise serializers.ValidationError(
                f"Gift link must start with {settings.GIFT_LINK_PREFIX}"
            )
        return value


class SlipVerifySerializer(serializers.Serializer):
    qrcode_text = serializers.CharField(max_length=1000)


class TopupRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = TopupRecord
        fields = [
            "id",
            "amount",
            "method",
            "transaction_id",
            "slip_time",
            "sender",
            "receiver",
            "note",
            "created_at",
        ]
