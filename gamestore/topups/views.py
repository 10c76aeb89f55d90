from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import status
from rest_framework.exceptions import APIException
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from accounts.permissions import IsUserRole

from .models import TopupRecord
from .serializers import RedeemLinkSerializer, SlipVerifySerializer, TopupRecordSerializer
from . import verifier

# logging
from logger import get_logger

logger = get_logger("gamestore.topups")

topup_response = openapi.Response(
    description="Topup success",
    schema=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={
            "message": openapi.Schema(type=openapi.TYPE_STRING),
            "amount": openapi.Schema(type=openapi.TYPE_STRING),
            "point": openapi.Schema(type=openapi.TYPE_STRING),
            "transaction_id": openapi.Schema(type=openapi.TYPE_STRING),
        },
    ),
)


def _server_error():
    return Response(
        {"error": "Topup could not be processed. Please contact support.", "code": "server_error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class RedeemGiftLink(APIView):
    permission_classes = [IsUserRole]

    @swagger_auto_schema(
        operation_summary="Top up with a TrueMoney gift link",
        request_body=RedeemLinkSerializer,
        responses={
            200: topup_response,
            400: "Invalid link or rejected by provider",
            401: "Authentication required",
            409: "Link already used",
            502: "Payment provider unreachable",
        },
    )
    def post(self, request):
        serializer = RedeemLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = verifier.redeem_link(request.user, serializer.validated_data["link"])
        except APIException:
            raise
        except Exception:
            logger.exception(f"gift link topup failed for {request.user.username}")
            return _server_error()

        return Response(
            {
                "message": f"Topup success {record.amount}",
                "amount": str(record.amount),
                "point": str(request.user.point),
            }
        )


class VerifySlip(APIView):
    permission_classes = [IsUserRole]

    @swagger_auto_schema(
        operation_summary="Top up with a bank transfer slip",
        operation_description="`qrcode_text` is the QR payload printed on the slip. Slips expire after 5 minutes.",
        request_body=SlipVerifySerializer,
        responses={
            200: topup_response,
            400: "Invalid or expired slip",
            401: "Authentication required",
            409: "Slip already used",
            502: "Payment provider unreachable",
        },
    )
    def post(self, request):
        serializer = SlipVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = verifier.verify_slip(request.user, serializer.validated_data["qrcode_text"])
        except APIException:
            raise
        except Exception:
            logger.exception(f"slip topup failed for {request.user.username}")
            return _server_error()

        return Response(
            {
                "message": f"Topup success {record.amount}",
                "amount": str(record.amount),
                "point": str(request.user.point),
                "transaction_id": record.transaction_id,
            }
        )


class TopupHistory(APIView):
    permission_classes = [IsUserRole]

    @swagger_auto_schema(
        operation_summary="My topup history",
        responses={200: TopupRecordSerializer(many=True)},
    )
    def get(self, request):
        records = TopupRecord.objects.filter(user=request.user)
        return Response({"history": TopupRecordSerializer(records, many=True).data})
