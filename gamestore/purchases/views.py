import math

from django.db.models import Q
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import status
from rest_framework.exceptions import APIException
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

# models
from .models import PurchaseRecord
from accounts.models import User
from catalog.models import Category, Product

# serializers
from .serializers import PurchaseRecordSerializer, SalesLogSerializer

# permissions
from accounts.permissions import IsAdminRole, IsUserRole

from .recorder import purchase
from config.pagination import page_params

# logging
from logger import get_logger

logger = get_logger("gamestore.purchases")


# Purchase API
class PurchaseProduct(APIView):
    permission_classes = [IsUserRole]

    @swagger_auto_schema(
        operation_summary="Buy a product",
        operation_description=(
            "Claims one unsold stock unit and debits the product price from the "
            "caller's points. The response carries the purchased credentials."
        ),
        responses={
            201: openapi.Response(
                description="Purchase success",
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        "message": openapi.Schema(type=openapi.TYPE_STRING),
                        "point": openapi.Schema(type=openapi.TYPE_STRING),
                        "purchase": openapi.Schema(type=openapi.TYPE_OBJECT),
                    },
                ),
            ),
            400: "Out of stock or not enough points",
            401: "Authentication required",
            404: "Product not found",
        },
    )
    def post(self, request, product_id):
        try:
            record = purchase(request.user, product_id)
        except APIException:
            raise
        except Exception:
            logger.exception(f"purchase of product {product_id} failed for {request.user.username}")
            return Response(
                {"error": "Purchase could not be completed. Please try again.", "code": "server_error"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(
            {
                "message": "Purchase success",
                "point": str(request.user.point),
                "purchase": PurchaseRecordSerializer(record).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PurchaseHistory(APIView):
    permission_classes = [IsUserRole]

    @swagger_auto_schema(
        operation_summary="My purchase history",
        responses={200: PurchaseRecordSerializer(many=True)},
    )
    def get(self, request):
        records = PurchaseRecord.objects.filter(buyer=request.user).select_related("product")
        return Response(PurchaseRecordSerializer(records, many=True).data)


# admin api
class SalesLog(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="Sales log (admin)",
        operation_description="Every sale, newest first, searchable by product, category or buyer.",
        manual_parameters=[
            openapi.Parameter("page", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
            openapi.Parameter("limit", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
            openapi.Parameter("search", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False),
        ],
        responses={200: SalesLogSerializer(many=True)},
    )
    def get(self, request):
        page, limit = page_params(request.query_params, "limit")
        search = (request.query_params.get("search") or "").strip()

        records = PurchaseRecord.objects.all()
        if search:
            records = records.filter(
                Q(product_name__icontains=search)
                | Q(category_name__icontains=search)
                | Q(buyer_username__icontains=search)
            )
        total = records.count()
        sales = records[(page - 1) * limit: page * limit]

        return Response(
            {
                "sales": SalesLogSerializer(sales, many=True).data,
                "total": total,
                "page": page,
                "totalPages": math.ceil(total / limit),
            }
        )


class Stats(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="Store counters (admin)",
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    "users": openapi.Schema(type=openapi.TYPE_INTEGER),
                    "products": openapi.Schema(type=openapi.TYPE_INTEGER),
                    "sold": openapi.Schema(type=openapi.TYPE_INTEGER),
                    "categories": openapi.Schema(type=openapi.TYPE_INTEGER),
                },
            )
        },
    )
    def get(self, request):
        return Response(
            {
                "users": User.objects.count(),
                "products": Product.objects.count(),
                "sold": PurchaseRecord.objects.count(),
                "categories": Category.objects.count(),
            }
        )
