from django.conf import settings
from django.db import transaction
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import AllowAny

# Swagger
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from accounts.permissions import IsAdminRole, IsAdminOrReadOnly
from config import storage

from .models import Category, Product, StockEntry
from .serializers import (
    CategorySerializer,
    CategoryWriteSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    StockEntrySerializer,
)
from . import ledger

# logging
from logger import get_logger

logger = get_logger("gamestore.catalog")

FEATURED_LIMIT = 6

category_id_param = openapi.Parameter(
    "categoryId",
    openapi.IN_QUERY,
    description="Only products of this category",
    type=openapi.TYPE_INTEGER,
    required=False,
)


def _products():
    return ledger.with_available_count(Product.objects.select_related("category"))


# ----------------------------
# category
# ----------------------------
class CategoryList(APIView):
    permission_classes = [IsAdminOrReadOnly]
    parser_classes = [MultiPartParser, FormParser]

    @swagger_auto_schema(
        operation_summary="Category list",
        responses={200: CategorySerializer(many=True)},
    )
    def get(self, request):
        categories = Category.objects.order_by("name")
        return Response(CategorySerializer(categories, many=True).data)

    @swagger_auto_schema(
        operation_summary="Create category (admin)",
        operation_description="multipart/form-data with `name` and an optional `image` file.",
        request_body=CategoryWriteSerializer,
        responses={201: CategorySerializer, 400: "Invalid data", 502: "Image upload failed"},
    )
    def post(self, request):
        serializer = CategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        image_url, public_id = "", ""
        if data.get("image"):
            image_url, public_id = storage.upload_image(
                data["image"], settings.CLOUDINARY_CATEGORY_FOLDER
            )

        category = Category.objects.create(
            name=data["name"], image_url=image_url, image_public_id=public_id
        )
        logger.info(f"category created : {category.id} {category.name}")
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)


class CategoryDetail(APIView):
    permission_classes = [IsAdminOrReadOnly]
    parser_classes = [MultiPartParser, FormParser]

    @swagger_auto_schema(
        operation_summary="Category detail",
        responses={200: CategorySerializer, 404: "Category not found"},
    )
    def get(self, request, category_id):
        category = get_object_or_404(Category, id=category_id)
        return Response(CategorySerializer(category).data)

    @swagger_auto_schema(
        operation_summary="Edit category (admin)",
        operation_description="A new `image` replaces the stored one.",
        request_body=CategoryWriteSerializer,
        responses={200: CategorySerializer, 404: "Category not found"},
    )
    def put(self, request, category_id):
        category = get_object_or_404(Category, id=category_id)
        serializer = CategoryWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        old_public_id = None
        if data.get("image"):
            old_public_id = category.image_public_id
            category.image_url, category.image_public_id = storage.upload_image(
                data["image"], settings.CLOUDINARY_CATEGORY_FOLDER
            )
        if "name" in data:
            category.name = data["name"]
        category.save()

        if old_public_id:
            storage.delete_image(old_public_id)
        return Response(CategorySerializer(category).data)

    @swagger_auto_schema(
        operation_summary="Delete category (admin)",
        operation_description="Products of the category are deleted with it.",
        responses={204: "Deleted", 404: "Category not found"},
    )
    def delete(self, request, category_id):
        category = get_object_or_404(Category, id=category_id)
        public_ids = [category.image_public_id]
        public_ids += list(category.products.values_list("image_public_id", flat=True))

        with transaction.atomic():
            category.delete()

        for public_id in public_ids:
            storage.delete_image(public_id)
        logger.info(f"category deleted : {category_id}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# ----------------------------
# product
# ----------------------------
class ProductList(APIView):
    permission_classes = [IsAdminOrReadOnly]
    parser_classes = [MultiPartParser, FormParser]

    @swagger_auto_schema(
        operation_summary="Product list",
        operation_description="Every product with the number of unsold stock units.",
        manual_parameters=[category_id_param],
        responses={200: ProductSerializer(many=True), 400: "categoryId must be an integer"},
    )
    def get(self, request):
        products = _products()
        category_id = request.query_params.get("categoryId")
        if category_id:
            try:
                category_id = int(category_id)
            except (TypeError, ValueError):
                return Response(
                    {"error": "categoryId must be an integer.", "code": "invalid"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            products = products.filter(category_id=category_id)
        products = products.order_by("-created_at", "-id")
        return Response(ProductSerializer(products, many=True).data)

    @swagger_auto_schema(
        operation_summary="Create product (admin)",
        request_body=ProductWriteSerializer,
        responses={201: ProductSerializer, 400: "Invalid data", 502: "Image upload failed"},
    )
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        image_url, public_id = "", ""
        image = data.pop("image", None)
        if image:
            image_url, public_id = storage.upload_image(
                image, settings.CLOUDINARY_PRODUCT_FOLDER
            )

        product = Product.objects.create(
            image_url=image_url, image_public_id=public_id, **data
        )
        logger.info(f"product created : {product.id} {product.name}")
        product = _products().get(id=product.id)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class FeaturedProductList(APIView):
    permission_classes = [AllowAny]

    @swagger_auto_schema(
        operation_summary="Featured products",
        responses={200: ProductSerializer(many=True)},
    )
    def get(self, request):
        products = _products().filter(is_featured=True).order_by("-created_at", "-id")
        return Response(ProductSerializer(products[:FEATURED_LIMIT], many=True).data)


class ProductDetail(APIView):
    permission_classes = [IsAdminOrReadOnly]
    parser_classes = [MultiPartParser, FormParser]

    @swagger_auto_schema(
        operation_summary="Product detail",
        responses={200: ProductSerializer, 404: "Product not found"},
    )
    def get(self, request, product_id):
        product = get_object_or_404(_products(), id=product_id)
        return Response(ProductSerializer(product).data)

    @swagger_auto_schema(
        operation_summary="Edit product (admin)",
        operation_description="A new `image` replaces the stored one.",
        request_body=ProductWriteSerializer,
        responses={200: ProductSerializer, 400: "Invalid data", 404: "Product not found"},
    )
    def put(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        old_public_id = None
        image = data.pop("image", None)
        if image:
            old_public_id = product.image_public_id
            product.image_url, product.image_public_id = storage.upload_image(
                image, settings.CLOUDINARY_PRODUCT_FOLDER
            )
        for field, value in data.items():
            setattr(product, field, value)
        product.save()

        if old_public_id:
            storage.delete_image(old_public_id)
        product = _products().get(id=product.id)
        return Response(ProductSerializer(product).data)

    @swagger_auto_schema(
        operation_summary="Delete product (admin)",
        responses={204: "Deleted", 404: "Product not found"},
    )
    def delete(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        public_id = product.image_public_id
        product.delete()
        storage.delete_image(public_id)
        logger.info(f"product deleted : {product_id}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# ----------------------------
# stock (admin)
# ----------------------------
class ProductStockList(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="Stock of a product (admin)",
        manual_parameters=[
            openapi.Parameter(
                "sold",
                openapi.IN_QUERY,
                description="true: sold only, false: unsold only",
                type=openapi.TYPE_BOOLEAN,
                required=False,
            )
        ],
        responses={200: StockEntrySerializer(many=True), 404: "Product not found"},
    )
    def get(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        stock = product.stock.order_by("is_sold", "id")
        sold = request.query_params.get("sold")
        if sold in ("true", "false"):
            stock = stock.filter(is_sold=(sold == "true"))
        return Response(StockEntrySerializer(stock, many=True).data)

    @swagger_auto_schema(
        operation_summary="Add stock (admin)",
        operation_description="One `{username, password}` object or a list of them.",
        request_body=StockEntrySerializer,
        responses={201: StockEntrySerializer(many=True), 400: "Invalid data", 404: "Product not found"},
    )
    def post(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        many = isinstance(request.data, list)
        serializer = StockEntrySerializer(data=request.data, many=many)
        serializer.is_valid(raise_exception=True)

        rows = serializer.validated_data if many else [serializer.validated_data]
        created = StockEntry.objects.bulk_create(
            [StockEntry(product=product, **row) for row in rows]
        )
        logger.info(f"{len(created)} stock unit(s) added to product {product.id}")
        return Response(
            StockEntrySerializer(created, many=True).data, status=status.HTTP_201_CREATED
        )


class StockDetail(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="Edit unsold stock (admin)",
        request_body=StockEntrySerializer,
        responses={200: StockEntrySerializer, 400: "Stock already sold", 404: "Stock not found"},
    )
    def put(self, request, stock_id):
        stock = get_object_or_404(StockEntry, id=stock_id)
        serializer = StockEntrySerializer(stock, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data:
            return Response(StockEntrySerializer(stock).data)

        # an in-flight purchase may claim the unit between the read and the write
        updated = StockEntry.objects.filter(id=stock.id, is_sold=False).update(
            **serializer.validated_data
        )
        if not updated:
            return Response(
                {"error": "Sold stock cannot be edited.", "code": "stock_sold"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        stock.refresh_from_db()
        return Response(StockEntrySerializer(stock).data)

    @swagger_auto_schema(
        operation_summary="Delete stock (admin)",
        operation_description="Only unsold stock can be deleted.",
        responses={204: "Deleted", 400: "Stock already sold", 404: "Stock not found"},
    )
    def delete(self, request, stock_id):
        stock = get_object_or_404(StockEntry, id=stock_id)
        deleted, _ = StockEntry.objects.filter(id=stock.id, is_sold=False).delete()
        if not deleted:
            return Response(
                {"error": "Sold stock cannot be deleted.", "code": "stock_sold"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info(f"stock deleted : {stock.id} of product {stock.product_id}")
        return Response(status=status.HTTP_204_NO_CONTENT)
