from django.urls import path
from .views import CategoryList
from .views import CategoryDetail
from .views import ProductList
from .views import FeaturedProductList
from .views import ProductDetail
from .views import ProductStockList
from .views import StockDetail

urlpatterns = [
    path("categories/", CategoryList.as_view(), name="category-list"),  # GET, POST /api/categories/
    path(
        "categories/<int:category_id>/", CategoryDetail.as_view(), name="category-detail"
    ),  # GET, PUT, DELETE /api/categories/<category_id>/
    path("products/", ProductList.as_view(), name="product-list"),  # GET, POST /api/products/
    path(
        "products/featured/", FeaturedProductList.as_view(), name="product-featured"
    ),  # GET /api/products/featured/
    path(
        "products/<int:product_id>/", ProductDetail.as_view(), name="product-detail"
    ),  # GET, PUT, DELETE /api/products/<product_id>/
    path(
        "products/<int:product_id>/stock/",
        ProductStockList.as_view(),
        name="product-stock",
    ),  # GET, POST /api/products/<product_id>/stock/
    path(
        "stock/<int:stock_id>/", StockDetail.as_view(), name="stock-detail"
    ),  # PUT, DELETE /api/stock/<stock_id>/
]
