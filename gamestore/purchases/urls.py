from django.urls import path
from .views import *

urlpatterns = [
    # purchase api
    path('purchase/<int:product_id>/', PurchaseProduct.as_view(), name='purchase_product'),
    path('purchase/history/', PurchaseHistory.as_view(), name='purchase_history'),

    # admin api
    path('admin/sales-log/', SalesLog.as_view(), name='sales_log'),
    path('admin/stats/', Stats.as_view(), name='stats'),
]
