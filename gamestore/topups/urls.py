from django.urls import path
from .views import *

urlpatterns = [
    path('topup/redeem/', RedeemGiftLink.as_view(), name='topup_redeem'),
    path('topup/slip/verify/', VerifySlip.as_view(), name='topup_slip_verify'),
    path('topup/history/', TopupHistory.as_view(), name='topup_history'),
]
