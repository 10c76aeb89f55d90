from django.urls import path
from .views import *

urlpatterns = [
    # login & token
    path("register/", RegisterAPIView.as_view(), name="register"),
    path("login/", LoginAPIView.as_view(), name="login"),
    path("login/refresh/", TokenRefreshAPIView.as_view(), name="new_access_token"),

    # users
    path("me/", UserMe.as_view(), name="user_me"),
    path("admin/users/", UserList.as_view(), name="user_list"),
    path("admin/users/<int:user_id>/", UserDetail.as_view(), name="user_detail"),

    # banned ip
    path("admin/banned-ips/", BannedIPList.as_view(), name="banned_ip_list"),
    path("admin/banned-ips/<int:banned_id>/", BannedIPDetail.as_view(), name="banned_ip_detail"),
]
