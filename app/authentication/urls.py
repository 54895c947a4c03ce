"""
URL configuration for authentication app.

All routes are prefixed with /api/v1/auth/ when included in the main URLconf.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from authentication.views import ReferralCodeView, RegisterView

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("referral-code/", ReferralCodeView.as_view(), name="referral-code"),
    path("token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
]
