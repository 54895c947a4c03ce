"""
URL configuration for the hotspot billing service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Authentication endpoints
        register/                  - Create a user and its billing account
        referral-code/             - Check a referral code
        token/                     - Obtain a JWT pair
        token/refresh/             - Refresh an access token
    /api/v1/billing/               - Billing endpoints
        wallet/                    - Caller's wallet
        purchases/                 - Purchase history (GET) / buy a plan (POST)
        credentials/               - Credentials leased to the caller

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("billing/", include("billing.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Hotspot Billing Admin"
admin.site.site_title = "Hotspot Billing"
admin.site.index_title = "Wallets, plans and credentials"
