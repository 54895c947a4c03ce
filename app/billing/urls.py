"""
URL configuration for the billing app.

All routes are prefixed with /api/v1/billing/ when included in the main URLconf.
"""

from django.urls import path

from billing.views import CredentialListView, PurchaseListCreateView, WalletView

app_name = "billing"

urlpatterns = [
    path("wallet/", WalletView.as_view(), name="wallet"),
    path("purchases/", PurchaseListCreateView.as_view(), name="purchases"),
    path("credentials/", CredentialListView.as_view(), name="credentials"),
]
