"""
Django admin configuration for billing models.

Catalog (Plan, Location) is edited here. PurchaseRecord is an audit view:
no add, change or delete. Account and CredentialLease admins live in the
ledger and pool subpackages and are registered by importing them below.
"""

from django.contrib import admin

from billing.ledger import admin as ledger_admin  # noqa: F401
from billing.pool import admin as pool_admin  # noqa: F401

from .models import Location, Plan, PurchaseRecord


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "price", "duration_hours", "popular", "is_active"]
    list_filter = ["type", "is_active", "popular", "is_unlimited"]
    search_fields = ["name"]


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ["name", "wifi_name", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name", "wifi_name"]


@admin.register(PurchaseRecord)
class PurchaseRecordAdmin(admin.ModelAdmin):
    """
    Read-only audit view of the purchase log.

    Corrections go through PurchaseRecordStore.correct().
    """

    list_display = [
        "id",
        "account",
        "kind",
        "status",
        "amount",
        "plan",
        "location",
        "purchase_date",
        "expires_at",
    ]
    list_filter = ["kind", "status", "purchase_date"]
    search_fields = ["id", "account__user__email", "username", "payment_reference"]
    date_hierarchy = "purchase_date"
    ordering = ["-purchase_date"]

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
