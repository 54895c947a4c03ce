"""
Django admin configuration for the ledger Account.

Balance is read-only here: it only changes through AccountLedger so the
row lock and the non-negative check always apply.
"""

from django.conf import settings
from django.contrib import admin

from .models import Account


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """
    Admin configuration for Account.

    Provides visibility into balances, roles and referral links.
    """

    list_display = [
        "id",
        "user",
        "balance_display",
        "role",
        "referral_code",
        "referred_by",
        "created_at",
    ]
    list_filter = ["role"]
    search_fields = ["id", "user__email", "referral_code", "phone"]
    raw_id_fields = ["user", "referred_by"]
    readonly_fields = ["id", "balance", "referral_code", "created_at", "updated_at"]
    ordering = ["-created_at"]

    fieldsets = (
        (None, {"fields": ("id", "user", "role")}),
        ("Wallet", {"fields": ("balance", "referral_code", "referred_by")}),
        ("Contact", {"fields": ("first_name", "last_name", "phone")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    @admin.display(description="Balance")
    def balance_display(self, obj: Account) -> str:
        return f"{obj.balance:.2f} {settings.BILLING_CURRENCY}"

    def has_delete_permission(self, request, obj=None):
        return False
