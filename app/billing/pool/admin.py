"""
Django admin configuration for the credential pool.

Status changes go through CredentialPool actions, never through the form,
so every change is made under a row lock and checked by the FSM.
"""

from django.contrib import admin, messages
from django.db import transaction

from billing.exceptions import CredentialUnavailable

from .models import CredentialLease
from .services import CredentialPool


@admin.register(CredentialLease)
class CredentialLeaseAdmin(admin.ModelAdmin):
    list_display = ["username", "location", "plan", "status", "assigned_to", "assigned_at"]
    list_filter = ["status", "location", "plan"]
    search_fields = ["username", "assigned_to__user__email"]
    raw_id_fields = ["assigned_to"]
    readonly_fields = ["id", "status", "assigned_to", "assigned_at", "created_at", "updated_at"]
    actions = ["release_credentials", "disable_credentials", "enable_credentials"]

    def _run(self, request, queryset, operation, label):
        done = 0
        for credential_id in queryset.values_list("id", flat=True):
            try:
                with transaction.atomic():
                    operation(credential_id)
                done += 1
            except CredentialUnavailable as e:
                self.message_user(request, e.message, level=messages.WARNING)
        self.message_user(request, f"{label} {done} credential(s).")

    @admin.action(description="Release selected credentials")
    def release_credentials(self, request, queryset):
        self._run(request, queryset, CredentialPool.release, "Released")

    @admin.action(description="Disable selected credentials")
    def disable_credentials(self, request, queryset):
        self._run(request, queryset, CredentialPool.disable, "Disabled")

    @admin.action(description="Enable selected credentials")
    def enable_credentials(self, request, queryset):
        self._run(request, queryset, CredentialPool.enable, "Enabled")
