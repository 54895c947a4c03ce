"""
Permission classes for the billing API.

HTTP-level checks only. Row-level decisions (whose wallet, which records)
are made by billing.authorization.AuthorizationGate inside the views.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

from billing.ledger.models import Account

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class HasBillingAccount(permissions.BasePermission):
    """
    Allows access only to authenticated users with a provisioned Account.

    Users created outside AccountRegistry (e.g. createsuperuser) have no
    wallet until one is provisioned for them.
    """

    message = "A billing account is required."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return Account.objects.filter(user_id=user.pk).exists()
