"""
DRF views for the billing app.

Endpoints:
    GET  /api/v1/billing/wallet/       - Caller's wallet
    GET  /api/v1/billing/purchases/    - Purchase history visible to the caller
    POST /api/v1/billing/purchases/    - Buy a plan at a location
    GET  /api/v1/billing/credentials/  - Credentials leased to the caller

Every request goes through AuthorizationGate before any service runs.
Service errors are rendered with BaseApplicationError.to_dict().

Related files:
    - authorization.py: AuthorizationGate
    - services/purchase_orchestrator.py: PurchaseOrchestrator
    - serializers.py: Request/response serializers
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from billing.authorization import AuthorizationGate, Operation
from billing.exceptions import (
    AccountNotFound,
    ConcurrencyConflict,
    CredentialUnavailable,
    InsufficientFunds,
    PurchaseValidationError,
    ReferentialIntegrityViolation,
)
from billing.models import CredentialLease, Location, Plan, PurchaseRecord
from billing.permissions import HasBillingAccount
from billing.pool.services import CredentialPool
from billing.serializers import (
    CredentialLeaseSerializer,
    PurchaseRecordSerializer,
    PurchaseRequestSerializer,
    PurchaseResponseSerializer,
    WalletSerializer,
)
from billing.services import PurchaseOrchestrator
from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific class first
ERROR_STATUS = [
    (AccountNotFound, status.HTTP_404_NOT_FOUND),
    (InsufficientFunds, status.HTTP_402_PAYMENT_REQUIRED),
    (CredentialUnavailable, status.HTTP_409_CONFLICT),
    (ConcurrencyConflict, status.HTTP_409_CONFLICT),
    (ReferentialIntegrityViolation, status.HTTP_400_BAD_REQUEST),
    (PurchaseValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
]


def error_response(error: BaseApplicationError) -> Response:
    """Render a service error with the status code for its class."""
    for error_class, status_code in ERROR_STATUS:
        if isinstance(error, error_class):
            return Response(error.to_dict(), status=status_code)
    return Response(error.to_dict(), status=status.HTTP_400_BAD_REQUEST)


class WalletView(APIView):
    """
    Get the caller's wallet.

    GET /api/v1/billing/wallet/
    """

    permission_classes = [IsAuthenticated, HasBillingAccount]

    @extend_schema(
        operation_id="get_wallet",
        summary="Get wallet",
        tags=["Billing"],
        responses={200: WalletSerializer},
    )
    def get(self, request):
        account = AuthorizationGate.actor_account(request.user)
        try:
            AuthorizationGate.ensure_allowed(request.user, Operation.READ, account)
        except BaseApplicationError as e:
            return error_response(e)
        return Response(WalletSerializer(account).data)


class PurchaseListCreateView(generics.ListAPIView):
    """
    Purchase history and plan purchase.

    GET /api/v1/billing/purchases/
        Records the caller may read: their own and those of accounts they
        referred (admins see all). Paginated.

    POST /api/v1/billing/purchases/
        Request body:
            {
                "plan_id": "...",
                "location_id": "...",
                "credential_id": "...",     # optional
                "idempotency_key": "..."    # optional, or Idempotency-Key header
            }

        Returns 201 with the purchase result and the leased credential,
        or 200 when an idempotency key replays an earlier purchase.
    """

    permission_classes = [IsAuthenticated, HasBillingAccount]
    serializer_class = PurchaseRecordSerializer

    def get_queryset(self):
        queryset = PurchaseRecord.objects.select_related("plan", "location")
        return AuthorizationGate.filter_queryset(
            self.request.user, Operation.READ, queryset
        ).order_by("-purchase_date", "-created_at")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["account"] = AuthorizationGate.actor_account(self.request.user)
        return context

    @extend_schema(
        operation_id="list_purchases",
        summary="List purchases",
        tags=["Billing"],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        operation_id="create_purchase",
        summary="Purchase a plan",
        tags=["Billing"],
        request=PurchaseRequestSerializer,
        responses={
            201: PurchaseResponseSerializer,
            200: OpenApiResponse(
                response=PurchaseResponseSerializer,
                description="Replay of an earlier purchase with the same idempotency key",
            ),
            400: OpenApiResponse(description="Invalid plan, location or credential"),
            402: OpenApiResponse(description="Insufficient balance"),
            403: OpenApiResponse(description="Not allowed to purchase for this account"),
            404: OpenApiResponse(description="Account not found"),
            409: OpenApiResponse(description="Credential unavailable or lock conflict"),
        },
    )
    def post(self, request):
        serializer = PurchaseRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        actor = AuthorizationGate.actor_account(request.user)
        account_id = data.get("account_id") or actor.pk

        try:
            AuthorizationGate.ensure_can_purchase(request.user, account_id)

            plan = self._readable(request.user, Plan, data["plan_id"], "Plan")
            location = self._readable(request.user, Location, data["location_id"], "Location")

            credential_id = data.get("credential_id")
            if credential_id is None:
                credential = CredentialPool.next_available(location.pk, plan.pk)
                if credential is None:
                    raise CredentialUnavailable(
                        None,
                        None,
                        message="No credentials available for this plan at this location",
                        details={"plan_id": str(plan.pk), "location_id": str(location.pk)},
                    )
                credential_id = credential.pk

            idempotency_key = data.get("idempotency_key") or request.headers.get(
                "Idempotency-Key"
            )

            result = PurchaseOrchestrator.purchase(
                account_id=account_id,
                plan_id=plan.pk,
                location_id=location.pk,
                credential_id=credential_id,
                amount=plan.price,
                duration_hours=plan.duration_hours,
                idempotency_key=idempotency_key,
            )
        except BaseApplicationError as e:
            return error_response(e)

        body = result.to_dict()
        body["credential"] = {"username": result.username, "password": result.password}
        return Response(
            body,
            status=status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED,
        )

    @staticmethod
    def _readable(user, model, pk, label):
        row = model.objects.filter(pk=pk).first()
        if row is None or not AuthorizationGate.is_allowed(user, Operation.READ, row):
            raise ReferentialIntegrityViolation(
                f"{label} {pk} is not available",
                error_code=f"{label.upper()}_NOT_FOUND",
                details={f"{label.lower()}_id": str(pk)},
            )
        return row


class CredentialListView(generics.ListAPIView):
    """
    Credentials currently leased to the caller.

    GET /api/v1/billing/credentials/
    """

    permission_classes = [IsAuthenticated, HasBillingAccount]
    serializer_class = CredentialLeaseSerializer

    def get_queryset(self):
        account = AuthorizationGate.actor_account(self.request.user)
        queryset = CredentialLease.objects.select_related("plan", "location")
        return (
            AuthorizationGate.filter_queryset(self.request.user, Operation.READ, queryset)
            .filter(assigned_to=account)
            .order_by("-assigned_at")
        )

    @extend_schema(
        operation_id="list_credentials",
        summary="List leased credentials",
        tags=["Billing"],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
