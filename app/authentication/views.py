"""
Authentication views.

Endpoints:
    POST /api/v1/auth/register/        - Create a user and its billing account
    GET  /api/v1/auth/referral-code/   - Check a referral code before signup
    POST /api/v1/auth/token/           - Obtain JWT pair (simplejwt)
    POST /api/v1/auth/token/refresh/   - Refresh access token (simplejwt)
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    ReferralCodeCheckSerializer,
    RegisteredAccountSerializer,
    RegisterSerializer,
)
from authentication.services import AccountRegistry

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """
    Register a user and provision the wallet.

    POST /api/v1/auth/register/

    Request body:
        {
            "email": "user@example.com",
            "password": "...",
            "referral_code": "A1B2C3"   # optional
        }
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        operation_id="register",
        summary="Register",
        tags=["Auth"],
        request=RegisterSerializer,
        responses={
            201: RegisteredAccountSerializer,
            400: OpenApiResponse(description="Email taken or invalid referral code"),
        },
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        result = AccountRegistry.register(
            email=data.pop("email"),
            password=data.pop("password"),
            referral_code=data.pop("referral_code", None) or None,
            **data,
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)

        return Response(
            RegisteredAccountSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )


class ReferralCodeView(APIView):
    """
    Check a referral code.

    GET /api/v1/auth/referral-code/?code=A1B2C3

    "valid" is False for the caller's own code.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="check_referral_code",
        summary="Check referral code",
        tags=["Auth"],
        parameters=[OpenApiParameter("code", str, required=True)],
    )
    def get(self, request):
        serializer = ReferralCodeCheckSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        code = serializer.validated_data["code"]

        user = request.user if request.user.is_authenticated else None
        return Response(
            {
                "exists": AccountRegistry.referral_code_exists(code),
                "valid": AccountRegistry.validate_referral_code(code, for_user=user),
            }
        )
