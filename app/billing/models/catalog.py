"""
Catalog models: what can be bought, and where.

Plans and locations are maintained by operators through the Django admin.
The purchase path only reads them.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from billing.state_machines import PlanType
from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin


class Plan(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchasable block of hotspot access time.

    Fields:
        name: Display name ("Daily 1GB")
        duration_hours: Access window granted by one purchase
        price: Amount debited from the wallet
        duration: Display text for the window ("24 Hours")
        data_amount: Display text for the data cap ("1GB")
        type: Catalog grouping
        popular: Highlighted in listings
        is_unlimited: No data cap
        is_active: Offered to users
    """

    name = models.CharField(max_length=100)
    duration_hours = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Hours of access granted by one purchase",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    duration = models.CharField(max_length=50, blank=True, default="")
    data_amount = models.CharField(max_length=50, blank=True, default="")
    type = models.CharField(max_length=10, choices=PlanType.choices, default=PlanType.DAILY)
    popular = models.BooleanField(default=False)
    is_unlimited = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["price"]
        verbose_name = "Plan"
        verbose_name_plural = "Plans"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="billing_plan_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(duration_hours__gt=0),
                name="billing_plan_duration_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.price})"


class Location(UUIDPrimaryKeyMixin, BaseModel):
    """
    A hotspot site with its own pool of credentials per plan.

    username/password are the router's admin login, not buyer credentials.
    """

    name = models.CharField(max_length=200)
    wifi_name = models.CharField(max_length=100, help_text="SSID broadcast at this site")
    username = models.CharField(max_length=100, blank=True, default="")
    password = models.CharField(max_length=100, blank=True, default="")
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Location"
        verbose_name_plural = "Locations"

    def __str__(self) -> str:
        return self.name
