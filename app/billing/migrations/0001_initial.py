import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


def timestamps():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
    ]


def uuid_pk():
    return (
        "id",
        models.UUIDField(
            default=uuid.uuid4,
            editable=False,
            help_text="Unique identifier for this record",
            primary_key=True,
            serialize=False,
        ),
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Location",
            fields=[
                uuid_pk(),
                *timestamps(),
                ("name", models.CharField(max_length=200)),
                ("wifi_name", models.CharField(help_text="SSID broadcast at this site", max_length=100)),
                ("username", models.CharField(blank=True, default="", max_length=100)),
                ("password", models.CharField(blank=True, default="", max_length=100)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "verbose_name": "Location",
                "verbose_name_plural": "Locations",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Plan",
            fields=[
                uuid_pk(),
                *timestamps(),
                ("name", models.CharField(max_length=100)),
                (
                    "duration_hours",
                    models.PositiveIntegerField(
                        help_text="Hours of access granted by one purchase",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("duration", models.CharField(blank=True, default="", max_length=50)),
                ("data_amount", models.CharField(blank=True, default="", max_length=50)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("3-hour", "3 Hours"),
                            ("daily", "Daily"),
                            ("weekly", "Weekly"),
                            ("monthly", "Monthly"),
                        ],
                        default="daily",
                        max_length=10,
                    ),
                ),
                ("popular", models.BooleanField(default=False)),
                ("is_unlimited", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "verbose_name": "Plan",
                "verbose_name_plural": "Plans",
                "ordering": ["price"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gt=0),
                        name="billing_plan_price_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(duration_hours__gt=0),
                        name="billing_plan_duration_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                uuid_pk(),
                *timestamps(),
                (
                    "balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Prepaid wallet balance",
                        max_digits=10,
                    ),
                ),
                (
                    "referral_code",
                    models.CharField(
                        help_text="Code other users enter at signup to be linked to this account",
                        max_length=12,
                        unique=True,
                    ),
                ),
                (
                    "role",
                    models.CharField(
                        choices=[("admin", "Admin"), ("user", "User")],
                        default="user",
                        help_text="Authorization role",
                        max_length=10,
                    ),
                ),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("first_name", models.CharField(blank=True, default="", max_length=150)),
                ("last_name", models.CharField(blank=True, default="", max_length=150)),
                (
                    "referred_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Account that referred this one",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="referrals",
                        to="billing.account",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        help_text="Identity this billing account belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="account",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(balance__gte=0),
                        name="billing_account_balance_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CredentialLease",
            fields=[
                uuid_pk(),
                *timestamps(),
                ("username", models.CharField(max_length=100)),
                ("password", models.CharField(max_length=100)),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("available", "Available"),
                            ("leased", "Leased"),
                            ("disabled", "Disabled"),
                        ],
                        db_index=True,
                        default="available",
                        help_text="Current state of the credential (managed by FSM)",
                        max_length=50,
                    ),
                ),
                ("assigned_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        help_text="Account currently holding this credential",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="leased_credentials",
                        to="billing.account",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credentials",
                        to="billing.location",
                    ),
                ),
                (
                    "plan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credentials",
                        to="billing.plan",
                    ),
                ),
            ],
            options={
                "verbose_name": "Credential",
                "verbose_name_plural": "Credentials",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["location", "plan", "status"],
                        name="billing_credential_pool_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("location", "plan", "username"),
                        name="billing_credential_unique_per_pool",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PurchaseRecord",
            fields=[
                uuid_pk(),
                *timestamps(),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Arbitrary structured data for extensibility",
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("plan_purchase", "Plan Purchase"),
                            ("wallet_topup", "Wallet Top-up"),
                            ("wallet_funding", "Wallet Funding"),
                        ],
                        db_index=True,
                        default="plan_purchase",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("success", "Success"),
                        ],
                        db_index=True,
                        default="completed",
                        max_length=20,
                    ),
                ),
                ("username", models.CharField(blank=True, default="", max_length=100)),
                ("password", models.CharField(blank=True, default="", max_length=100)),
                ("purchase_date", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("activation_date", models.DateTimeField(blank=True, null=True)),
                (
                    "payment_reference",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="External payment id (fundings only)",
                        max_length=255,
                        null=True,
                    ),
                ),
                ("payment_method", models.CharField(blank=True, max_length=50, null=True)),
                (
                    "idempotency_key",
                    models.CharField(
                        blank=True,
                        help_text="Client-supplied key that makes a purchase safe to retry",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_records",
                        to="billing.account",
                    ),
                ),
                (
                    "credential",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_records",
                        to="billing.credentiallease",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_records",
                        to="billing.location",
                    ),
                ),
                (
                    "plan",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_records",
                        to="billing.plan",
                    ),
                ),
            ],
            options={
                "verbose_name": "Purchase Record",
                "verbose_name_plural": "Purchase Records",
                "ordering": ["-purchase_date"],
                "indexes": [
                    models.Index(
                        fields=["account", "purchase_date"],
                        name="billing_record_acct_date_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="billing_purchase_record_amount_positive",
                    ),
                ],
            },
        ),
    ]
