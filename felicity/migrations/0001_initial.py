import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

EVENT_TYPES = [("NORMAL", "Normal"), ("MERCH", "Merchandise")]


def safedelete_fields():
    return [
        ("deleted", models.DateTimeField(db_index=True, editable=False, null=True)),
        ("deleted_by_cascade", models.BooleanField(default=False, editable=False)),
    ]


def timestamp_fields():
    return [
        ("created", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ("updated", models.DateTimeField(auto_now=True)),
    ]


def uuid_field():
    return ("uuid", models.CharField(db_index=True, editable=False, max_length=12, unique=True))


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Member",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                uuid_field(),
                *timestamp_fields(),
                ("name", models.CharField(max_length=100, verbose_name="Name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="Email")),
                (
                    "role",
                    models.CharField(
                        choices=[("participant", "Participant"), ("organizer", "Organizer"), ("admin", "Admin")],
                        db_index=True,
                        default="participant",
                        max_length=15,
                    ),
                ),
                (
                    "participant_type",
                    models.CharField(
                        blank=True,
                        choices=[("iiit", "IIIT"), ("non-iiit", "Non IIIT")],
                        help_text="Category used to match the eligibility of events",
                        max_length=10,
                        null=True,
                        verbose_name="Participant type",
                    ),
                ),
                ("organization", models.CharField(blank=True, max_length=150, verbose_name="Organization")),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="member",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-updated"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                uuid_field(),
                *timestamp_fields(),
                ("name", models.CharField(max_length=200, verbose_name="Name")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("typ", models.CharField(choices=EVENT_TYPES, default="NORMAL", max_length=10, verbose_name="Type")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("PUBLISHED", "Published"),
                            ("CLOSED", "Closed"),
                            ("COMPLETED", "Completed"),
                        ],
                        db_index=True,
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                (
                    "eligibility",
                    models.CharField(
                        blank=True,
                        default="all",
                        help_text="Participant category allowed to register (all, iiit, non-iiit)",
                        max_length=100,
                        verbose_name="Eligibility",
                    ),
                ),
                (
                    "reg_fee",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="Registration fee",
                    ),
                ),
                ("reg_deadline", models.DateTimeField(verbose_name="Registration deadline")),
                (
                    "reg_limit",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Maximum number of active participations",
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Registration limit",
                    ),
                ),
                ("start_date", models.DateTimeField(verbose_name="Start date")),
                ("end_date", models.DateTimeField(verbose_name="End date")),
                (
                    "is_form_locked",
                    models.BooleanField(
                        default=False,
                        help_text="Set on the first registration, the form can no longer be changed",
                    ),
                ),
                (
                    "per_participant_limit",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Maximum quantity a participant can buy in a single order",
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Per participant limit",
                    ),
                ),
                ("total_stock", models.PositiveIntegerField(default=0, editable=False)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_events",
                        to="felicity.member",
                    ),
                ),
            ],
            options={
                "ordering": ["-start_date"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("reg_limit__gte", 1)),
                        name="event_reg_limit_positive",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="FormField",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                *timestamp_fields(),
                ("key", models.CharField(max_length=80, verbose_name="Key")),
                ("label", models.CharField(max_length=200, verbose_name="Label")),
                (
                    "typ",
                    models.CharField(
                        choices=[
                            ("text", "Text"),
                            ("textarea", "Long text"),
                            ("number", "Number"),
                            ("select", "Single choice"),
                            ("checkbox", "Multiple choice"),
                            ("file", "File"),
                        ],
                        default="text",
                        max_length=10,
                        verbose_name="Type",
                    ),
                ),
                ("required", models.BooleanField(default=False)),
                (
                    "options",
                    models.JSONField(blank=True, help_text="List of options for choice fields", null=True),
                ),
                ("order", models.IntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="form_fields",
                        to="felicity.event",
                    ),
                ),
            ],
            options={
                "ordering": ["order"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "key", "deleted"),
                        name="unique_form_field_key_with_optional",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("deleted", None)),
                        fields=("event", "key"),
                        name="unique_form_field_key_without_optional",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MerchVariant",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                *timestamp_fields(),
                ("sku", models.CharField(max_length=80, verbose_name="SKU")),
                ("label", models.CharField(blank=True, max_length=200, verbose_name="Label")),
                (
                    "stock",
                    models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)]),
                ),
                (
                    "price_delta",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Optional - Added to the event fee for this variant",
                        max_digits=10,
                        null=True,
                        verbose_name="Price delta",
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="variants",
                        to="felicity.event",
                    ),
                ),
            ],
            options={
                "ordering": ["pk"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock__gte", 0)),
                        name="merch_variant_stock_non_negative",
                    ),
                    models.UniqueConstraint(
                        fields=("event", "sku", "deleted"),
                        name="unique_merch_variant_sku_with_optional",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("deleted", None)),
                        fields=("event", "sku"),
                        name="unique_merch_variant_sku_without_optional",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Participation",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                uuid_field(),
                *timestamp_fields(),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("event_type", models.CharField(choices=EVENT_TYPES, max_length=10)),
                ("ticket_id", models.CharField(blank=True, db_index=True, max_length=40, null=True)),
                ("normal_responses", models.JSONField(blank=True, null=True)),
                ("merch_purchase", models.JSONField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participations",
                        to="felicity.event",
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participations",
                        to="felicity.member",
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("deleted", None), ("status__in", ("pending", "confirmed"))),
                        fields=("event", "member"),
                        name="unique_active_participation",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("ticket_id__isnull", True), ("status", "confirmed"), _connector="OR"),
                        name="participation_ticket_requires_confirmed",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                uuid_field(),
                *timestamp_fields(),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("upi", "UPI"),
                            ("bank_transfer", "Bank transfer"),
                            ("cash", "Cash"),
                            ("card", "Card"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("proof_url", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                (
                    "decided_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payment_decisions",
                        to="felicity.member",
                    ),
                ),
                (
                    "participation",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment",
                        to="felicity.participation",
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ticket_id", models.CharField(max_length=40, unique=True)),
                ("event_type", models.CharField(choices=EVENT_TYPES, max_length=10)),
                ("qr_payload", models.TextField()),
                ("created", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tickets",
                        to="felicity.event",
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tickets",
                        to="felicity.member",
                    ),
                ),
                (
                    "participation",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ticket",
                        to="felicity.participation",
                    ),
                ),
            ],
            options={
                "ordering": ["-created"],
            },
        ),
        migrations.CreateModel(
            name="Email",
            fields=[
                ("id", models.AutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *safedelete_fields(),
                *timestamp_fields(),
                ("recipient", models.CharField(max_length=170)),
                ("subj", models.CharField(max_length=500)),
                ("body", models.TextField()),
                ("reply_to", models.CharField(blank=True, max_length=170, null=True)),
                ("sent", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        to="felicity.event",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated"],
                "abstract": False,
            },
        ),
    ]
