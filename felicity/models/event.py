# LarpManager - https://larpmanager.com
# Copyright (C) 2025 Scanagatta Mauro
#
# This file is part of LarpManager and is dual-licensed:
#
# 1. Under the terms of the GNU Affero General Public License (AGPL) version 3,
#    as published by the Free Software Foundation. You may use, modify, and
#    distribute this file under those terms.
#
# 2. Under a commercial license, allowing use in closed-source or proprietary
#    environments without the obligations of the AGPL.
#
# If you have obtained this file under the AGPL, and you make it available over
# a network, you must also make the complete source code available under the same license.
#
# For more information or to purchase a commercial license, contact:
# commercial@larpmanager.com
#
# SPDX-License-Identifier: AGPL-3.0-or-later OR Proprietary

from __future__ import annotations

from decimal import Decimal
from typing import Any, ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q, UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from felicity.models.base import BaseModel, UuidMixin
from felicity.models.member import Member


class EventType(models.TextChoices):
    NORMAL = "NORMAL", _("Normal")
    MERCH = "MERCH", _("Merchandise")


class EventStatus(models.TextChoices):
    DRAFT = "DRAFT", _("Draft")
    PUBLISHED = "PUBLISHED", _("Published")
    CLOSED = "CLOSED", _("Closed")
    COMPLETED = "COMPLETED", _("Completed")


class DisplayStatus(models.TextChoices):
    DRAFT = "DRAFT", _("Draft")
    PUBLISHED = "PUBLISHED", _("Published")
    ONGOING = "ONGOING", _("Ongoing")
    CLOSED = "CLOSED", _("Closed")
    COMPLETED = "COMPLETED", _("Completed")


class FieldType(models.TextChoices):
    TEXT = "text", _("Text")
    TEXTAREA = "textarea", _("Long text")
    NUMBER = "number", _("Number")
    SELECT = "select", _("Single choice")
    CHECKBOX = "checkbox", _("Multiple choice")
    FILE = "file", _("File")


# Field types that require a list of options
OPTION_FIELD_TYPES = (FieldType.SELECT, FieldType.CHECKBOX)


class Event(UuidMixin, BaseModel):
    """Organizer-owned event, either a NORMAL registration or a MERCH catalogue."""

    organizer = models.ForeignKey(Member, on_delete=models.CASCADE, related_name="organized_events")

    name = models.CharField(max_length=200, verbose_name=_("Name"))

    description = models.TextField(blank=True, verbose_name=_("Description"))

    typ = models.CharField(max_length=10, choices=EventType.choices, default=EventType.NORMAL, verbose_name=_("Type"))

    status = models.CharField(
        max_length=10,
        choices=EventStatus.choices,
        default=EventStatus.DRAFT,
        db_index=True,
    )

    eligibility = models.CharField(
        max_length=100,
        default="all",
        blank=True,
        verbose_name=_("Eligibility"),
        help_text=_("Participant category allowed to register (all, iiit, non-iiit)"),
    )

    reg_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
        verbose_name=_("Registration fee"),
    )

    reg_deadline = models.DateTimeField(verbose_name=_("Registration deadline"))

    reg_limit = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Registration limit"),
        help_text=_("Maximum number of active participations"),
    )

    start_date = models.DateTimeField(verbose_name=_("Start date"))

    end_date = models.DateTimeField(verbose_name=_("End date"))

    is_form_locked = models.BooleanField(
        default=False,
        help_text=_("Set on the first registration, the form can no longer be changed"),
    )

    per_participant_limit = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Per participant limit"),
        help_text=_("Maximum quantity a participant can buy in a single order"),
    )

    total_stock = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        ordering: ClassVar[list] = ["-start_date"]
        constraints: ClassVar[list] = [
            models.CheckConstraint(condition=Q(reg_limit__gte=1), name="event_reg_limit_positive"),
        ]

    def is_normal(self) -> bool:
        return self.typ == EventType.NORMAL

    def is_merch(self) -> bool:
        return self.typ == EventType.MERCH

    def display_status(self, now=None) -> str:
        """Return the status shown to users, adding ONGOING while a published event is running.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            str: One of the DisplayStatus values
        """
        if now is None:
            now = timezone.now()
        if self.status == EventStatus.PUBLISHED and self.start_date <= now <= self.end_date:
            return DisplayStatus.ONGOING
        return self.status

    def can_register(self, now=None) -> bool:
        """Check if the registration window is currently open."""
        if now is None:
            now = timezone.now()
        if self.status != EventStatus.PUBLISHED:
            return False
        return now <= self.reg_deadline and now <= self.end_date

    def clean(self) -> None:
        """Validate dates, limits and the sticky COMPLETED status."""
        if self.reg_deadline and self.start_date and self.reg_deadline > self.start_date:
            raise ValidationError({"reg_deadline": _("Registration deadline must not be after the start date")})

        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError({"end_date": _("End date must be after the start date")})

        if self.reg_limit is not None and self.reg_limit < 1:
            raise ValidationError({"reg_limit": _("Registration limit must be at least 1")})

        if not self.pk:
            return

        previous = Event.all_objects.filter(pk=self.pk).values_list("status", "typ").first()
        if not previous:
            return

        previous_status, previous_type = previous
        if previous_status == EventStatus.COMPLETED and self.status != EventStatus.COMPLETED:
            raise ValidationError({"status": _("A completed event cannot change status")})

        # The other kind of configuration must stay empty
        if self.is_normal() and self.variants.exists():
            raise ValidationError({"typ": _("Normal events cannot have merchandise variants")})
        if self.is_merch() and self.form_fields.exists():
            raise ValidationError({"typ": _("Merchandise events cannot have form fields")})

        if self.is_form_locked and previous_type != self.typ:
            raise ValidationError({"typ": _("The type cannot change once participations exist")})

    def get_form_fields(self):
        return self.form_fields.order_by("order", "pk")

    def get_variants(self):
        return self.variants.order_by("pk")

    def show(self, now=None) -> dict[str, Any]:
        """Return the wire representation of the event, with its form or catalogue."""
        if now is None:
            now = timezone.now()

        js = {
            "id": self.uuid,
            "name": self.name,
            "description": self.description,
            "type": self.typ,
            "eligibility": self.eligibility,
            "regFee": self.reg_fee,
            "regDeadline": self.reg_deadline,
            "regLimit": self.reg_limit,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "organizerId": self.organizer.uuid,
            "status": self.status,
            "displayStatus": self.display_status(now),
            "canRegister": self.can_register(now),
            "createdAt": self.created,
            "updatedAt": self.updated,
            "normalForm": None,
            "merchConfig": None,
        }

        if self.is_normal():
            js["normalForm"] = {
                "fields": [field.show() for field in self.get_form_fields()],
                "isFormLocked": self.is_form_locked,
            }
        else:
            js["merchConfig"] = {
                "variants": [variant.show() for variant in self.get_variants()],
                "perParticipantLimit": self.per_participant_limit,
                "totalStock": self.total_stock,
            }

        return js

    def show_summary(self) -> dict[str, Any]:
        return {
            "id": self.uuid,
            "name": self.name,
            "type": self.typ,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


class FormField(BaseModel):
    """A single question of the registration form of a NORMAL event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="form_fields")

    key = models.CharField(max_length=80, verbose_name=_("Key"))

    label = models.CharField(max_length=200, verbose_name=_("Label"))

    typ = models.CharField(max_length=10, choices=FieldType.choices, default=FieldType.TEXT, verbose_name=_("Type"))

    required = models.BooleanField(default=False)

    options = models.JSONField(blank=True, null=True, help_text=_("List of options for choice fields"))

    order = models.IntegerField(default=0)

    class Meta:
        ordering: ClassVar[list] = ["order"]
        constraints: ClassVar[list] = [
            UniqueConstraint(
                fields=["event", "key", "deleted"],
                name="unique_form_field_key_with_optional",
            ),
            UniqueConstraint(
                fields=["event", "key"],
                condition=Q(deleted=None),
                name="unique_form_field_key_without_optional",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event} - {self.key}"

    def clean(self) -> None:
        """Options are required for choice fields and forbidden otherwise."""
        if self.typ in OPTION_FIELD_TYPES:
            if not self.options or not isinstance(self.options, list):
                raise ValidationError({"options": _("Choice fields need at least one option")})
            if any(not isinstance(option, str) or not option.strip() for option in self.options):
                raise ValidationError({"options": _("Options must be non-empty strings")})
        elif self.options:
            raise ValidationError({"options": _("Only choice fields can have options")})

        if self.event_id and self.event.is_form_locked:
            raise ValidationError(_("The form is locked since registrations have been received"))

        duplicates = FormField.objects.filter(event_id=self.event_id, key=self.key).exclude(pk=self.pk)
        if duplicates.exists():
            raise ValidationError({"key": _("Key already used in this form")})

    def show(self) -> dict[str, Any]:
        js = {
            "key": self.key,
            "label": self.label,
            "type": self.typ,
            "required": self.required,
            "order": self.order,
        }
        if self.typ in OPTION_FIELD_TYPES:
            js["options"] = self.options
        return js


class MerchVariant(BaseModel):
    """One purchasable SKU of a MERCH event, with its own stock."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="variants")

    sku = models.CharField(max_length=80, verbose_name=_("SKU"))

    label = models.CharField(max_length=200, blank=True, verbose_name=_("Label"))

    stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])

    price_delta = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        verbose_name=_("Price delta"),
        help_text=_("Optional - Added to the event fee for this variant"),
    )

    class Meta:
        ordering: ClassVar[list] = ["pk"]
        constraints: ClassVar[list] = [
            models.CheckConstraint(condition=Q(stock__gte=0), name="merch_variant_stock_non_negative"),
            UniqueConstraint(
                fields=["event", "sku", "deleted"],
                name="unique_merch_variant_sku_with_optional",
            ),
            UniqueConstraint(
                fields=["event", "sku"],
                condition=Q(deleted=None),
                name="unique_merch_variant_sku_without_optional",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event} - {self.sku}"

    def get_price_delta(self) -> Decimal:
        return self.price_delta or Decimal(0)

    def show(self) -> dict[str, Any]:
        return {
            "sku": self.sku,
            "label": self.label,
            "stock": self.stock,
            "priceDelta": self.price_delta,
        }
