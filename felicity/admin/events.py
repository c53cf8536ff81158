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

from typing import ClassVar

from django.contrib import admin

from felicity.admin.base import DefModelAdmin, EventFilter, OrganizerFilter
from felicity.models.event import Event, FormField, MerchVariant


class FormFieldInline(admin.TabularInline):
    """Inline admin for the registration form of a NORMAL event."""

    model = FormField
    fields = ("order", "key", "label", "typ", "required", "options")
    ordering = ("order",)


class MerchVariantInline(admin.TabularInline):
    """Inline admin for the catalogue of a MERCH event."""

    model = MerchVariant
    fields = ("sku", "label", "stock", "price_delta")


@admin.register(Event)
class EventAdmin(DefModelAdmin):
    """Admin interface for Event model."""

    list_display: ClassVar[tuple] = (
        "name",
        "typ",
        "status",
        "start_date",
        "reg_deadline",
        "reg_limit",
        "total_stock",
        "is_form_locked",
        "uuid",
    )
    search_fields: ClassVar[tuple] = ("name", "uuid")
    autocomplete_fields: ClassVar[list] = ["organizer"]
    list_filter = (OrganizerFilter, "typ", "status")
    readonly_fields: ClassVar[tuple] = ("total_stock",)
    inlines: ClassVar[list] = [FormFieldInline, MerchVariantInline]


@admin.register(FormField)
class FormFieldAdmin(DefModelAdmin):
    list_display: ClassVar[tuple] = ("event", "order", "key", "typ", "required")
    search_fields: ClassVar[tuple] = ("key", "label")
    autocomplete_fields: ClassVar[list] = ["event"]
    list_filter = (EventFilter, "typ")


@admin.register(MerchVariant)
class MerchVariantAdmin(DefModelAdmin):
    list_display: ClassVar[tuple] = ("event", "sku", "label", "stock", "price_delta")
    search_fields: ClassVar[tuple] = ("sku", "label")
    autocomplete_fields: ClassVar[list] = ["event"]
    list_filter = (EventFilter,)
