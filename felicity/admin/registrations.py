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

from admin_auto_filters.filters import AutocompleteFilter
from django.contrib import admin
from import_export import fields, resources

from felicity.admin.base import DefModelAdmin, EventFilter, MemberFilter
from felicity.models.accounting import Payment
from felicity.models.participation import Participation, Ticket


class ParticipationFilter(AutocompleteFilter):
    """Admin filter for Participation autocomplete."""

    title = "Participation"
    field_name = "participation"


class ParticipationResource(resources.ModelResource):
    """Export of participations, with public ids in place of keys."""

    event = fields.Field(attribute="event__uuid", column_name="event")

    member = fields.Field(attribute="member__uuid", column_name="member")

    member_name = fields.Field(attribute="member__name", column_name="name")

    class Meta:
        model = Participation
        fields = ("uuid", "event", "member", "member_name", "status", "event_type", "ticket_id", "created")
        export_order = ("uuid", "event", "member", "member_name", "status", "event_type", "ticket_id", "created")


@admin.register(Participation)
class ParticipationAdmin(DefModelAdmin):
    """Admin interface for Participation model.

    Status changes go through the payment and cancellation flows, so the admin only shows them.
    """

    resource_classes: ClassVar[list] = [ParticipationResource]
    list_display: ClassVar[tuple] = ("id", "event", "member", "status", "event_type", "ticket_id", "created", "uuid")
    search_fields: ClassVar[tuple] = ("uuid", "ticket_id", "member__name")
    list_filter = (EventFilter, MemberFilter, "status", "event_type")
    readonly_fields: ClassVar[tuple] = (
        "event",
        "member",
        "status",
        "ticket_id",
        "event_type",
        "normal_responses",
        "merch_purchase",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(DefModelAdmin):
    list_display: ClassVar[tuple] = ("id", "participation", "method", "amount", "status", "decided_by", "decided_at")
    search_fields: ClassVar[tuple] = ("uuid", "participation__uuid")
    list_filter = (ParticipationFilter, "status", "method")
    readonly_fields: ClassVar[tuple] = ("participation", "amount", "status", "decided_by", "decided_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Ticket)
class TicketAdmin(DefModelAdmin):
    """Tickets are read only, they are issued by the confirmation flow."""

    ordering: ClassVar[list] = ["-created"]
    list_display: ClassVar[tuple] = ("ticket_id", "event", "member", "event_type", "created")
    search_fields: ClassVar[tuple] = ("ticket_id",)
    list_filter = (EventFilter, MemberFilter, "event_type")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
