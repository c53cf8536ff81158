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

from typing import TYPE_CHECKING, ClassVar

from admin_auto_filters.filters import AutocompleteFilter
from import_export.admin import ImportExportModelAdmin

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from django.http import HttpRequest


class DefModelAdmin(ImportExportModelAdmin):
    """Base admin class with import/export and organizer filtering.

    Superusers and admin members see everything. Organizers only see the
    objects of the events they own, detected through an ``event`` or
    ``organizer`` field; models without one stay hidden to them.
    """

    ordering: ClassVar[list] = ["-updated"]

    def _get_event_lookup(self) -> str | None:
        """Detect how the model is linked to its organizer."""
        model_fields = {f.name for f in self.model._meta.get_fields()}  # noqa: SLF001

        if "organizer" in model_fields:
            return "organizer"
        if "event" in model_fields:
            return "event__organizer"
        if "participation" in model_fields:
            return "participation__event__organizer"
        return None

    @staticmethod
    def _get_member(request: HttpRequest):
        return getattr(request.user, "member", None)

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        qs = super().get_queryset(request)

        member = self._get_member(request)
        if request.user.is_superuser or (member and member.is_admin()):
            return qs

        lookup = self._get_event_lookup()
        if not member or not member.is_organizer() or not lookup:
            return qs.none()

        return qs.filter(**{lookup: member})

    def has_module_permission(self, request: HttpRequest) -> bool:
        member = self._get_member(request)
        if request.user.is_superuser or (member and member.is_admin()):
            return super().has_module_permission(request)

        if not member or not member.is_organizer() or not self._get_event_lookup():
            return False

        return super().has_module_permission(request)


def reduced(value: str | None) -> str:
    """Truncate string to maximum length with ellipsis."""
    max_length = 50

    if not value or len(value) < max_length:
        return value

    return value[:max_length] + "[...]"


class EventFilter(AutocompleteFilter):
    """Admin filter for Event autocomplete."""

    title = "Event"
    field_name = "event"


class MemberFilter(AutocompleteFilter):
    """Admin filter for Member autocomplete."""

    title = "Member"
    field_name = "member"


class OrganizerFilter(AutocompleteFilter):
    title = "Organizer"
    field_name = "organizer"
