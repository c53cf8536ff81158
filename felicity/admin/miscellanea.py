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

from felicity.admin.base import DefModelAdmin, EventFilter, reduced
from felicity.models.miscellanea import Email


@admin.register(Email)
class EmailAdmin(DefModelAdmin):
    list_display: ClassVar[tuple] = ("recipient", "subj", "body_red", "sent", "created")
    search_fields: ClassVar[tuple] = ("recipient", "subj")
    autocomplete_fields: ClassVar[list] = ["event"]
    list_filter = (EventFilter,)

    @staticmethod
    def body_red(instance: Email) -> str:
        return reduced(instance.body)
