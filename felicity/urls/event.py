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

from django.urls import path

from felicity.views import event as views_event
from felicity.views import ticket as views_ticket

urlpatterns = [
    path(
        "events/<str:event_id>",
        views_event.event_detail,
        name="event_detail",
    ),
    path(
        "events/<str:event_id>/participations",
        views_event.event_participations,
        name="event_participations",
    ),
    path(
        "tickets/verify",
        views_ticket.ticket_verify,
        name="ticket_verify",
    ),
    path(
        "tickets/<str:ticket_id>",
        views_ticket.ticket_detail,
        name="ticket_detail",
    ),
]
