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

from felicity.views import participation as views_participation

urlpatterns = [
    path(
        "participations/register",
        views_participation.participation_register,
        name="participation_register",
    ),
    path(
        "participations/purchase",
        views_participation.participation_purchase,
        name="participation_purchase",
    ),
    path(
        "participations/mine",
        views_participation.participation_mine,
        name="participation_mine",
    ),
    path(
        "participations/<str:participation_id>/cancel",
        views_participation.participation_cancel,
        name="participation_cancel",
    ),
    path(
        "participations/<str:participation_id>/reject",
        views_participation.participation_reject,
        name="participation_reject",
    ),
    path(
        "participations/<str:participation_id>/payment",
        views_participation.participation_payment,
        name="participation_payment",
    ),
]
