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

from datetime import timedelta
from decimal import Decimal
from typing import Any

from felicity.models.event import Event, EventType
from felicity.models.participation import Participation, ParticipationStatus
from felicity.services.inventory import get_purchase_total

STATUS_COUNTERS = {
    ParticipationStatus.CONFIRMED: "confirmedCount",
    ParticipationStatus.PENDING: "pendingCount",
    ParticipationStatus.CANCELLED: "cancelledCount",
    ParticipationStatus.REJECTED: "rejectedCount",
}


def build_event_analytics(event: Event, participations: list[Participation], now) -> dict[str, Any]:
    """Summarize the participations of an event for its organizer.

    Revenue is estimated on confirmed participations only: the frozen order
    total for MERCH, the current fee for NORMAL.

    Args:
        event: The event
        participations: Every participation of the event
        now: Reference time for the last 24 hours window

    Returns:
        dict: Counters and estimated revenue
    """
    since = now - timedelta(hours=24)
    summary = {
        "totalParticipations": len(participations),
        "activeParticipations": 0,
        "confirmedCount": 0,
        "pendingCount": 0,
        "cancelledCount": 0,
        "rejectedCount": 0,
        "normalCount": 0,
        "merchCount": 0,
        "registrations24h": 0,
        "estimatedRevenue": Decimal(0),
    }

    for participation in participations:
        event_type = participation.event_type or event.typ
        if event_type == EventType.MERCH:
            summary["merchCount"] += 1
        else:
            summary["normalCount"] += 1

        summary[STATUS_COUNTERS[participation.status]] += 1

        if participation.status == ParticipationStatus.CONFIRMED:
            if event_type == EventType.MERCH:
                summary["estimatedRevenue"] += get_purchase_total(participation.merch_purchase)
            else:
                summary["estimatedRevenue"] += event.reg_fee

        if participation.is_active():
            summary["activeParticipations"] += 1
            if participation.created >= since:
                summary["registrations24h"] += 1

    return summary
