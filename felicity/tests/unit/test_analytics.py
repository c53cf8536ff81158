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

from datetime import datetime, timedelta
from decimal import Decimal

from felicity.models.event import Event, EventType
from felicity.models.participation import Participation, ParticipationStatus
from felicity.services.analytics import build_event_analytics

NOW = datetime(2024, 3, 10, 12, 0)


def participation(status, event_type=EventType.NORMAL, age=timedelta(hours=1), merch_purchase=None):
    return Participation(status=status, event_type=event_type, created=NOW - age, merch_purchase=merch_purchase)


class TestEventAnalytics:
    """Test the organizer summary of an event"""

    def test_normal_event_counters(self):
        event = Event(typ=EventType.NORMAL, reg_fee=Decimal("100.00"))
        participations = [
            participation(ParticipationStatus.CONFIRMED),
            participation(ParticipationStatus.CONFIRMED, age=timedelta(days=3)),
            participation(ParticipationStatus.PENDING),
            participation(ParticipationStatus.CANCELLED),
            participation(ParticipationStatus.REJECTED, age=timedelta(days=2)),
        ]

        summary = build_event_analytics(event, participations, NOW)

        assert summary == {
            "totalParticipations": 5,
            "activeParticipations": 3,
            "confirmedCount": 2,
            "pendingCount": 1,
            "cancelledCount": 1,
            "rejectedCount": 1,
            "normalCount": 5,
            "merchCount": 0,
            "registrations24h": 2,
            "estimatedRevenue": Decimal("200.00"),
        }

    def test_merch_revenue_uses_frozen_totals(self):
        event = Event(typ=EventType.MERCH, reg_fee=Decimal("999.00"))
        participations = [
            participation(ParticipationStatus.CONFIRMED, EventType.MERCH, merch_purchase={"totalAmount": "600.00"}),
            participation(ParticipationStatus.CONFIRMED, EventType.MERCH, merch_purchase={"totalAmount": "150.50"}),
            participation(ParticipationStatus.PENDING, EventType.MERCH, merch_purchase={"totalAmount": "300.00"}),
        ]

        summary = build_event_analytics(event, participations, NOW)

        assert summary["merchCount"] == 3
        assert summary["estimatedRevenue"] == Decimal("750.50")

    def test_empty_event(self):
        summary = build_event_analytics(Event(typ=EventType.NORMAL, reg_fee=Decimal(0)), [], NOW)

        assert summary["totalParticipations"] == 0
        assert summary["estimatedRevenue"] == Decimal(0)
