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

from felicity.models.accounting import Payment, PaymentMethod, PaymentStatus
from felicity.models.event import DisplayStatus, Event, EventStatus, EventType, FieldType, FormField, MerchVariant
from felicity.models.member import Member, MemberRole, ParticipantType
from felicity.models.miscellanea import Email
from felicity.models.participation import Participation, ParticipationStatus, Ticket

__all__ = [
    "DisplayStatus",
    "Email",
    "Event",
    "EventStatus",
    "EventType",
    "FieldType",
    "FormField",
    "Member",
    "MemberRole",
    "MerchVariant",
    "ParticipantType",
    "Participation",
    "ParticipationStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Ticket",
]
