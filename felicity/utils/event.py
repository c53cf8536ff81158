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

import logging

from django.utils import timezone

from felicity.models.event import Event, EventStatus
from felicity.models.member import Member
from felicity.models.participation import Participation
from felicity.utils.eligibility import is_eligible
from felicity.utils.exceptions import ConflictError, NotFoundError, PermissionError, ValidationError

logger = logging.getLogger(__name__)


def get_event(event_uuid: str, lock: bool = False) -> Event:
    """Load an event by its public id.

    Args:
        event_uuid: Public identifier of the event
        lock: Lock the event row until the end of the current transaction

    Raises:
        NotFoundError: If no event matches
    """
    queryset = Event.objects.select_related("organizer")
    if lock:
        queryset = queryset.select_for_update(of=("self",))
    try:
        return queryset.get(uuid=event_uuid)
    except Event.DoesNotExist as err:
        raise NotFoundError("Event not found") from err


def check_participation_window(event: Event, now=None) -> None:
    """Reject participation unless the event is published and still open."""
    if now is None:
        now = timezone.now()

    if event.status != EventStatus.PUBLISHED:
        raise ValidationError("Event is not open for participation")

    if now > event.reg_deadline:
        raise ValidationError("Registration deadline has passed")

    if now > event.end_date:
        raise ValidationError("Event has already ended")


def check_existing_participation(event: Event, member: Member) -> None:
    if Participation.objects.active().filter(event=event, member=member).exists():
        raise ConflictError("You already have an active participation for this event")


def check_capacity(event: Event) -> None:
    """Reject when the active participations already fill the registration limit."""
    active_count = Participation.objects.active().filter(event=event).count()
    if active_count >= event.reg_limit:
        logger.info("Event %s is full (%s/%s)", event.uuid, active_count, event.reg_limit)
        raise ConflictError("Registration limit reached")


def check_eligibility(event: Event, member: Member) -> None:
    if not is_eligible(event.eligibility, member.participant_type):
        raise PermissionError("You are not eligible for this event")


def check_participation_gates(event: Event, member: Member, now=None) -> None:
    """Run the window, duplicate, capacity and eligibility checks in order.

    Must run inside the transaction that holds the event row lock, so that
    the count and the following insert are serialised per event.
    """
    check_participation_window(event, now)
    check_existing_participation(event, member)
    check_capacity(event)
    check_eligibility(event, member)
