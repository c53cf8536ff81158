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

import hmac
import json
import logging
import secrets
from datetime import datetime
from datetime import timezone as dt_timezone
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from felicity.models.participation import Participation, ParticipationStatus, Ticket
from felicity.models.utils import to_base36
from felicity.utils.exceptions import ConflictError

logger = logging.getLogger(__name__)

TICKET_PREFIX = "TKT"

TICKET_ID_RETRY_LIMIT = 5


def generate_ticket_id(now: datetime) -> str:
    """Build a ticket id from the issue time in milliseconds and a random suffix.

    Example: TKT-LZ3K9Q2A-1F0C9B7E
    """
    millis = int(now.timestamp() * 1000)
    return f"{TICKET_PREFIX}-{to_base36(millis)}-{secrets.token_hex(4).upper()}"


def format_issued_at(issued_at: datetime) -> str:
    """Format the issue time as UTC ISO 8601 with milliseconds."""
    if timezone.is_naive(issued_at):
        issued_at = timezone.make_aware(issued_at)
    issued_at = issued_at.astimezone(dt_timezone.utc)
    return issued_at.strftime("%Y-%m-%dT%H:%M:%S.") + f"{issued_at.microsecond // 1000:03d}Z"


def build_qr_payload(ticket_id: str, event_id: str, user_id: str, participation_id: str, issued_at: datetime) -> str:
    """Encode the identity of a ticket in its canonical form, keys in fixed order."""
    return json.dumps(
        {
            "ticketId": ticket_id,
            "eventId": event_id,
            "userId": user_id,
            "participationId": participation_id,
            "issuedAt": format_issued_at(issued_at),
        },
        separators=(",", ":"),
    )


def decode_qr_payload(qr_payload: str) -> dict[str, Any] | None:
    """Return the payload fields, or None if the text is not a payload."""
    try:
        decoded = json.loads(qr_payload)
    except (TypeError, ValueError):
        return None
    if not isinstance(decoded, dict):
        return None
    return decoded


def expected_qr_payload(ticket: Ticket) -> str:
    return build_qr_payload(
        ticket.ticket_id,
        ticket.event.uuid,
        ticket.member.uuid,
        ticket.participation.uuid,
        ticket.created,
    )


def verify_qr_payload(ticket: Ticket, qr_payload: str) -> bool:
    """Check a scanned payload by re-deriving it from the stored ticket."""
    return hmac.compare_digest(expected_qr_payload(ticket).encode(), (qr_payload or "").encode())


def issue_ticket(participation: Participation, now: datetime | None = None) -> Ticket:
    """Issue the ticket of a participation that is being confirmed.

    Confirms the participation and links the ticket id to it. Must run inside
    the transaction of the confirmation; the one to one relation guarantees a
    single ticket per participation.

    Args:
        participation: Participation to confirm
        now: Issue time, defaults to the current time

    Returns:
        Ticket: The created ticket

    Raises:
        ConflictError: If the participation already has a ticket
    """
    if now is None:
        now = timezone.now()

    if Ticket.objects.filter(participation=participation).exists():
        raise ConflictError("Ticket already issued for this participation")

    for _try in range(TICKET_ID_RETRY_LIMIT):
        ticket_id = generate_ticket_id(now)
        if not Ticket.objects.filter(ticket_id=ticket_id).exists():
            break

    ticket = Ticket(
        ticket_id=ticket_id,
        event=participation.event,
        member=participation.member,
        participation=participation,
        event_type=participation.event_type,
        qr_payload=build_qr_payload(
            ticket_id,
            participation.event.uuid,
            participation.member.uuid,
            participation.uuid,
            now,
        ),
        created=now,
    )

    try:
        with transaction.atomic():
            ticket.save()
    except IntegrityError as err:
        raise ConflictError("Ticket already issued for this participation") from err

    participation.status = ParticipationStatus.CONFIRMED
    participation.ticket_id = ticket.ticket_id
    participation.save()

    logger.info("Issued ticket %s for participation %s", ticket.ticket_id, participation.uuid)
    return ticket
