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

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from felicity.forms.registration import TicketVerifyForm
from felicity.models.participation import Ticket
from felicity.services.ticket import decode_qr_payload, verify_qr_payload
from felicity.utils.auth import check_event_staff, is_event_staff, member_required, staff_required
from felicity.utils.exceptions import NotFoundError, PermissionError
from felicity.views.base import read_request_data
from felicity.views.participation import get_valid_form


def get_ticket(ticket_id: str) -> Ticket:
    try:
        return Ticket.objects.select_related("event", "event__organizer", "member__user", "participation").get(
            ticket_id=ticket_id.strip()
        )
    except Ticket.DoesNotExist as err:
        raise NotFoundError("Ticket not found") from err


@require_GET
@member_required
def ticket_detail(request: HttpRequest, ticket_id: str) -> JsonResponse:
    """Return a ticket to its holder, to the event organizer or to an admin."""
    ticket = get_ticket(ticket_id)
    event = ticket.event

    if ticket.member_id != request.member.pk and not is_event_staff(event, request.member):
        raise PermissionError("Forbidden")

    return JsonResponse(
        {
            "ticket": {
                "id": ticket.ticket_id,
                "qrPayload": ticket.qr_payload,
                "eventType": ticket.event_type,
                "createdAt": ticket.created,
                "participationId": ticket.participation.uuid,
                "participationStatus": ticket.participation.status,
                "event": {
                    "id": event.uuid,
                    "name": event.name,
                    "type": event.typ,
                    "status": event.status,
                    "startDate": event.start_date,
                    "endDate": event.end_date,
                    "organizerId": event.organizer.uuid,
                },
                "participant": {
                    "id": ticket.member.uuid,
                    "name": ticket.member.name,
                    "email": ticket.member.get_email(),
                },
            }
        }
    )


@require_POST
@staff_required
def ticket_verify(request: HttpRequest) -> JsonResponse:
    """Check a scanned QR payload against the stored ticket.

    A ticket is valid only when the payload matches and its participation is
    still confirmed.
    """
    cleaned = get_valid_form(TicketVerifyForm, read_request_data(request))

    decoded = decode_qr_payload(cleaned["qrPayload"])
    ticket_id = cleaned["ticketId"] or (decoded or {}).get("ticketId", "")
    ticket = get_ticket(ticket_id)
    check_event_staff(ticket.event, request.member)

    matches = verify_qr_payload(ticket, cleaned["qrPayload"])
    participation = ticket.participation
    return JsonResponse(
        {
            "valid": matches and participation.ticket_id == ticket.ticket_id,
            "payloadMatches": matches,
            "ticketId": ticket.ticket_id,
            "participationId": participation.uuid,
            "participationStatus": participation.status,
            "participant": ticket.member.show(),
        }
    )
