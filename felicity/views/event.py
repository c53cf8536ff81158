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

import os

from django.conf import settings as conf_settings
from django.core.files.storage import default_storage
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET

from felicity.models.event import EventStatus
from felicity.services.analytics import build_event_analytics
from felicity.utils.auth import check_event_staff, is_event_staff, staff_required
from felicity.utils.event import get_event
from felicity.utils.exceptions import NotFoundError


@require_GET
@ensure_csrf_cookie
def event_detail(request: HttpRequest, event_id: str) -> JsonResponse:
    """Return an event with its form or catalogue; drafts are visible to their staff only."""
    event = get_event(event_id)

    if event.status == EventStatus.DRAFT:
        member = getattr(request.user, "member", None) if request.user.is_authenticated else None
        if not member or not is_event_staff(event, member):
            raise NotFoundError("Event not found")

    return JsonResponse({"event": event.show()})


def show_response_for_staff(response: dict) -> dict:
    js = dict(response)
    if js.get("file"):
        file_js = dict(js["file"])
        file_js["downloadUrl"] = default_storage.url(
            os.path.join(conf_settings.FELICITY_UPLOAD_DIR, file_js["filename"])
        )
        js["file"] = file_js
    return js


@require_GET
@staff_required
def event_participations(request: HttpRequest, event_id: str) -> JsonResponse:
    """List the participations of an event with the organizer analytics."""
    event = get_event(event_id)
    check_event_staff(event, request.member)

    participations = list(
        event.participations.select_related("member__user", "payment").order_by("-created")
    )

    participants = []
    for participation in participations:
        payment = participation.get_payment()
        participants.append(
            {
                "id": participation.uuid,
                "userId": participation.member.uuid,
                "status": participation.status,
                "eventType": participation.event_type,
                "ticketId": participation.ticket_id,
                "createdAt": participation.created,
                "updatedAt": participation.updated,
                "participant": participation.member.show(),
                "normalResponses": [
                    show_response_for_staff(response) for response in participation.normal_responses or []
                ],
                "merchPurchase": participation.merch_purchase,
                "payment": payment.show() if payment else None,
            }
        )

    return JsonResponse(
        {
            "event": event.show(),
            "analytics": build_event_analytics(event, participations, timezone.now()),
            "participants": participants,
        }
    )
