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

from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from felicity.accounting.payment import resolve_payment
from felicity.forms.registration import (
    PaymentDecisionForm,
    PurchaseForm,
    RegisterForm,
    first_form_error,
    read_answers,
)
from felicity.models.participation import Participation
from felicity.services.participation import (
    cancel_participation,
    purchase_merch,
    register_participation,
    reject_participation,
)
from felicity.utils.auth import participant_required, staff_required
from felicity.utils.exceptions import ValidationError
from felicity.utils.upload import cleanup_uploads, store_uploads
from felicity.views.base import read_json_body, read_request_data

logger = logging.getLogger(__name__)

PAYMENT_PROOF_FIELD = "paymentProof"


def split_payment_proof(uploads):
    """Separate the payment proof from the form uploads.

    Returns:
        tuple: The proof upload (or None) and the remaining uploads
    """
    proofs = [upload for upload in uploads if upload.field == PAYMENT_PROOF_FIELD]
    others = [upload for upload in uploads if upload.field != PAYMENT_PROOF_FIELD]
    if len(proofs) > 1:
        raise ValidationError("Only one payment proof is allowed")
    return (proofs[0] if proofs else None), others


def get_valid_form(form_class, data):
    form = form_class(data)
    if not form.is_valid():
        raise ValidationError(first_form_error(form))
    return form.cleaned_data


def participation_response(participation, ticket=None, payment=None) -> dict:
    js = {"participation": participation.show()}
    if ticket:
        js["ticket"] = ticket.show()
    if payment:
        js["payment"] = payment.show()
    return js


@require_POST
@participant_required
def participation_register(request: HttpRequest) -> JsonResponse:
    """Register the participant to a NORMAL event, with form answers and optional files.

    Stored uploads are removed whenever the registration is rejected.
    """
    uploads = store_uploads(request.FILES)
    proof = None
    try:
        data = read_request_data(request)
        cleaned = get_valid_form(RegisterForm, data)
        answers = read_answers(data.get("answers"))
        proof, form_uploads = split_payment_proof(uploads)

        participation, ticket, payment = register_participation(
            request.member,
            cleaned["eventId"],
            answers,
            form_uploads,
            payment_method=cleaned["paymentMethod"],
            proof_url=proof.path if proof else cleaned["proofUrl"],
        )
    except Exception:
        cleanup_uploads(uploads)
        raise

    # A proof sent for a free event is not kept
    if proof and not payment:
        cleanup_uploads([proof])

    return JsonResponse(participation_response(participation, ticket, payment), status=201)


@require_POST
@participant_required
def participation_purchase(request: HttpRequest) -> JsonResponse:
    """Order a variant of a MERCH event, pending until the payment is approved."""
    uploads = store_uploads(request.FILES)
    try:
        data = read_request_data(request)
        cleaned = get_valid_form(PurchaseForm, data)
        proof, others = split_payment_proof(uploads)
        if others:
            raise ValidationError(f"Unknown file field: {others[0].field}")

        participation, payment = purchase_merch(
            request.member,
            cleaned["eventId"],
            cleaned["sku"],
            cleaned["quantity"],
            payment_method=cleaned["paymentMethod"],
            proof_url=proof.path if proof else cleaned["proofUrl"],
        )
    except Exception:
        cleanup_uploads(uploads)
        raise

    return JsonResponse(participation_response(participation, payment=payment), status=201)


@require_http_methods(["PATCH"])
@participant_required
def participation_cancel(request: HttpRequest, participation_id: str) -> JsonResponse:
    participation, payment = cancel_participation(request.member, participation_id)
    return JsonResponse(participation_response(participation, payment=payment))


@require_http_methods(["PATCH"])
@staff_required
def participation_reject(request: HttpRequest, participation_id: str) -> JsonResponse:
    participation, payment = reject_participation(request.member, participation_id)
    return JsonResponse(participation_response(participation, payment=payment))


@require_http_methods(["PATCH"])
@staff_required
def participation_payment(request: HttpRequest, participation_id: str) -> JsonResponse:
    """Approve or reject the pending payment of a participation.

    Body: ``{"status": "approved" | "rejected"}``
    """
    cleaned = get_valid_form(PaymentDecisionForm, read_json_body(request))
    participation, payment, ticket = resolve_payment(participation_id, request.member, cleaned["status"])
    return JsonResponse(participation_response(participation, ticket, payment))


@require_GET
@participant_required
def participation_mine(request: HttpRequest) -> JsonResponse:
    """List the participant's own participations, newest first."""
    now = timezone.now()
    participations = (
        Participation.objects.filter(member=request.member)
        .select_related("event", "event__organizer", "member", "payment")
        .order_by("-created")
    )

    results = []
    for participation in participations:
        js = participation.show()
        js["event"] = participation.event.show_summary()
        js["event"]["displayStatus"] = participation.event.display_status(now)
        payment = participation.get_payment()
        js["paymentStatus"] = payment.status if payment else None
        results.append(js)

    return JsonResponse({"participations": results})
