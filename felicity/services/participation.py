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

"""Participation lifecycle: creation, cancellation and staff rejection.

Statuses move from pending or confirmed to cancelled or rejected, never back.
Every step runs in one transaction holding a row lock, either on the event
(creation, to serialise the capacity count with the insert) or on the
participation (every later transition).
"""

import logging
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from felicity.accounting.payment import (
    check_payment_proof,
    create_pending_payment,
    get_locked_participation,
    get_locked_payment,
    reject_pending_payment,
)
from felicity.forms.registration import validate_normal_responses
from felicity.mail.registration import send_ticket_email_safe
from felicity.models.event import Event
from felicity.models.member import Member
from felicity.models.participation import Participation, ParticipationStatus
from felicity.services.inventory import build_merch_purchase, check_purchase, get_purchase_total, restore_stock
from felicity.services.ticket import issue_ticket
from felicity.utils.auth import check_event_staff
from felicity.utils.event import check_participation_gates, get_event
from felicity.utils.exceptions import ConflictError, NotFoundError, ValidationError
from felicity.utils.upload import StoredUpload

logger = logging.getLogger(__name__)


def create_participation(event: Event, member: Member, **kwargs: Any) -> Participation:
    """Insert a pending participation, relying on the partial unique constraint for duplicates.

    Raises:
        ConflictError: If an active participation for the same member and event exists
    """
    participation = Participation(
        event=event,
        member=member,
        event_type=event.typ,
        status=ParticipationStatus.PENDING,
        **kwargs,
    )
    try:
        with transaction.atomic():
            participation.save()
    except IntegrityError as err:
        raise ConflictError("You already have an active participation for this event") from err
    return participation


def lock_event_form(event: Event) -> None:
    if not event.is_form_locked:
        Event.objects.filter(pk=event.pk).update(is_form_locked=True)
        event.is_form_locked = True


def register_participation(
    member: Member,
    event_uuid: str,
    answers: dict[str, Any],
    uploads: list[StoredUpload],
    payment_method: str | None = None,
    proof_url: str | None = None,
    now=None,
):
    """Register a participant to a NORMAL event.

    Free events are confirmed at once with a ticket; events with a fee stay
    pending behind a payment until staff approve it.

    Args:
        member: The registering participant
        event_uuid: Public id of the event
        answers: Form answers keyed by field key
        uploads: Files already stored for the file fields
        payment_method: Declared payment method, for events with a fee
        proof_url: Reference to the payment proof, for events with a fee
        now: Request time, defaults to the current time

    Returns:
        tuple: Participation, ticket (None if pending) and payment (None if free)

    Raises:
        ValidationError: Closed window, wrong event type or invalid form
        PermissionError: Participant not eligible
        ConflictError: Duplicate participation or event full
    """
    if now is None:
        now = timezone.now()

    ticket = None
    payment = None
    with transaction.atomic():
        event = get_event(event_uuid, lock=True)
        if not event.is_normal():
            raise ValidationError("This endpoint only supports NORMAL events")

        check_participation_gates(event, member, now)
        responses = validate_normal_responses(list(event.get_form_fields()), answers, uploads)

        priced = event.reg_fee > 0
        if priced:
            check_payment_proof(event.reg_fee, proof_url)

        participation = create_participation(event, member, normal_responses=responses)

        if priced:
            payment = create_pending_payment(participation, event.reg_fee, payment_method, proof_url)
        else:
            ticket = issue_ticket(participation, now)
            send_ticket_email_safe(ticket)

        lock_event_form(event)

    logger.info("Member %s registered to event %s (%s)", member.uuid, event.uuid, participation.status)
    return participation, ticket, payment


def purchase_merch(
    member: Member,
    event_uuid: str,
    sku: str,
    quantity: int,
    payment_method: str | None = None,
    proof_url: str | None = None,
    now=None,
):
    """Place a MERCH order, pending until its payment is approved.

    Stock is only checked here, the reservation happens on approval.

    Returns:
        tuple: The pending participation and its payment
    """
    if now is None:
        now = timezone.now()

    with transaction.atomic():
        event = get_event(event_uuid, lock=True)
        if not event.is_merch():
            raise ValidationError("This endpoint only supports MERCH events")

        check_participation_gates(event, member, now)

        if not event.variants.exists():
            raise ValidationError("Merch config is missing for this event")

        variant = check_purchase(event, sku, quantity)
        merch_purchase = build_merch_purchase(event, variant, quantity)
        amount = get_purchase_total(merch_purchase)
        check_payment_proof(amount, proof_url)

        participation = create_participation(event, member, merch_purchase=merch_purchase)
        payment = create_pending_payment(participation, amount, payment_method, proof_url)

    logger.info("Member %s ordered %s x %s on event %s", member.uuid, quantity, sku, event.uuid)
    return participation, payment


def close_participation(participation: Participation, status: str, actor: Member | None, now) -> None:
    """Move an active participation to a terminal status.

    A pending payment is rejected. A confirmed MERCH order gives its stock back,
    pending ones never reserved any.
    """
    reject_pending_payment(get_locked_payment(participation), actor, now)

    if participation.status == ParticipationStatus.CONFIRMED and participation.ticket_id and participation.is_merch():
        purchase = participation.merch_purchase or {}
        restore_stock(participation.event, purchase.get("sku"), int(purchase.get("quantity", 0)))

    participation.status = status
    # The ticket stays on record, the participation link is only kept while confirmed
    participation.ticket_id = None
    participation.save()


def cancel_participation(member: Member, participation_uuid: str, now=None):
    """Cancel one of the member's own participations.

    Returns:
        tuple: The participation and its payment, if any

    Raises:
        NotFoundError: If the participation does not belong to the member
    """
    if now is None:
        now = timezone.now()

    with transaction.atomic():
        participation = get_locked_participation(participation_uuid)
        if participation.member_id != member.pk:
            raise NotFoundError("Participation not found")

        if not participation.is_terminal():
            close_participation(participation, ParticipationStatus.CANCELLED, None, now)
            logger.info("Participation %s cancelled by %s", participation.uuid, member.uuid)

    return participation, participation.get_payment()


def reject_participation(actor: Member, participation_uuid: str, now=None):
    """Reject a participation on behalf of the event organizer or an admin.

    Returns:
        tuple: The participation and its payment, if any

    Raises:
        PermissionError: If the actor does not manage the event
    """
    if now is None:
        now = timezone.now()

    with transaction.atomic():
        participation = get_locked_participation(participation_uuid)
        check_event_staff(participation.event, actor)

        if not participation.is_terminal():
            close_participation(participation, ParticipationStatus.REJECTED, actor, now)
            logger.info("Participation %s rejected by %s", participation.uuid, actor.uuid)

    return participation, participation.get_payment()
