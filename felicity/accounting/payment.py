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
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from felicity.mail.registration import send_ticket_email_safe
from felicity.models.accounting import Payment, PaymentMethod, PaymentStatus
from felicity.models.member import Member
from felicity.models.participation import Participation, ParticipationStatus
from felicity.services.inventory import reserve_stock
from felicity.services.ticket import issue_ticket
from felicity.utils.auth import check_event_staff
from felicity.utils.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def check_payment_proof(amount: Decimal, proof_url: str | None) -> None:
    """A proof is mandatory when money is due."""
    if amount > 0 and not proof_url:
        raise ValidationError("Payment proof is required")


def create_pending_payment(
    participation: Participation, amount: Decimal, method: str | None, proof_url: str | None
) -> Payment:
    """Create the pending payment that holds a priced participation.

    Args:
        participation: The pending participation
        amount: Amount due, frozen at order time
        method: Payment method declared by the participant
        proof_url: Reference to the uploaded proof

    Returns:
        Payment: The created payment
    """
    check_payment_proof(amount, proof_url)
    payment = Payment.objects.create(
        participation=participation,
        method=method or PaymentMethod.OTHER,
        amount=amount,
        proof_url=proof_url or None,
        status=PaymentStatus.PENDING,
    )
    logger.info("Pending payment %s of %s for participation %s", payment.uuid, amount, participation.uuid)
    return payment


def get_locked_participation(participation_uuid: str) -> Participation:
    """Load and lock a participation until the end of the transaction.

    Raises:
        NotFoundError: If no participation matches
    """
    try:
        return (
            Participation.objects.select_for_update(of=("self",))
            .select_related("event", "member")
            .get(uuid=participation_uuid)
        )
    except Participation.DoesNotExist as err:
        raise NotFoundError("Participation not found") from err


def get_locked_payment(participation: Participation) -> Payment | None:
    return Payment.objects.select_for_update().filter(participation=participation).first()


def reject_pending_payment(payment: Payment | None, actor: Member | None, now) -> None:
    """Mark a still pending payment as rejected, leaving decided payments alone."""
    if not payment or not payment.is_pending():
        return
    payment.status = PaymentStatus.REJECTED
    payment.decided_by = actor
    payment.decided_at = now
    payment.save()


def approve_payment(participation_uuid: str, actor: Member, now=None):
    """Approve the payment of a pending participation, confirming it.

    For MERCH orders stock is reserved now; if it ran out meanwhile the
    transaction is rolled back and both records stay pending.

    Args:
        participation_uuid: Public id of the participation
        actor: Organizer owning the event, or an admin
        now: Decision time, defaults to the current time

    Returns:
        tuple: The participation, its payment and the issued ticket

    Raises:
        NotFoundError: If the participation or its payment is missing
        ConflictError: If the payment is already resolved or stock is insufficient
    """
    if now is None:
        now = timezone.now()

    with transaction.atomic():
        participation = get_locked_participation(participation_uuid)
        check_event_staff(participation.event, actor)

        payment = get_locked_payment(participation)
        if not payment:
            raise NotFoundError("Payment not found")

        if not payment.is_pending():
            raise ConflictError("Payment already resolved")

        if participation.status != ParticipationStatus.PENDING:
            raise ConflictError("Participation is not pending")

        if participation.is_merch():
            purchase = participation.merch_purchase or {}
            reserve_stock(participation.event, purchase.get("sku"), int(purchase.get("quantity", 0)))

        ticket = issue_ticket(participation, now)

        payment.status = PaymentStatus.APPROVED
        payment.decided_by = actor
        payment.decided_at = now
        payment.save()

        send_ticket_email_safe(ticket)

    logger.info("Payment %s approved by %s", payment.uuid, actor.uuid)
    return participation, payment, ticket


def reject_payment(participation_uuid: str, actor: Member, now=None):
    """Reject the payment of a participation, rejecting a still pending participation.

    No stock is touched, pending orders never reserved any. Resolved payments
    are returned unchanged.

    Returns:
        tuple: The participation and its payment
    """
    if now is None:
        now = timezone.now()

    with transaction.atomic():
        participation = get_locked_participation(participation_uuid)
        check_event_staff(participation.event, actor)

        payment = get_locked_payment(participation)
        if not payment:
            raise NotFoundError("Payment not found")

        if not payment.is_pending():
            return participation, payment

        reject_pending_payment(payment, actor, now)

        if participation.status == ParticipationStatus.PENDING:
            participation.status = ParticipationStatus.REJECTED
            participation.save()

    logger.info("Payment %s rejected by %s", payment.uuid, actor.uuid)
    return participation, payment


def resolve_payment(participation_uuid: str, actor: Member, status: str, now=None):
    """Apply a staff decision on a pending payment.

    Returns:
        tuple: Participation, payment and ticket (None unless approved)
    """
    if status == PaymentStatus.APPROVED:
        return approve_payment(participation_uuid, actor, now)

    if status == PaymentStatus.REJECTED:
        participation, payment = reject_payment(participation_uuid, actor, now)
        return participation, payment, None

    raise ValidationError("Invalid payment decision")
