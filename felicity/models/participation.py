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

from typing import Any, ClassVar

from django.db import models
from django.db.models import Q, UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from safedelete.managers import SafeDeleteManager
from safedelete.queryset import SafeDeleteQueryset

from felicity.models.base import BaseModel, UuidMixin
from felicity.models.event import Event, EventType
from felicity.models.member import Member


class ParticipationStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    CONFIRMED = "confirmed", _("Confirmed")
    CANCELLED = "cancelled", _("Cancelled")
    REJECTED = "rejected", _("Rejected")


ACTIVE_STATUSES = (ParticipationStatus.PENDING, ParticipationStatus.CONFIRMED)

TERMINAL_STATUSES = (ParticipationStatus.CANCELLED, ParticipationStatus.REJECTED)


class ParticipationQuerySet(SafeDeleteQueryset):
    def active(self):
        return self.filter(status__in=ACTIVE_STATUSES)


class Participation(UuidMixin, BaseModel):
    """A participant registration (NORMAL) or purchase (MERCH) against one event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="participations")

    member = models.ForeignKey(Member, on_delete=models.CASCADE, related_name="participations")

    status = models.CharField(
        max_length=10,
        choices=ParticipationStatus.choices,
        default=ParticipationStatus.PENDING,
        db_index=True,
    )

    # Snapshot of the event type when the participation was created
    event_type = models.CharField(max_length=10, choices=EventType.choices)

    ticket_id = models.CharField(max_length=40, blank=True, null=True, db_index=True)

    normal_responses = models.JSONField(blank=True, null=True)

    merch_purchase = models.JSONField(blank=True, null=True)

    objects = SafeDeleteManager.from_queryset(ParticipationQuerySet)()

    class Meta:
        ordering: ClassVar[list] = ["-created"]
        constraints: ClassVar[list] = [
            UniqueConstraint(
                fields=["event", "member"],
                condition=Q(status__in=ACTIVE_STATUSES, deleted=None),
                name="unique_active_participation",
            ),
            models.CheckConstraint(
                condition=Q(ticket_id__isnull=True) | Q(status=ParticipationStatus.CONFIRMED),
                name="participation_ticket_requires_confirmed",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.member} - {self.event} ({self.status})"

    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_merch(self) -> bool:
        return self.event_type == EventType.MERCH

    def get_payment(self):
        """Return the payment linked to this participation, if any."""
        # noinspection PyUnresolvedReferences
        return getattr(self, "payment", None)

    def get_ticket(self):
        return getattr(self, "ticket", None)

    def show(self) -> dict[str, Any]:
        """Return the wire representation of the participation."""
        js = {
            "id": self.uuid,
            "eventId": self.event.uuid,
            "userId": self.member.uuid,
            "status": self.status,
            "eventType": self.event_type,
            "ticketId": self.ticket_id,
            "createdAt": self.created,
            "updatedAt": self.updated,
        }
        if self.is_merch():
            js["merchPurchase"] = self.merch_purchase
        else:
            js["normalResponses"] = self.normal_responses or []
        return js


class ImmutableTicketError(Exception):
    pass


class Ticket(models.Model):
    """Proof of confirmation, issued once per confirmed participation and never changed."""

    ticket_id = models.CharField(max_length=40, unique=True)

    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")

    member = models.ForeignKey(Member, on_delete=models.PROTECT, related_name="tickets")

    participation = models.OneToOneField(Participation, on_delete=models.PROTECT, related_name="ticket")

    event_type = models.CharField(max_length=10, choices=EventType.choices)

    qr_payload = models.TextField()

    created = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering: ClassVar[list] = ["-created"]

    def __str__(self) -> str:
        return self.ticket_id

    def save(self, *args, **kwargs) -> None:
        """Insert the ticket, refusing any update of an existing one."""
        if self.pk is not None:
            msg = f"ticket {self.ticket_id} cannot be modified"
            raise ImmutableTicketError(msg)
        kwargs["force_insert"] = True
        super().save(*args, **kwargs)

    def show(self) -> dict[str, Any]:
        return {
            "id": self.ticket_id,
            "eventId": self.event.uuid,
            "userId": self.member.uuid,
            "participationId": self.participation.uuid,
            "eventType": self.event_type,
            "qrPayload": self.qr_payload,
            "createdAt": self.created,
        }
