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
from django.utils.translation import gettext_lazy as _

from felicity.models.base import BaseModel, UuidMixin
from felicity.models.member import Member
from felicity.models.participation import Participation


class PaymentMethod(models.TextChoices):
    UPI = "upi", _("UPI")
    BANK_TRANSFER = "bank_transfer", _("Bank transfer")
    CASH = "cash", _("Cash")
    CARD = "card", _("Card")
    OTHER = "other", _("Other")


class PaymentStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")


class Payment(UuidMixin, BaseModel):
    """Proof based payment that holds a priced participation until a staff decision."""

    participation = models.OneToOneField(Participation, on_delete=models.CASCADE, related_name="payment")

    method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.OTHER)

    amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    proof_url = models.CharField(max_length=500, blank=True, null=True)

    status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )

    decided_by = models.ForeignKey(
        Member,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="payment_decisions",
    )

    decided_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering: ClassVar[list] = ["-created"]

    def __str__(self) -> str:
        return f"{self.participation} - {self.amount} ({self.status})"

    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    def show(self) -> dict[str, Any]:
        return {
            "id": self.uuid,
            "registrationId": self.participation.uuid,
            "method": self.method,
            "amount": self.amount,
            "proofUrl": self.proof_url,
            "status": self.status,
            "decidedAt": self.decided_at,
            "createdAt": self.created,
            "updatedAt": self.updated,
        }
