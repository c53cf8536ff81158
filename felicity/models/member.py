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

from typing import Any

from django.contrib.auth.models import User
from django.db import models
from django.utils.translation import gettext_lazy as _

from felicity.models.base import BaseModel, UuidMixin


class MemberRole(models.TextChoices):
    PARTICIPANT = "participant", _("Participant")
    ORGANIZER = "organizer", _("Organizer")
    ADMIN = "admin", _("Admin")


class ParticipantType(models.TextChoices):
    IIIT = "iiit", _("IIIT")
    NON_IIIT = "non-iiit", _("Non IIIT")


class Member(UuidMixin, BaseModel):
    """Local projection of an authenticated principal, with its role and participant category."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="member")

    name = models.CharField(max_length=100, verbose_name=_("Name"))

    email = models.EmailField(blank=True, verbose_name=_("Email"))

    role = models.CharField(
        max_length=15,
        choices=MemberRole.choices,
        default=MemberRole.PARTICIPANT,
        db_index=True,
    )

    participant_type = models.CharField(
        max_length=10,
        choices=ParticipantType.choices,
        blank=True,
        null=True,
        verbose_name=_("Participant type"),
        help_text=_("Category used to match the eligibility of events"),
    )

    organization = models.CharField(max_length=150, blank=True, verbose_name=_("Organization"))

    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    def is_organizer(self) -> bool:
        return self.role == MemberRole.ORGANIZER

    def get_email(self) -> str:
        """Return the contact email, falling back to the user account email."""
        return self.email or self.user.email

    def show(self) -> dict[str, Any]:
        """Return the public summary of the member."""
        return {
            "id": self.uuid,
            "name": self.name,
            "email": self.get_email(),
            "participantType": self.participant_type,
            "organization": self.organization,
        }
