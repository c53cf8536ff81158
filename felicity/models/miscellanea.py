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

from django.db import models

from felicity.models.base import BaseModel
from felicity.models.event import Event


class Email(BaseModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, blank=True, null=True)

    recipient = models.CharField(max_length=170)

    subj = models.CharField(max_length=500)

    body = models.TextField()

    reply_to = models.CharField(max_length=170, blank=True, null=True)

    sent = models.DateTimeField(blank=True, null=True)

    def __str__(self):
        return f"{self.recipient} - {self.subj}"
