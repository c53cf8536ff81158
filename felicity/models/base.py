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
from django.utils import timezone
from safedelete.models import SOFT_DELETE_CASCADE, SafeDeleteModel

from felicity.models.utils import my_uuid_short

UUID_RETRY_LIMIT = 5


class BaseModel(SafeDeleteModel):
    """Represents BaseModel model."""

    created = models.DateTimeField(default=timezone.now, editable=False)

    updated = models.DateTimeField(auto_now=True)

    _safedelete_policy = SOFT_DELETE_CASCADE

    class Meta:
        abstract = True
        ordering: ClassVar[list] = ["-updated"]

    def __str__(self) -> str:
        """Return string representation of the model.

        Returns the 'name' attribute when the model has one, otherwise the
        parent class representation.
        """
        if hasattr(self, "name"):
            return self.name

        return super().__str__()


def auto_set_uuid(instance: Any) -> None:
    """Set uuid field if missing value."""
    # If the model does not have uuid field, or already has a value, skip
    if not hasattr(instance, "uuid") or instance.uuid:
        return

    model_class = instance.__class__
    for _try in range(UUID_RETRY_LIMIT):
        candidate = my_uuid_short()
        if not model_class.all_objects.filter(uuid=candidate).exists():
            instance.uuid = candidate
            return

    msg = "UUID collision after retries"
    raise RuntimeError(msg)


class UuidMixin(models.Model):
    """Adds an uuid field to the model, used as the opaque identifier on the wire."""

    uuid = models.CharField(
        max_length=12,
        unique=True,
        db_index=True,
        editable=False,
    )

    class Meta:
        abstract = True
