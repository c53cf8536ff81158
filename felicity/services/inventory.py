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

"""Stock bookkeeping of MERCH events.

Variants are the only source of truth for stock: the event ``total_stock``
is a cache recomputed from them after every mutation. Stock is reserved
when an order is confirmed, never when it is merely requested.
"""

import logging
from decimal import Decimal
from typing import Any

from django.db import transaction
from django.db.models import F, Sum

from felicity.models.event import Event, MerchVariant
from felicity.utils.exceptions import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def refresh_total_stock(event_id: int) -> int:
    """Recompute and store the cached total stock of an event.

    Args:
        event_id: Primary key of the event

    Returns:
        int: The new total
    """
    total = MerchVariant.objects.filter(event_id=event_id).aggregate(total=Sum("stock"))["total"] or 0
    Event.objects.filter(pk=event_id).update(total_stock=total)
    return total


def get_variant(event: Event, sku: str) -> MerchVariant:
    try:
        return MerchVariant.objects.get(event=event, sku=sku)
    except MerchVariant.DoesNotExist as err:
        raise ValidationError("Invalid merch variant sku") from err


def check_purchase(event: Event, sku: str, quantity: int) -> MerchVariant:
    """Check a purchase request without touching stock.

    Raises:
        ValidationError: Over the per participant limit, or unknown sku
        ConflictError: Not enough stock left
    """
    if quantity > event.per_participant_limit:
        raise ValidationError("Requested quantity exceeds per participant purchase limit")

    variant = get_variant(event, sku)
    if variant.stock < quantity:
        raise ConflictError("Requested stock unavailable")

    return variant


def lock_event_stock(event: Event) -> None:
    """Lock the event row, serializing stock changes across its variants."""
    Event.objects.select_for_update().only("pk").get(pk=event.pk)


def reserve_stock(event: Event, sku: str, quantity: int) -> None:
    """Take quantity units of a variant with a conditional decrement.

    Raises:
        ValidationError: If the sku no longer exists
        ConflictError: If the variant has less than quantity left
    """
    with transaction.atomic():
        lock_event_stock(event)
        updated = MerchVariant.objects.filter(event=event, sku=sku, stock__gte=quantity).update(
            stock=F("stock") - quantity
        )
        if not updated:
            # Tell apart a removed variant from an exhausted one
            get_variant(event, sku)
            raise ConflictError("Requested stock unavailable")

        total = refresh_total_stock(event.pk)

    logger.info("Reserved %s x %s on event %s (total stock %s)", quantity, sku, event.uuid, total)


def restore_stock(event: Event, sku: str, quantity: int) -> None:
    """Give back quantity units to a variant, skipping variants removed meanwhile."""
    with transaction.atomic():
        lock_event_stock(event)
        updated = MerchVariant.objects.filter(event=event, sku=sku).update(stock=F("stock") + quantity)
        if not updated:
            logger.warning("Cannot restore %s x %s on event %s: variant not found", quantity, sku, event.uuid)
            return

        total = refresh_total_stock(event.pk)

    logger.info("Restored %s x %s on event %s (total stock %s)", quantity, sku, event.uuid, total)


def get_unit_price(event: Event, variant: MerchVariant) -> Decimal:
    return max(Decimal(0), event.reg_fee + variant.get_price_delta())


def build_merch_purchase(event: Event, variant: MerchVariant, quantity: int) -> dict[str, Any]:
    """Freeze the order line, so later catalogue price changes do not affect it."""
    unit_price = get_unit_price(event, variant)
    return {
        "sku": variant.sku,
        "label": variant.label,
        "quantity": quantity,
        "unitPrice": str(unit_price),
        "totalAmount": str(unit_price * quantity),
    }


def get_purchase_total(merch_purchase: dict[str, Any] | None) -> Decimal:
    if not merch_purchase:
        return Decimal(0)
    return Decimal(str(merch_purchase.get("totalAmount", 0)))
