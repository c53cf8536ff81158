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

from django.contrib.auth.models import User
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver
from safedelete.signals import post_softdelete, post_undelete

from felicity.models.base import auto_set_uuid
from felicity.models.event import MerchVariant
from felicity.models.member import Member
from felicity.services.inventory import refresh_total_stock

log = logging.getLogger(__name__)


# Generic signal handlers (no specific sender)
@receiver(pre_save)
def pre_save_callback(sender: type, instance: object, *args: any, **kwargs: any) -> None:
    """Assign the short uuid to models that expose one."""
    auto_set_uuid(instance)


# User signals
@receiver(post_save, sender=User)
def post_save_user_member(sender, instance, created, **kwargs):
    if not created:
        return
    name = instance.get_full_name() or instance.username
    Member.objects.get_or_create(user=instance, defaults={"name": name, "email": instance.email})


# MerchVariant signals, keep the cached total in sync with catalogue edits
@receiver(post_save, sender=MerchVariant)
def post_save_merch_variant(sender, instance, *args, **kwargs):
    refresh_total_stock(instance.event_id)


@receiver(post_delete, sender=MerchVariant)
def post_delete_merch_variant(sender, instance, **kwargs):
    refresh_total_stock(instance.event_id)


@receiver(post_softdelete, sender=MerchVariant)
def post_softdelete_merch_variant(sender, instance, **kwargs):
    refresh_total_stock(instance.event_id)


@receiver(post_undelete, sender=MerchVariant)
def post_undelete_merch_variant(sender, instance, **kwargs):
    refresh_total_stock(instance.event_id)
