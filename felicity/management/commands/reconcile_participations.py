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
from typing import Any

from django.core.management.base import BaseCommand
from django.db import transaction

from felicity.models.event import Event, EventType
from felicity.models.participation import Participation, ParticipationStatus, Ticket
from felicity.services.inventory import refresh_total_stock
from felicity.services.ticket import issue_ticket
from felicity.utils.exceptions import ConflictError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Repair participations left half-done by an interrupted request.

    Confirmed participations without a ticket get one, confirmed participations
    whose ticket link was lost get it back, and the cached total stock of every
    MERCH event is recomputed from its variants.
    """

    help = "Complete partial participation state and recompute cached stock totals"

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Only report what would be fixed")

    def handle(self, *args: Any, **options: Any) -> None:
        dry_run = options["dry_run"]

        issued = self.issue_missing_tickets(dry_run)
        relinked = self.relink_tickets(dry_run)
        refreshed = self.refresh_stock_totals(dry_run)

        prefix = "[dry run] " if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix}Issued {issued} tickets, relinked {relinked} tickets, "
                f"fixed stock total of {refreshed} events."
            )
        )

    def issue_missing_tickets(self, dry_run: bool) -> int:
        missing = Participation.objects.filter(status=ParticipationStatus.CONFIRMED, ticket__isnull=True).select_related(
            "event", "member"
        )

        count = 0
        for participation in missing:
            count += 1
            self.stdout.write(f"Missing ticket for participation {participation.uuid}")
            if dry_run:
                continue
            try:
                with transaction.atomic():
                    # A confirmed row cannot hold a stale link without its ticket
                    participation.ticket_id = None
                    issue_ticket(participation)
            except ConflictError:
                logger.warning("Ticket for %s issued concurrently", participation.uuid)
        return count

    def relink_tickets(self, dry_run: bool) -> int:
        tickets = Ticket.objects.filter(participation__status=ParticipationStatus.CONFIRMED).select_related(
            "participation"
        )

        count = 0
        for ticket in tickets:
            participation = ticket.participation
            if participation.ticket_id == ticket.ticket_id:
                continue
            count += 1
            self.stdout.write(f"Relinking ticket {ticket.ticket_id} to participation {participation.uuid}")
            if not dry_run:
                Participation.objects.filter(pk=participation.pk).update(ticket_id=ticket.ticket_id)
        return count

    def refresh_stock_totals(self, dry_run: bool) -> int:
        count = 0
        for event in Event.objects.filter(typ=EventType.MERCH):
            expected = sum(event.variants.values_list("stock", flat=True))
            if expected == event.total_stock:
                continue
            count += 1
            self.stdout.write(f"Event {event.uuid} total stock {event.total_stock} -> {expected}")
            if not dry_run:
                refresh_total_stock(event.pk)
        return count
