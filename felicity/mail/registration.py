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

from django.db import transaction
from django.utils.translation import gettext_lazy as _

from felicity.models.participation import Ticket
from felicity.utils.tasks import background_auto, my_send_mail

logger = logging.getLogger(__name__)


def ticket_email_body(ticket: Ticket) -> tuple[str, str]:
    """Build subject and body of the ticket confirmation."""
    event = ticket.event
    member = ticket.member
    subj = _("Your ticket for %(event)s") % {"event": event.name}
    body = _("Hello %(name)s,") % {"name": member.name}
    body += "<br /><br />"
    body += _("your %(type)s ticket is confirmed for %(event)s.") % {
        "type": ticket.event_type.lower(),
        "event": event.name,
    }
    body += "<br />" + _("Ticket id") + f": <b>{ticket.ticket_id}</b>"
    body += "<br /><br />" + _("Show this code at the entrance") + ":"
    body += f"<br /><code>{ticket.qr_payload}</code>"
    return str(subj), body


@background_auto(queue="mail")
def send_ticket_email_bkg(ticket_pk: int) -> None:
    """Background task sending the confirmation of an issued ticket.

    Args:
        ticket_pk: Primary key of the ticket
    """
    ticket = Ticket.objects.select_related("event", "member__user").get(pk=ticket_pk)
    subj, body = ticket_email_body(ticket)
    my_send_mail(subj, body, ticket.member, event=ticket.event)


def send_ticket_email_safe(ticket: Ticket) -> None:
    """Hand the ticket confirmation to the mail queue once the transaction commits.

    Delivery problems are logged and never reach the caller.
    """
    ticket_pk = ticket.pk
    ticket_id = ticket.ticket_id

    def dispatch() -> None:
        try:
            send_ticket_email_bkg(ticket_pk)
        except Exception as err:
            logger.warning("Ticket email for %s failed: %s", ticket_id, err, exc_info=True)

    transaction.on_commit(dispatch)
