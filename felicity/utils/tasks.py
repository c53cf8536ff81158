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
import traceback
from functools import wraps
from typing import Any, Callable, Optional, Union

from background_task import background
from django.conf import settings as conf_settings
from django.core.exceptions import ObjectDoesNotExist
from django.core.mail import EmailMultiAlternatives, mail_admins
from django.utils import timezone
from django.utils.html import strip_tags

from felicity.models.event import Event
from felicity.models.member import Member
from felicity.models.miscellanea import Email

logger = logging.getLogger(__name__)

INTERNAL_KWARGS = {"schedule", "repeat", "repeat_until", "remove_existing_tasks"}


def background_auto(schedule=0, **background_kwargs):
    """Decorator to conditionally run functions as background tasks.

    Creates a decorator that can run functions either synchronously
    (if AUTO_BACKGROUND_TASKS is True) or as background tasks.

    Args:
        schedule (int): Seconds to delay before execution
        **background_kwargs: Additional arguments for background task

    Returns:
        function: Decorator function
    """

    def decorator(original_function: Callable[..., Any]) -> Callable[..., Any]:
        background_task = background(schedule=schedule, **background_kwargs)(original_function)

        @wraps(original_function)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """Execute function directly or schedule as background task based on settings."""
            if getattr(conf_settings, "AUTO_BACKGROUND_TASKS", False):
                # Filter out internal kwargs that shouldn't be passed to the function
                filtered_kwargs = {key: value for key, value in kwargs.items() if key not in INTERNAL_KWARGS}
                return original_function(*args, **filtered_kwargs)
            else:
                return background_task(*args, **kwargs)

        # Attach task references to wrapper for external access
        wrapper.task = background_task
        wrapper.task_function = original_function
        return wrapper

    return decorator


# MAIL


def mail_error(subj, body, e=None):
    """Log an email delivery failure and notify administrators.

    Args:
        subj (str): Email subject that failed
        body (str): Email body that failed
        e (Exception, optional): Exception that caused the failure
    """
    logger.error(f"Mail error: {e}")
    logger.error(f"Subject: {subj}")
    logger.debug(f"Body: {body}")
    if e:
        body = f"{traceback.format_exc()}\n\n{subj}\n\n{body}"
    else:
        body = f"{subj}\n\n{body}"
    mail_admins("[Felicity] Mail error", body, fail_silently=True)


@background_auto()
def my_send_mail_bkg(email_pk):
    """Background task to send a queued email.

    Args:
        email_pk (int): Primary key of Email model instance to send
    """
    try:
        email = Email.objects.get(pk=email_pk)
    except ObjectDoesNotExist:
        return

    if email.sent:
        logger.info("Email already sent!")
        return

    my_send_simple_mail(email.subj, email.body, email.recipient, email.reply_to)

    email.sent = timezone.now()
    email.save()


def my_send_simple_mail(subj: str, body: str, m_email: str, reply_to: str | None = None) -> None:
    """Send a multipart email with the configured sender.

    Args:
        subj: Email subject line
        body: Email body content (HTML format)
        m_email: Recipient email address
        reply_to: Custom Reply-To email address header

    Raises:
        Exception: Re-raises email sending exceptions after logging error details
    """
    email_headers = {}
    if reply_to:
        email_headers["Reply-To"] = reply_to

    try:
        email_message = EmailMultiAlternatives(
            subj,
            strip_tags(body),
            conf_settings.FELICITY_MAIL_SENDER,
            [m_email],
            headers=email_headers,
        )
        email_message.attach_alternative(body, "text/html")
        email_message.send()

        if conf_settings.DEBUG:
            logger.info(f"Sending email to: {m_email}")
            logger.info(f"Subject: {subj}")

    except Exception as email_sending_exception:
        mail_error(subj, body, email_sending_exception)
        raise email_sending_exception


def my_send_mail(
    subject: str,
    body: str,
    recipient: Union[str, Member],
    event: Optional[Event] = None,
    reply_to: Optional[str] = None,
    schedule: int = 0,
) -> None:
    """Queue email for sending.

    Args:
        subject: Email subject line
        body: Email body content (HTML or plain text)
        recipient: Email recipient address or Member instance
        event: Event the email refers to, if any
        reply_to: Custom reply-to email address
        schedule: Delay in seconds before sending email
    """
    subject = subject.replace("  ", " ")

    if isinstance(recipient, Member):
        recipient = recipient.get_email()

    email = Email.objects.create(
        event=event,
        recipient=recipient,
        subj=str(subject),
        body=str(body),
        reply_to=reply_to,
    )

    my_send_mail_bkg(email.pk, schedule=schedule)
