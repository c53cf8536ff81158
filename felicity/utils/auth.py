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

from functools import wraps
from typing import Any, Callable

from django.http import HttpRequest

from felicity.models.event import Event
from felicity.models.member import Member, MemberRole
from felicity.utils.exceptions import NotAuthenticatedError, PermissionError


def get_request_member(request: HttpRequest) -> Member:
    """Return the member of the authenticated user.

    Raises:
        NotAuthenticatedError: If the request is anonymous or the user has no member profile
    """
    if not request.user.is_authenticated or not hasattr(request.user, "member"):
        raise NotAuthenticatedError("Not authenticated")
    return request.user.member


def role_required(*roles: str) -> Callable:
    """Restrict a view to members with one of the given roles.

    The member is stored on ``request.member`` for the view.
    """

    def decorator(view_func: Callable) -> Callable:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            member = get_request_member(request)
            if roles and member.role not in roles:
                raise PermissionError("Forbidden")
            request.member = member
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


participant_required = role_required(MemberRole.PARTICIPANT)

staff_required = role_required(MemberRole.ORGANIZER, MemberRole.ADMIN)

member_required = role_required()


def is_event_staff(event: Event, member: Member) -> bool:
    """Check if the member is an admin or the organizer owning the event."""
    if member.is_admin():
        return True
    return member.is_organizer() and event.organizer_id == member.pk


def check_event_staff(event: Event, member: Member) -> None:
    if not is_event_staff(event, member):
        raise PermissionError("Forbidden")
