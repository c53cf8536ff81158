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
from typing import Optional

from django.core.exceptions import ObjectDoesNotExist
from django.http import HttpRequest, HttpResponse, JsonResponse

from felicity.utils.exceptions import InternalError, ParticipationError

logger = logging.getLogger(__name__)


def error_response(message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"message": message}}, status=status)


class ExceptionHandlingMiddleware:
    """Turn workflow exceptions into JSON error responses."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> Optional[HttpResponse]:
        """Map a view exception to its JSON error response.

        Args:
            request: The HTTP request object that triggered the exception
            exception: The exception instance that was raised

        Returns:
            JsonResponse for every exception, with a generic message for unexpected ones
        """
        handlers = [
            (InternalError, lambda ex: self._handle_internal_error(request, ex)),
            (ParticipationError, lambda ex: error_response(ex.message, ex.status_code)),
            (ObjectDoesNotExist, lambda ex: error_response("Not found", 404)),
        ]

        for exc_type, handler in handlers:
            if isinstance(exception, exc_type):
                return handler(exception)

        return self._handle_internal_error(request, exception)

    @staticmethod
    def _handle_internal_error(request: HttpRequest, ex: Exception) -> HttpResponse:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.path, ex)
        return error_response(InternalError().message, InternalError.status_code)
