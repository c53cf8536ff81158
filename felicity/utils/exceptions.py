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

class ParticipationError(Exception):
    """Base exception of the participation workflow, mapped to an HTTP status.

    Attributes:
        message (str): Human readable description returned to the caller
        status_code (int): HTTP status code used for the response
    """

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ParticipationError):
    """Malformed or missing input, never mutates state."""

    status_code = 400


class NotAuthenticatedError(ParticipationError):
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionError(ParticipationError):
    """Exception raised when user lacks required permissions."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(ParticipationError):
    """Generic exception for content not found scenarios."""

    status_code = 404


class ConflictError(ParticipationError):
    """Duplicate participation, capacity reached, stock unavailable or payment already resolved."""

    status_code = 409


class InternalError(ParticipationError):
    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
