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

import json
from typing import Any

from django.http import HttpRequest

from felicity.utils.exceptions import ValidationError


def read_json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object body, an empty body being an empty object.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError as err:
        raise ValidationError("Invalid JSON body") from err
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data


def read_request_data(request: HttpRequest) -> Any:
    """Return the submitted data, from a JSON body or from form fields."""
    if request.content_type == "application/json":
        return read_json_body(request)
    return request.POST
