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

import re

from felicity.models.member import ParticipantType

ELIGIBILITY_ALL = "all"

_SEPARATORS = re.compile(r"[\s_]+")

_ALIASES = {
    "": ELIGIBILITY_ALL,
    "all": ELIGIBILITY_ALL,
    "any": ELIGIBILITY_ALL,
    "iiit": ParticipantType.IIIT,
    "iiit-only": ParticipantType.IIIT,
    "iiit-students": ParticipantType.IIIT,
    "non-iiit": ParticipantType.NON_IIIT,
    "noniiit": ParticipantType.NON_IIIT,
    "non-iiit-only": ParticipantType.NON_IIIT,
    "external": ParticipantType.NON_IIIT,
}


def normalize_eligibility(value: str | None) -> str:
    return _SEPARATORS.sub("-", (value or "").strip().lower())


def parse_eligibility(value: str | None) -> str | None:
    """Map a free-form eligibility string to its constraint.

    Args:
        value: Eligibility as typed by the organizer

    Returns:
        "all", a participant type value, or None when the text is not recognized
    """
    return _ALIASES.get(normalize_eligibility(value))


def is_eligible(eligibility: str | None, participant_type: str | None) -> bool:
    """Check if a participant category satisfies the event eligibility.

    Unrecognized constraints are permissive.
    """
    constraint = parse_eligibility(eligibility)
    if constraint is None or constraint == ELIGIBILITY_ALL:
        return True
    return participant_type == constraint
