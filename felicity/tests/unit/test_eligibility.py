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

import pytest

from felicity.models.member import ParticipantType
from felicity.utils.eligibility import is_eligible, normalize_eligibility, parse_eligibility


class TestEligibility:
    """Test matching of event eligibility against participant categories"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("  IIIT Only ", "iiit-only"),
            ("non_iiit", "non-iiit"),
            ("Non  IIIT", "non-iiit"),
            (None, ""),
        ],
    )
    def test_normalize_eligibility(self, value, expected):
        assert normalize_eligibility(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("all", "all"),
            ("", "all"),
            ("IIIT", ParticipantType.IIIT),
            ("iiit_students", ParticipantType.IIIT),
            ("NON IIIT", ParticipantType.NON_IIIT),
            ("external", ParticipantType.NON_IIIT),
            ("faculty only", None),
        ],
    )
    def test_parse_eligibility(self, value, expected):
        assert parse_eligibility(value) == expected

    def test_open_events_accept_everyone(self):
        assert is_eligible("all", ParticipantType.IIIT)
        assert is_eligible("ALL", ParticipantType.NON_IIIT)
        assert is_eligible("", None)

    def test_restricted_events(self):
        assert is_eligible("iiit only", ParticipantType.IIIT)
        assert not is_eligible("iiit only", ParticipantType.NON_IIIT)
        assert not is_eligible("non-iiit", ParticipantType.IIIT)
        assert is_eligible("Non_IIIT", ParticipantType.NON_IIIT)

    def test_missing_participant_type_is_not_eligible_to_restricted_events(self):
        assert not is_eligible("iiit", None)

    def test_unknown_constraint_is_permissive(self):
        assert is_eligible("second years", ParticipantType.NON_IIIT)
