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

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone
from safedelete import HARD_DELETE

from felicity.models.event import DisplayStatus, EventStatus, EventType, FieldType, FormField
from felicity.models.member import Member, MemberRole
from felicity.models.participation import Participation, ParticipationStatus
from felicity.services.participation import create_participation
from felicity.tests.unit.base import BaseTestCase
from felicity.utils.exceptions import ConflictError


class TestModelSignals(TestCase, BaseTestCase):
    """Test signals keeping members and stock totals in sync"""

    def test_user_creation_creates_member(self):
        user = self.create_user(username="ada", first_name="Ada", last_name="Lovelace")

        member = Member.objects.get(user=user)
        assert member.name == "Ada Lovelace"
        assert member.email == "ada@example.com"
        assert member.role == MemberRole.PARTICIPANT
        assert len(member.uuid) == 12

    def test_total_stock_follows_variant_changes(self):
        event = self.create_merch_event()
        variant = self.create_variant(event, sku="TEE-M", stock=3)
        self.create_variant(event, sku="TEE-L", stock=2)
        assert self.reload(event).total_stock == 5

        variant.stock = 10
        variant.save()
        assert self.reload(event).total_stock == 12

        variant.delete()
        assert self.reload(event).total_stock == 2

        variant.undelete()
        assert self.reload(event).total_stock == 12

    def test_hard_delete_updates_total_stock(self):
        event = self.create_merch_event()
        variant = self.create_variant(event, sku="TEE-M", stock=3)

        variant.delete(force_policy=HARD_DELETE)

        assert self.reload(event).total_stock == 0


class TestEventModel(TestCase, BaseTestCase):
    """Test event status rules and validation"""

    def test_display_status_ongoing(self):
        now = timezone.now()
        event = self.create_event(
            reg_deadline=now - timedelta(days=2), start_date=now - timedelta(days=1), end_date=now + timedelta(days=1)
        )

        assert event.display_status(now) == DisplayStatus.ONGOING
        assert not event.can_register(now)

    def test_display_status_keeps_stored_status(self):
        event = self.create_event(status=EventStatus.CLOSED)

        assert event.display_status() == EventStatus.CLOSED
        assert not event.can_register()

    def test_deadline_after_start_is_invalid(self):
        event = self.create_event()
        event.reg_deadline = event.start_date + timedelta(hours=1)

        with pytest.raises(ValidationError):
            event.clean()

    def test_completed_is_sticky(self):
        event = self.create_event(status=EventStatus.COMPLETED)
        event.status = EventStatus.PUBLISHED

        with pytest.raises(ValidationError):
            event.clean()

    def test_type_cannot_change_once_locked(self):
        event = self.create_event(is_form_locked=True)
        event.typ = EventType.MERCH

        with pytest.raises(ValidationError):
            event.clean()

    def test_reg_limit_must_be_positive(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            self.create_event(reg_limit=0)

    def test_choice_field_needs_options(self):
        field = FormField(event=self.create_event(), key="track", label="Track", typ=FieldType.SELECT)

        with pytest.raises(ValidationError):
            field.clean()

    def test_locked_form_cannot_change(self):
        event = self.create_event(is_form_locked=True)
        field = FormField(event=event, key="name", label="Name", typ=FieldType.TEXT)

        with pytest.raises(ValidationError):
            field.clean()

    def test_show_merch_hides_form(self):
        event = self.create_merch_event()
        self.create_variant(event, sku="TEE-M", stock=3)
        event.refresh_from_db()

        js = event.show()

        assert js["normalForm"] is None
        assert js["merchConfig"]["perParticipantLimit"] == event.per_participant_limit
        assert js["merchConfig"]["totalStock"] == 3


class TestParticipationConstraints(TestCase, BaseTestCase):
    """Test database constraints on participations"""

    def test_one_active_participation_per_member(self):
        event = self.create_event()
        member = self.participant()
        create_participation(event, member)

        with pytest.raises(ConflictError):
            create_participation(event, member)

        assert Participation.objects.filter(event=event, member=member).count() == 1

    def test_terminal_participations_do_not_count(self):
        event = self.create_event()
        member = self.participant()
        first = create_participation(event, member)
        first.status = ParticipationStatus.CANCELLED
        first.save()

        second = create_participation(event, member)

        assert Participation.objects.active().get(event=event) == second

    def test_ticket_requires_confirmed_status(self):
        participation = create_participation(self.create_event(), self.participant())
        participation.ticket_id = "TKT-1-ABCDEF12"

        with pytest.raises(IntegrityError), transaction.atomic():
            participation.save()

    def test_soft_deleted_participations_are_hidden(self):
        participation = create_participation(self.create_event(), self.participant())

        participation.delete()

        assert not Participation.objects.active().exists()
        assert Participation.all_objects.filter(pk=participation.pk).exists()
