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
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core import mail
from django.test import TestCase
from django.utils import timezone

from felicity.models.accounting import Payment, PaymentStatus
from felicity.models.event import Event, EventStatus, FieldType
from felicity.models.member import ParticipantType
from felicity.models.participation import Participation, ParticipationStatus, Ticket
from felicity.services.participation import cancel_participation, register_participation, reject_participation
from felicity.tests.unit.base import BaseTestCase
from felicity.utils.exceptions import ConflictError, NotFoundError, PermissionError, ValidationError


class TestRegisterParticipation(TestCase, BaseTestCase):
    """Test registration to NORMAL events"""

    def test_free_event_confirms_with_ticket(self):
        event = self.create_event()
        self.create_form_field(event, "name", required=True)
        member = self.participant()

        participation, ticket, payment = register_participation(member, event.uuid, {"name": "Ada"}, [])

        assert participation.status == ParticipationStatus.CONFIRMED
        assert payment is None
        assert ticket.ticket_id == participation.ticket_id
        assert ticket.participation == participation
        assert participation.normal_responses == [
            {"key": "name", "label": "Name", "type": FieldType.TEXT, "value": "Ada"}
        ]
        assert self.reload(event).is_form_locked

    def test_free_event_sends_ticket_email_after_commit(self):
        event = self.create_event()
        member = self.participant()

        with self.captureOnCommitCallbacks(execute=True):
            _participation, ticket, _payment = register_participation(member, event.uuid, {}, [])

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [member.get_email()]
        assert ticket.ticket_id in mail.outbox[0].alternatives[0][0]

    @patch("felicity.mail.registration.send_ticket_email_bkg")
    def test_email_failure_does_not_fail_registration(self, mock_send):
        mock_send.side_effect = RuntimeError("smtp down")
        event = self.create_event()

        with self.captureOnCommitCallbacks(execute=True):
            participation, ticket, _payment = register_participation(self.participant(), event.uuid, {}, [])

        mock_send.assert_called_once_with(ticket.pk)
        assert self.reload(participation).status == ParticipationStatus.CONFIRMED

    def test_priced_event_stays_pending(self):
        event = self.create_event(reg_fee=Decimal("100.00"))

        participation, ticket, payment = register_participation(
            self.participant(), event.uuid, {}, [], payment_method="upi", proof_url="participations/proof.png"
        )

        assert participation.status == ParticipationStatus.PENDING
        assert participation.ticket_id is None
        assert ticket is None
        assert payment.status == PaymentStatus.PENDING
        assert payment.amount == Decimal("100.00")
        assert payment.method == "upi"
        assert not Ticket.objects.exists()

    def test_priced_event_requires_proof(self):
        event = self.create_event(reg_fee=Decimal("100.00"))

        with pytest.raises(ValidationError) as exc:
            register_participation(self.participant(), event.uuid, {}, [])

        assert exc.value.message == "Payment proof is required"
        assert not Participation.objects.exists()

    def test_unknown_event(self):
        with pytest.raises(NotFoundError):
            register_participation(self.participant(), "missing", {}, [])

    def test_merch_event_is_refused(self):
        event = self.create_merch_event()

        with pytest.raises(ValidationError) as exc:
            register_participation(self.participant(), event.uuid, {}, [])
        assert exc.value.message == "This endpoint only supports NORMAL events"

    def test_draft_event_is_not_open(self):
        event = self.create_event(status=EventStatus.DRAFT)

        with pytest.raises(ValidationError) as exc:
            register_participation(self.participant(), event.uuid, {}, [])
        assert exc.value.message == "Event is not open for participation"

    def test_deadline_passed(self):
        now = timezone.now()
        event = self.create_event(reg_deadline=now - timedelta(hours=1), start_date=now + timedelta(days=1))

        with pytest.raises(ValidationError) as exc:
            register_participation(self.participant(), event.uuid, {}, [], now=now)
        assert exc.value.message == "Registration deadline has passed"

    def test_duplicate_active_participation(self):
        event = self.create_event()
        member = self.participant()
        register_participation(member, event.uuid, {}, [])

        with pytest.raises(ConflictError) as exc:
            register_participation(member, event.uuid, {}, [])
        assert exc.value.message == "You already have an active participation for this event"

    def test_registration_limit_reached(self):
        event = self.create_event(reg_limit=1)
        register_participation(self.create_participant(), event.uuid, {}, [])

        with pytest.raises(ConflictError) as exc:
            register_participation(self.create_participant(), event.uuid, {}, [])
        assert exc.value.message == "Registration limit reached"

    def test_cancelled_participations_free_the_slot(self):
        event = self.create_event(reg_limit=1)
        member = self.participant()
        participation, _ticket, _payment = register_participation(member, event.uuid, {}, [])
        cancel_participation(member, participation.uuid)

        participation, _ticket, _payment = register_participation(member, event.uuid, {}, [])

        assert participation.status == ParticipationStatus.CONFIRMED
        assert Participation.objects.filter(event=event).count() == 2

    def test_not_eligible(self):
        event = self.create_event(eligibility="IIIT only")
        member = self.create_participant(participant_type=ParticipantType.NON_IIIT)

        with pytest.raises(PermissionError) as exc:
            register_participation(member, event.uuid, {}, [])
        assert exc.value.message == "You are not eligible for this event"

    def test_full_event_is_reported_before_eligibility(self):
        event = self.create_event(reg_limit=1, eligibility="iiit")
        register_participation(self.create_participant(), event.uuid, {}, [])
        outsider = self.create_participant(participant_type=ParticipantType.NON_IIIT)

        with pytest.raises(ConflictError):
            register_participation(outsider, event.uuid, {}, [])

    def test_invalid_form_creates_nothing(self):
        event = self.create_event()
        self.create_form_field(event, "track", FieldType.SELECT, required=True, options=["A", "B"])

        with pytest.raises(ValidationError) as exc:
            register_participation(self.participant(), event.uuid, {"track": "C"}, [])

        assert exc.value.message == "Invalid option for field track"
        assert not Participation.objects.exists()
        assert not self.reload(event).is_form_locked


class TestCancelParticipation(TestCase, BaseTestCase):
    """Test cancellation by the participant and rejection by staff"""

    def test_cancel_pending_rejects_payment(self):
        event = self.create_event(reg_fee=Decimal("50.00"))
        member = self.participant()
        participation, _ticket, _payment = register_participation(member, event.uuid, {}, [], proof_url="proof.png")

        participation, payment = cancel_participation(member, participation.uuid)

        assert participation.status == ParticipationStatus.CANCELLED
        assert payment.status == PaymentStatus.REJECTED
        assert payment.decided_by is None

    def test_cancel_confirmed_keeps_ticket_record(self):
        event = self.create_event()
        member = self.participant()
        participation, ticket, _payment = register_participation(member, event.uuid, {}, [])

        participation, payment = cancel_participation(member, participation.uuid)

        assert participation.status == ParticipationStatus.CANCELLED
        assert participation.ticket_id is None
        assert payment is None
        assert Ticket.objects.filter(ticket_id=ticket.ticket_id).exists()

    def test_cancel_is_idempotent_on_terminal_status(self):
        event = self.create_event()
        member = self.participant()
        participation, _ticket, _payment = register_participation(member, event.uuid, {}, [])
        cancel_participation(member, participation.uuid)

        participation, _payment = cancel_participation(member, participation.uuid)

        assert participation.status == ParticipationStatus.CANCELLED

    def test_cannot_cancel_someone_else(self):
        event = self.create_event()
        participation, _ticket, _payment = register_participation(self.create_participant(), event.uuid, {}, [])

        with pytest.raises(NotFoundError):
            cancel_participation(self.create_participant(), participation.uuid)

        assert self.reload(participation).status == ParticipationStatus.CONFIRMED

    def test_organizer_rejects(self):
        organizer = self.create_organizer()
        event = self.create_event(organizer=organizer, reg_fee=Decimal("50.00"))
        participation, _ticket, _payment = register_participation(
            self.participant(), event.uuid, {}, [], proof_url="proof.png"
        )

        participation, payment = reject_participation(organizer, participation.uuid)

        assert participation.status == ParticipationStatus.REJECTED
        assert payment.status == PaymentStatus.REJECTED
        assert payment.decided_by == organizer

    def test_admin_rejects_any_event(self):
        event = self.create_event()
        participation, _ticket, _payment = register_participation(self.participant(), event.uuid, {}, [])

        participation, _payment = reject_participation(self.create_admin(), participation.uuid)

        assert participation.status == ParticipationStatus.REJECTED

    def test_other_organizer_cannot_reject(self):
        event = self.create_event(organizer=self.create_organizer())
        participation, _ticket, _payment = register_participation(self.participant(), event.uuid, {}, [])

        with pytest.raises(PermissionError):
            reject_participation(self.create_organizer(), participation.uuid)

        assert self.reload(participation).status == ParticipationStatus.CONFIRMED

    def test_rejected_is_not_cancelled_afterwards(self):
        organizer = self.create_organizer()
        event = self.create_event(organizer=organizer)
        member = self.participant()
        participation, _ticket, _payment = register_participation(member, event.uuid, {}, [])
        reject_participation(organizer, participation.uuid)

        participation, _payment = cancel_participation(member, participation.uuid)

        assert participation.status == ParticipationStatus.REJECTED
        assert Payment.objects.count() == 0
        assert Event.objects.get(pk=event.pk).is_form_locked
