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

import threading

import pytest
from django.db import connection
from django.test import TransactionTestCase

from felicity.accounting.payment import approve_payment
from felicity.models.event import MerchVariant
from felicity.models.participation import Participation, ParticipationStatus
from felicity.services.participation import cancel_participation, purchase_merch, register_participation
from felicity.tests.unit.base import BaseTestCase
from felicity.utils.exceptions import ParticipationError

requires_row_locks = pytest.mark.skipif(
    connection.vendor != "postgresql", reason="row level locking needs PostgreSQL"
)


def run_concurrently(*calls):
    """Run the calls in parallel threads, returning each result or raised error."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(index, call):
        barrier.wait()
        try:
            results[index] = call()
        except ParticipationError as err:
            results[index] = err
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(index, call)) for index, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


@requires_row_locks
class TestConcurrentParticipation(TransactionTestCase, BaseTestCase):
    """Test that capacity and stock hold under concurrent requests"""

    def test_last_slot_goes_to_one_registration(self):
        event = self.create_event(reg_limit=1)
        first = self.create_participant()
        second = self.create_participant()

        results = run_concurrently(
            lambda: register_participation(first, event.uuid, {}, []),
            lambda: register_participation(second, event.uuid, {}, []),
        )

        errors = [result for result in results if isinstance(result, ParticipationError)]
        assert len(errors) == 1
        assert errors[0].status_code == 409
        assert Participation.objects.active().filter(event=event).count() == 1

    def test_same_member_registers_once(self):
        event = self.create_event()
        member = self.participant()

        results = run_concurrently(
            lambda: register_participation(member, event.uuid, {}, []),
            lambda: register_participation(member, event.uuid, {}, []),
        )

        assert sum(isinstance(result, ParticipationError) for result in results) == 1
        assert Participation.objects.filter(event=event, member=member).count() == 1

    def test_approvals_never_oversell(self):
        organizer = self.create_organizer()
        event = self.create_merch_event(organizer=organizer)
        self.create_variant(event, sku="TEE-M", stock=1)
        orders = [
            purchase_merch(self.create_participant(), event.uuid, "TEE-M", 1, proof_url="proof.png")[0]
            for _idx in range(2)
        ]

        results = run_concurrently(*[lambda uuid=order.uuid: approve_payment(uuid, organizer) for order in orders])

        assert sum(isinstance(result, ParticipationError) for result in results) == 1
        assert MerchVariant.objects.get(event=event).stock == 0
        assert Participation.objects.filter(event=event, status=ParticipationStatus.CONFIRMED).count() == 1

    def test_total_stock_follows_parallel_variant_changes(self):
        organizer = self.create_organizer()
        event = self.create_merch_event(organizer=organizer)
        self.create_variant(event, sku="TEE-M", stock=5)
        self.create_variant(event, sku="TEE-L", stock=5)
        buyers = [self.create_participant() for _idx in range(2)]
        orders = [
            purchase_merch(buyer, event.uuid, sku, 2, proof_url="proof.png")[0]
            for buyer, sku in zip(buyers, ["TEE-M", "TEE-L"])
        ]

        results = run_concurrently(*[lambda uuid=order.uuid: approve_payment(uuid, organizer) for order in orders])

        assert not any(isinstance(result, ParticipationError) for result in results)
        assert self.reload(event).total_stock == 6

        run_concurrently(
            *[
                lambda buyer=buyer, uuid=order.uuid: cancel_participation(buyer, uuid)
                for buyer, order in zip(buyers, orders)
            ]
        )

        assert self.reload(event).total_stock == 10
        assert sorted(MerchVariant.objects.filter(event=event).values_list("stock", flat=True)) == [5, 5]
