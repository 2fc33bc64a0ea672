"""Tests for settlement computation."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from koru_service.domain.expense import Expense
from koru_service.domain.settlement import Settlement, compute_transactions, member_deltas


def _expense(group_id, member_id, amount: str) -> Expense:
    return Expense.create(group_id, member_id, "Shared", amount)


@pytest.mark.unit
class TestComputeTransactions:
    def test_single_payer_is_reimbursed_by_everyone(self):
        group_id = uuid4()
        alice, bob, carol = uuid4(), uuid4(), uuid4()

        transactions = compute_transactions([_expense(group_id, alice, "90")], [alice, bob, carol])

        assert {(t.from_id, t.to_id, t.amount) for t in transactions} == {
            (bob, alice, Decimal("30.00")),
            (carol, alice, Decimal("30.00")),
        }

    def test_balanced_group_needs_no_transfer(self):
        group_id = uuid4()
        alice, bob = uuid4(), uuid4()
        expenses = [_expense(group_id, alice, "25"), _expense(group_id, bob, "25")]

        assert compute_transactions(expenses, [alice, bob]) == []

    def test_single_member_needs_no_transfer(self):
        alice = uuid4()
        assert compute_transactions([_expense(uuid4(), alice, "10")], [alice]) == []

    def test_uneven_split_settles_every_delta(self):
        group_id = uuid4()
        members = [uuid4() for _ in range(3)]
        expenses = [_expense(group_id, members[0], "100"), _expense(group_id, members[1], "0.01")]

        transactions = compute_transactions(expenses, members)

        deltas = member_deltas(expenses, members)
        for member_id, delta in deltas.items():
            paid = sum((t.amount for t in transactions if t.from_id == member_id), Decimal(0))
            received = sum((t.amount for t in transactions if t.to_id == member_id), Decimal(0))
            assert abs(delta + paid - received) <= Decimal("0.01")

    def test_expense_from_former_member_still_counts(self):
        group_id = uuid4()
        alice, ghost = uuid4(), uuid4()

        deltas = member_deltas([_expense(group_id, ghost, "20")], [alice])

        assert deltas == {alice: Decimal(-10), ghost: Decimal(10)}


@pytest.mark.unit
class TestSettlement:
    def test_create_settles_expenses(self):
        group_id = uuid4()
        alice, bob = uuid4(), uuid4()
        expenses = [_expense(group_id, alice, "30")]

        settlement = Settlement.create(group_id, None, expenses, [alice, bob])

        assert all(e.settled for e in expenses)
        assert settlement.expense_ids == [expenses[0].id]
        assert settlement.transactions[0].amount == Decimal("15.00")
        assert settlement.start_date is None
