"""Settlement of a group's unsettled expenses.

Each member's delta is what they paid minus the group average. Deltas are
sorted and the biggest debtor pays the biggest creditor until every delta
is within ``MARGIN`` of zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
import logging
from uuid import UUID, uuid4

from koru_service.core.events.models import utc_now
from koru_service.core.exceptions import InternalServerException
from koru_service.domain.expense import Expense
from koru_service.domain.values import CENTS, Transaction

logger = logging.getLogger(__name__)

MARGIN = Decimal("0.001")


@dataclass
class Settlement:
    id: UUID
    group_id: UUID
    start_date: datetime | None
    end_date: datetime
    transactions: list[Transaction] = field(default_factory=list)
    expense_ids: list[UUID] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        group_id: UUID,
        start_date: datetime | None,
        expenses: Sequence[Expense],
        member_ids: Sequence[UUID],
    ) -> Settlement:
        """Compute transactions and mark ``expenses`` settled."""
        transactions = compute_transactions(expenses, member_ids)
        for expense in expenses:
            expense.settle()
        return cls(
            id=uuid4(),
            group_id=group_id,
            start_date=start_date,
            end_date=utc_now(),
            transactions=transactions,
            expense_ids=[expense.id for expense in expenses],
        )


def member_deltas(expenses: Sequence[Expense], member_ids: Sequence[UUID]) -> dict[UUID, Decimal]:
    paid: dict[UUID, Decimal] = {member_id: Decimal(0) for member_id in member_ids}
    for expense in expenses:
        paid[expense.member_id] = paid.get(expense.member_id, Decimal(0)) + expense.amount
    if not paid:
        return {}
    average = sum(paid.values(), Decimal(0)) / len(paid)
    return {member_id: amount - average for member_id, amount in paid.items()}


def compute_transactions(
    expenses: Sequence[Expense],
    member_ids: Sequence[UUID],
) -> list[Transaction]:
    """Pair debtors with creditors.

    Raises:
        InternalServerException: Deltas do not balance or the pairing does
            not converge.
    """
    deltas = member_deltas(expenses, member_ids)
    if len(deltas) <= 1:
        return []

    if abs(sum(deltas.values(), Decimal(0))) > MARGIN:
        logger.error("Cannot settle, deltas do not sum to zero", extra={"deltas": deltas})
        raise InternalServerException(detail="Settlement computation failed")

    ordered = sorted(deltas.items(), key=lambda item: item[1])
    balances = [balance for _, balance in ordered]
    iteration_limit = len(ordered) * 10

    transactions: list[Transaction] = []
    iterations = 0
    i, j = 0, len(ordered) - 1
    while i < j and iterations < iteration_limit:
        transfer = min(abs(balances[i]), balances[j])
        amount = transfer.quantize(CENTS)
        if amount > 0:
            transactions.append(
                Transaction(from_id=ordered[i][0], to_id=ordered[j][0], amount=amount),
            )
        balances[i] += transfer
        balances[j] -= transfer
        if abs(balances[i]) <= MARGIN:
            i += 1
        if abs(balances[j]) <= MARGIN:
            j -= 1
        iterations += 1

    if i < j:
        logger.error("Settlement did not converge", extra={"iterations": iterations})
        raise InternalServerException(detail="Settlement computation failed")
    return transactions
