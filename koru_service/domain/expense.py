from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from koru_service.core.events.models import utc_now
from koru_service.domain.values import parse_amount, parse_name


@dataclass
class Expense:
    id: UUID
    group_id: UUID
    member_id: UUID
    title: str
    amount: Decimal
    created_at: datetime
    modified_at: datetime | None = None
    settled: bool = False

    @classmethod
    def create(cls, group_id: UUID, member_id: UUID, title: str, amount: object) -> Expense:
        return cls(
            id=uuid4(),
            group_id=group_id,
            member_id=member_id,
            title=parse_name(title, field="title"),
            amount=parse_amount(amount),
            created_at=utc_now(),
        )

    def update(self, title: str, amount: object) -> None:
        self.title = parse_name(title, field="title")
        self.amount = parse_amount(amount)
        self.modified_at = utc_now()

    def settle(self) -> None:
        self.settled = True
