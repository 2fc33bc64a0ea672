from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from koru_service.core.events.models import (
    UserCreated,
    UserDeleted,
    UserEvent,
    UserLogin,
    UserLogout,
    utc_now,
)
from koru_service.domain.values import parse_email, parse_name


@dataclass
class User:
    """A registered account. Pending events are drained by the use case that saves it."""

    id: UUID
    name: str
    email: str
    created_at: datetime
    events: list[UserEvent] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def create(cls, name: str, email: str) -> User:
        user = cls(
            id=uuid4(),
            name=parse_name(name),
            email=parse_email(email),
            created_at=utc_now(),
        )
        user._record(UserCreated(name=user.name, email=user.email))
        return user

    def login(self) -> None:
        self._record(UserLogin())

    def logout(self) -> None:
        self._record(UserLogout())

    def delete(self) -> None:
        self._record(UserDeleted())

    def pull_events(self) -> list[UserEvent]:
        events, self.events = self.events, []
        return events

    def _record(self, kind: UserCreated | UserLogin | UserLogout | UserDeleted) -> None:
        self.events.append(UserEvent(user_id=self.id, kind=kind))
