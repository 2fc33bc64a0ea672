"""Validated value objects shared by entities and events."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from koru_service.core.exceptions import ValidationException

CENTS = Decimal("0.01")


class MemberColor(BaseModel):
    """RGB color a member picks inside a group."""

    model_config = ConfigDict(frozen=True)

    red: int = Field(ge=0, le=255)
    green: int = Field(ge=0, le=255)
    blue: int = Field(ge=0, le=255)

    @classmethod
    def default(cls) -> MemberColor:
        return cls(red=0, green=255, blue=0)

    @classmethod
    def parse(cls, value: str | None) -> MemberColor:
        """Parse ``"r,g,b"``; ``None`` or blank yields the default color."""
        if value is None or not value.strip():
            return cls.default()
        parts = [part.strip() for part in value.split(",")]
        if len(parts) != 3:
            raise ValidationException(
                detail="Color must have the form 'red,green,blue'",
                extra={"field": "color", "value": value},
            )
        try:
            red, green, blue = (int(part) for part in parts)
        except ValueError:
            raise ValidationException(
                detail="Color components must be integers",
                extra={"field": "color", "value": value},
            ) from None
        if not all(0 <= c <= 255 for c in (red, green, blue)):
            raise ValidationException(
                detail="Color components must be between 0 and 255",
                extra={"field": "color", "value": value},
            )
        return cls(red=red, green=green, blue=blue)

    def __str__(self) -> str:
        return f"{self.red},{self.green},{self.blue}"


class Transaction(BaseModel):
    """One transfer produced by a settlement: ``from_id`` pays ``to_id``."""

    model_config = ConfigDict(frozen=True)

    from_id: UUID
    to_id: UUID
    amount: Decimal


def parse_name(value: str | None, field: str = "name") -> str:
    """Return a stripped, non-empty name."""
    if value is None or not value.strip():
        raise ValidationException(
            detail=f"{field.capitalize()} cannot be empty",
            extra={"field": field},
        )
    return value.strip()


def parse_email(value: str | None) -> str:
    if value is None:
        raise ValidationException(detail="Email cannot be empty", extra={"field": "email"})
    local, sep, domain = value.strip().partition("@")
    if not sep or not local or not domain or "@" in domain:
        raise ValidationException(
            detail="Email address is invalid",
            extra={"field": "email", "value": value},
        )
    return f"{local}@{domain}".lower()


def parse_amount(value: Any) -> Decimal:
    """Return a strictly positive amount rounded to cents."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationException(
            detail="Amount must be a number",
            extra={"field": "amount", "value": str(value)},
        ) from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationException(
            detail="Amount must be greater than 0",
            extra={"field": "amount", "value": str(value)},
        )
    amount = amount.quantize(CENTS)
    if amount <= 0:
        raise ValidationException(
            detail="Amount must be at least 0.01",
            extra={"field": "amount", "value": str(value)},
        )
    return amount
