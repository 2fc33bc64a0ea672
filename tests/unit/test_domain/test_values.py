"""Tests for value parsing."""

from __future__ import annotations

from decimal import Decimal

import pytest

from koru_service.core.exceptions import ValidationException
from koru_service.domain.values import MemberColor, parse_amount, parse_email, parse_name


@pytest.mark.unit
class TestMemberColor:
    def test_parse_components(self):
        assert MemberColor.parse("255, 0 ,10") == MemberColor(red=255, green=0, blue=10)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_color_is_green(self, value):
        assert MemberColor.parse(value) == MemberColor(red=0, green=255, blue=0)

    @pytest.mark.parametrize("value", ["red", "1,2", "1,2,3,4", "0,256,0", "-1,0,0", "a,b,c"])
    def test_invalid_color_rejected(self, value):
        with pytest.raises(ValidationException) as exc_info:
            MemberColor.parse(value)
        assert exc_info.value.status_code == 422

    def test_str_is_parseable(self):
        color = MemberColor(red=12, green=34, blue=56)
        assert MemberColor.parse(str(color)) == color


@pytest.mark.unit
class TestScalars:
    def test_name_is_stripped(self):
        assert parse_name("  Trip ") == "Trip"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationException, match="Title cannot be empty"):
            parse_name(" ", field="title")

    def test_email_is_lowercased(self):
        assert parse_email("Alice@Koru.Test") == "alice@koru.test"

    @pytest.mark.parametrize("value", ["alice", "@koru.test", "alice@", "a@b@c"])
    def test_malformed_email_rejected(self, value):
        with pytest.raises(ValidationException):
            parse_email(value)

    def test_amount_is_rounded_to_cents(self):
        assert parse_amount("10.006") == Decimal("10.01")
        assert parse_amount(12) == Decimal("12.00")

    @pytest.mark.parametrize("value", ["0", "-5", "abc", "NaN", "0.001"])
    def test_non_positive_amount_rejected(self, value):
        with pytest.raises(ValidationException):
            parse_amount(value)
