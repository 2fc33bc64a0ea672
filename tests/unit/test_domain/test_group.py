"""Tests for the group aggregate and the events it records."""

from __future__ import annotations

import pytest

from koru_service.core.events.models import (
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseModified,
    GroupCreated,
    GroupDeleted,
    MemberColorChanged,
    MemberJoined,
    Settled,
)
from koru_service.core.exceptions import ConflictException, ForbiddenException, NotFoundException
from koru_service.domain.group import Group
from koru_service.domain.user import User
from koru_service.domain.values import MemberColor


@pytest.fixture
def alice() -> User:
    return User.create("Alice", "alice@koru.test")


@pytest.fixture
def bob() -> User:
    return User.create("Bob", "bob@koru.test")


@pytest.fixture
def group(alice: User, bob: User) -> Group:
    group = Group.create("Trip", alice, MemberColor.default())
    group.add_member(bob, MemberColor(red=255, green=0, blue=0))
    return group


@pytest.mark.unit
class TestMembership:
    def test_create_records_group_created_by_admin(self, alice: User):
        group = Group.create("Trip", alice, MemberColor.default())

        [event] = group.pull_events()
        assert isinstance(event.kind, GroupCreated)
        assert event.member_id == alice.id
        assert event.group_id == group.id
        assert group.member(alice.id).is_admin

    def test_join_records_member_joined(self, group: Group, bob: User):
        kinds = [type(e.kind) for e in group.pull_events()]
        assert kinds == [GroupCreated, MemberJoined]
        assert group.is_member(bob.id)
        assert group.pull_events() == []

    def test_joining_twice_conflicts(self, group: Group, bob: User):
        with pytest.raises(ConflictException):
            group.add_member(bob, MemberColor.default())

    def test_change_color_records_previous_value(self, group: Group, bob: User):
        group.pull_events()

        group.change_member_color(bob.id, MemberColor(red=1, green=1, blue=1))

        [event] = group.pull_events()
        assert isinstance(event.kind, MemberColorChanged)
        assert event.kind.previous_color == MemberColor(red=255, green=0, blue=0)

    def test_outsider_cannot_change_color(self, group: Group):
        outsider = User.create("Eve", "eve@koru.test")
        with pytest.raises(ForbiddenException):
            group.change_member_color(outsider.id, MemberColor.default())


@pytest.mark.unit
class TestExpenses:
    def test_member_adds_expense(self, group: Group, bob: User):
        group.pull_events()

        expense = group.add_expense(bob.id, "Fuel", "40")

        [event] = group.pull_events()
        assert isinstance(event.kind, ExpenseCreated)
        assert event.kind.id == expense.id
        assert event.member_id == bob.id

    def test_outsider_cannot_add_expense(self, group: Group):
        outsider = User.create("Eve", "eve@koru.test")
        with pytest.raises(ForbiddenException):
            group.add_expense(outsider.id, "Fuel", "40")

    def test_admin_may_edit_any_expense(self, group: Group, alice: User, bob: User):
        expense = group.add_expense(bob.id, "Fuel", "40")
        group.pull_events()

        group.update_expense(alice.id, expense, "Diesel", "45")

        [event] = group.pull_events()
        assert isinstance(event.kind, ExpenseModified)
        assert event.kind.previous_description == "Fuel"
        assert expense.title == "Diesel"
        assert expense.modified_at is not None

    def test_other_member_cannot_edit(self, group: Group, alice: User, bob: User):
        expense = group.add_expense(alice.id, "Hotel", "120")
        with pytest.raises(ForbiddenException):
            group.delete_expense(bob.id, expense)

    def test_missing_expense_not_found(self, group: Group, alice: User):
        with pytest.raises(NotFoundException):
            group.delete_expense(alice.id, None)

    def test_settled_expense_is_frozen(self, group: Group, alice: User):
        expense = group.add_expense(alice.id, "Hotel", "120")
        expense.settle()
        with pytest.raises(ConflictException):
            group.update_expense(alice.id, expense, "Hotel", "100")

    def test_delete_records_expense_deleted(self, group: Group, bob: User):
        expense = group.add_expense(bob.id, "Fuel", "40")
        group.pull_events()

        group.delete_expense(bob.id, expense)

        [event] = group.pull_events()
        assert event.kind == ExpenseDeleted(id=expense.id)


@pytest.mark.unit
class TestSettleAndDelete:
    def test_only_admin_settles(self, group: Group, bob: User):
        with pytest.raises(ForbiddenException):
            group.settle(bob.id, [], None)

    def test_settle_starts_where_last_settlement_ended(self, group: Group, alice: User):
        first = group.settle(alice.id, [], None)
        second = group.settle(alice.id, [], first)

        events = group.pull_events()
        assert isinstance(events[-1].kind, Settled)
        assert second.start_date == first.end_date

    def test_only_admin_deletes(self, group: Group, alice: User, bob: User):
        with pytest.raises(ForbiddenException):
            group.delete(bob.id)
        group.pull_events()

        group.delete(alice.id)

        [event] = group.pull_events()
        assert isinstance(event.kind, GroupDeleted)
