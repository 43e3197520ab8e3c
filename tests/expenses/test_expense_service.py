from __future__ import annotations

import io
import threading
import time
from decimal import Decimal

import pytest

from geo_dateam.core.enums import ExpenseStatus, Role
from geo_dateam.core.exceptions import (
    DuplicateRecordError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from geo_dateam.expenses.service import ExpenseService
from geo_dateam.receipts.storage import LocalReceiptStorage
from geo_dateam.store.memory_store import InMemoryRecordStore

from conftest import WORK_DAY


def _submit(container, user_id, amount="42.50", **overrides):
    fields = dict(expense_date=WORK_DAY, amount=amount, category="repas", description="Client lunch")
    fields.update(overrides)
    return container.expense_service.submit(user_id, **fields)


def test_submitted_expense_is_listed_as_pending(container, make_user):
    alice = make_user("Alice")

    expense = _submit(container, alice.user_id)

    listed = container.expense_service.list_for_user(alice.user_id)
    assert listed == [expense]
    assert listed[0].status == ExpenseStatus.PENDING
    assert listed[0].amount == Decimal("42.50")


@pytest.mark.parametrize("amount", ["0", "-3", "abc", None, "0.001", True, "100000000", "99999999.996"])
def test_invalid_amounts_are_rejected(container, amount):
    with pytest.raises(ValidationError):
        _submit(container, "u1", amount=amount)


def test_amount_is_rounded_to_cents(container):
    assert _submit(container, "u1", amount="10.005").amount == Decimal("10.01")
    assert _submit(container, "u1", amount=19.9).amount == Decimal("19.90")


def test_missing_fields_are_rejected(container):
    with pytest.raises(ValidationError):
        _submit(container, "u1", description="  ")
    with pytest.raises(ValidationError):
        _submit(container, "u1", expense_date="04/03/2024")
    with pytest.raises(ValidationError):
        _submit(container, "u1", category="")


def test_approve_pending_expense(container):
    expense = _submit(container, "u1")

    container.expense_service.set_status(expense.expense_id, "approved")

    assert container.expense_service.get(expense.expense_id).status == ExpenseStatus.APPROVED


def test_resolved_expense_cannot_change_again(container):
    expense = _submit(container, "u1")
    container.expense_service.set_status(expense.expense_id, ExpenseStatus.REJECTED)

    with pytest.raises(InvalidTransitionError):
        container.expense_service.set_status(expense.expense_id, ExpenseStatus.APPROVED)
    assert container.expense_service.get(expense.expense_id).status == ExpenseStatus.REJECTED


@pytest.mark.parametrize("status", ["pending", "paid", ""])
def test_set_status_rejects_invalid_targets(container, status):
    expense = _submit(container, "u1")

    with pytest.raises(ValidationError):
        container.expense_service.set_status(expense.expense_id, status)


def test_set_status_unknown_expense(container):
    with pytest.raises(NotFoundError):
        container.expense_service.set_status("missing", "approved")


def test_rejected_expense_leaves_pending_list(container, make_user):
    bob = make_user("Bob")
    lunch = _submit(container, bob.user_id, amount="42.50")
    fuel = _submit(container, bob.user_id, amount="60.00", category="carburant")

    container.expense_service.set_status(lunch.expense_id, "rejected")

    pending = container.expense_service.list_pending_with_owner()
    assert [p.expense.expense_id for p in pending] == [fuel.expense_id]
    assert pending[0].owner_name == "Bob"
    assert pending[0].owner_email == bob.email


def test_list_filters(container):
    first = _submit(container, "u1", expense_date="2024-03-01", category="repas")
    second = _submit(container, "u1", expense_date="2024-03-10", category="transport")
    _submit(container, "u2")
    container.expense_service.set_status(second.expense_id, "approved")

    service = container.expense_service
    assert service.list_for_user("u1", start="2024-03-05") == [service.get(second.expense_id)]
    assert service.list_for_user("u1", end="2024-03-05") == [first]
    assert service.list_for_user("u1", category="repas") == [first]
    assert [e.expense_id for e in service.list_for_user("u1", status="approved")] == [second.expense_id]
    with pytest.raises(ValidationError):
        service.list_for_user("u1", status="paid")


def test_newest_first_ordering(container):
    ids = [_submit(container, "u1").expense_id for _ in range(3)]

    assert [e.expense_id for e in container.expense_service.list_for_user("u1")] == ids[::-1]


def test_receipt_visible_to_owner_and_admin_only(container):
    ref = container.expense_service.store_receipt(io.BytesIO(b"%PDF-1.4"), "ticket.pdf")
    expense = _submit(container, "owner", receipt_ref=ref)

    stream, got_ref = container.expense_service.open_receipt(
        expense.expense_id, requester_id="owner", requester_role=Role.EMPLOYEE
    )
    with stream:
        assert stream.read() == b"%PDF-1.4"
    assert got_ref.endswith(".pdf")

    stream, _ = container.expense_service.open_receipt(
        expense.expense_id, requester_id="boss", requester_role=Role.ADMIN
    )
    stream.close()

    with pytest.raises(NotFoundError):
        container.expense_service.open_receipt(
            expense.expense_id, requester_id="someone", requester_role=Role.EMPLOYEE
        )


def test_receipt_missing(container):
    expense = _submit(container, "owner")

    with pytest.raises(NotFoundError):
        container.expense_service.open_receipt(expense.expense_id, requester_id="owner", requester_role=Role.EMPLOYEE)


def test_largest_storable_amount_is_accepted(container):
    assert _submit(container, "u1", amount="99999999.99").amount == Decimal("99999999.99")


def test_rejected_submission_leaves_no_receipt_file(container, tmp_path):
    upload_dir = tmp_path / "uploads"

    with pytest.raises(ValidationError):
        _submit(container, "u1", amount="-5", receipt=(io.BytesIO(b"png"), "ticket.png"))

    assert list(upload_dir.iterdir()) == []
    assert container.expense_service.list_for_user("u1") == []


def test_receipt_is_saved_with_valid_submission(container, tmp_path):
    expense = _submit(container, "u1", receipt=(io.BytesIO(b"png"), "ticket.png"))

    assert [p.name for p in (tmp_path / "uploads").iterdir()] == [expense.receipt_ref]


class RefusingStore(InMemoryRecordStore):
    def insert(self, collection, entity):
        raise DuplicateRecordError("Duplicate expenses record")


def test_failed_insert_removes_saved_receipt(tmp_path):
    service = ExpenseService(RefusingStore(), LocalReceiptStorage(tmp_path))

    with pytest.raises(DuplicateRecordError):
        service.submit(
            "u1",
            expense_date=WORK_DAY,
            amount="10",
            category="repas",
            description="x",
            receipt=(io.BytesIO(b"pdf"), "ticket.pdf"),
        )

    assert list(tmp_path.iterdir()) == []


class SlowReadStore(InMemoryRecordStore):
    """Widens the gap between reading the status and writing the new one."""

    def get_by_id(self, collection, entity_id):
        found = super().get_by_id(collection, entity_id)
        time.sleep(0.05)
        return found


def test_concurrent_reviews_resolve_once():
    service = ExpenseService(SlowReadStore())
    expense = service.submit("u1", expense_date=WORK_DAY, amount="10", category="repas", description="x")

    outcomes: list[str] = []

    def review(status):
        try:
            service.set_status(expense.expense_id, status)
            outcomes.append(status)
        except InvalidTransitionError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=review, args=(s,)) for s in ("approved", "rejected")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("conflict") == 1
    winner = next(o for o in outcomes if o != "conflict")
    assert service.get(expense.expense_id).status == ExpenseStatus(winner)
