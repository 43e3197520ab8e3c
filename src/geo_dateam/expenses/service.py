from __future__ import annotations

import threading
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, BinaryIO, Optional, Tuple

import structlog

from ..common.datetime_utils import optional_iso_date, require_iso_date
from ..common.validators import parse_decimal, require_non_empty
from ..core.constants import MAX_EXPENSE_AMOUNT
from ..core.enums import Collection, ExpenseStatus, Role
from ..core.exceptions import DomainError, InvalidTransitionError, NotFoundError, ValidationError
from ..receipts.storage import ReceiptStorage
from ..store.repository import RecordStore
from .model import Expense, PendingExpense

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def _newest_first(items: list[Expense]) -> list[Expense]:
    # Stable sort: equal timestamps keep insertion order reversed.
    return sorted(reversed(items), key=lambda e: e.created_at, reverse=True)


class ExpenseService:
    def __init__(self, store: RecordStore, receipts: Optional[ReceiptStorage] = None):
        self._store = store
        self._receipts = receipts
        # Serialises the pending check and the status write.
        self._lock = threading.Lock()

    @staticmethod
    def _parse_amount(value: Any) -> Decimal:
        amount = parse_decimal(value, "Amount")
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        if amount > MAX_EXPENSE_AMOUNT:
            raise ValidationError(f"Amount must not exceed {MAX_EXPENSE_AMOUNT}")
        return amount

    def submit(
        self,
        user_id: str,
        *,
        expense_date: str,
        amount: Any,
        category: str,
        description: str,
        receipt_ref: Optional[str] = None,
        receipt: Optional[Tuple[BinaryIO, str]] = None,
    ) -> Expense:
        """Validate and store a new pending expense.

        ``receipt`` is an uploaded ``(stream, filename)``; it is written only
        once the other fields are valid, and removed again if the insert fails.
        """

        draft = Expense(
            expense_id="",
            user_id=user_id,
            expense_date=require_iso_date(expense_date, "Date"),
            amount=self._parse_amount(amount),
            category=require_non_empty(category, "Category"),
            description=require_non_empty(description, "Description"),
            receipt_ref=receipt_ref or None,
            status=ExpenseStatus.PENDING,
        )

        stored_ref = None
        if receipt is not None:
            stored_ref = self.store_receipt(*receipt)
            draft = replace(draft, receipt_ref=stored_ref)

        try:
            expense = self._store.insert(Collection.EXPENSES, draft)
        except DomainError:
            if stored_ref:
                self._receipts.delete(stored_ref)
            raise

        logger.info("expense_submitted", expense_id=expense.expense_id, user_id=user_id, amount=str(expense.amount))
        return expense

    def get(self, expense_id: str) -> Expense:
        expense = self._store.get_by_id(Collection.EXPENSES, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def list_for_user(
        self,
        user_id: str,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[ExpenseStatus | str] = None,
    ) -> list[Expense]:
        start = optional_iso_date(start, "Start date")
        end = optional_iso_date(end, "End date")
        if status:
            try:
                status = ExpenseStatus(status)
            except ValueError:
                raise ValidationError("Status is invalid")

        def matches(e: Expense) -> bool:
            if e.user_id != user_id:
                return False
            if start and e.expense_date < start:
                return False
            if end and e.expense_date > end:
                return False
            if category and e.category != category:
                return False
            if status and e.status != status:
                return False
            return True

        return _newest_first(list(self._store.scan(Collection.EXPENSES, matches)))

    def set_status(self, expense_id: str, new_status: ExpenseStatus | str) -> Expense:
        try:
            new_status = ExpenseStatus(new_status)
        except ValueError:
            raise ValidationError("Invalid status")
        if new_status == ExpenseStatus.PENDING:
            raise ValidationError("Invalid status")

        with self._lock:
            expense = self.get(expense_id)
            if expense.status != ExpenseStatus.PENDING:
                raise InvalidTransitionError(f"Expense already {expense.status.value}")
            updated = self._store.update_by_id(Collection.EXPENSES, expense_id, status=new_status)

        logger.info("expense_status_changed", expense_id=expense_id, status=new_status.value)
        return updated

    def list_pending_with_owner(self) -> list[PendingExpense]:
        pending = _newest_first(
            list(self._store.scan(Collection.EXPENSES, lambda e: e.status == ExpenseStatus.PENDING))
        )
        out: list[PendingExpense] = []
        for e in pending:
            owner = self._store.get_by_id(Collection.USERS, e.user_id)
            out.append(
                PendingExpense(
                    expense=e,
                    owner_name=owner.name if owner else None,
                    owner_email=owner.email if owner else None,
                )
            )
        return out

    def store_receipt(self, stream: BinaryIO, filename: str) -> str:
        if self._receipts is None:
            raise ValidationError("Receipt uploads are not configured")
        return self._receipts.save(stream, filename)

    def open_receipt(self, expense_id: str, *, requester_id: str, requester_role: Role) -> Tuple[BinaryIO, str]:
        expense = self._store.get_by_id(Collection.EXPENSES, expense_id)
        # Non-owners get the same answer as a missing expense.
        if not expense or (requester_role != Role.ADMIN and expense.user_id != requester_id):
            raise NotFoundError("Expense not found")
        if not expense.receipt_ref:
            raise NotFoundError("No receipt found")

        stream = self._receipts.open(expense.receipt_ref) if self._receipts else None
        if stream is None:
            raise NotFoundError("Receipt file not found")
        return stream, expense.receipt_ref
