from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import ExpenseStatus


@dataclass(frozen=True)
class Expense:
    expense_id: str
    user_id: str
    expense_date: str
    amount: Decimal
    category: str
    description: str
    receipt_ref: Optional[str] = None
    status: ExpenseStatus = ExpenseStatus.PENDING
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PendingExpense:
    """Read-model: a pending expense with its owner's identity (admin review list)."""

    expense: Expense
    owner_name: Optional[str]
    owner_email: Optional[str]
