"""
Strict trip and expense records.

The aggregation engine only ever sees these shapes. Raw input (document-store
style dictionaries or ORM instances) is validated and coerced here, at the
store-adapter boundary, so a single corrupt field degrades to a default value
instead of blanking out a whole report.

Coercion rules:
    - amounts and budgets: non-numeric, NaN, infinite, negative or above
      MAX_AMOUNT -> 0
    - category: missing or blank -> 'Other'
    - paid_by: missing or blank -> 'You'
    - dates: any shape accepted by ``normalize_timestamp``; unreadable -> None
    - category budgets: non-mapping -> {}; blank or zero allocations dropped
    - members: list of member documents, or a bare head count (finite
      numbers are truncated to an int)
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple

from .timestamps import normalize_timestamp, normalize_moment

ZERO = Decimal('0.00')
# Largest amount the stores can hold (12 digits, 2 decimal places)
MAX_AMOUNT = Decimal('9999999999.99')

DEFAULT_CATEGORY = 'Other'
DEFAULT_PAYER = 'You'


def coerce_amount(value: Any) -> Decimal:
    """Read a monetary amount defensively; anything unusable becomes zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, float):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            return ZERO
    except (InvalidOperation, ValueError):
        return ZERO

    if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
        return ZERO
    return amount


def coerce_head_count(value: Any) -> Optional[int]:
    """Read a bare head count; None when the value is not a usable number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return max(0, int(value))


def _clean_text(value: Any, default: str = '') -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


@dataclass(frozen=True)
class MemberRecord:
    id: str
    name: str = ''
    email: str = ''
    is_owner: bool = False


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    amount: Decimal
    category: str = DEFAULT_CATEGORY
    title: str = ''
    date: Optional[date] = None
    created_at: Optional[datetime] = None
    paid_by: str = DEFAULT_PAYER


@dataclass(frozen=True)
class TripRecord:
    id: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_budget: Decimal = ZERO
    category_budgets: Dict[str, Decimal] = field(default_factory=dict)
    members: Tuple[MemberRecord, ...] = ()
    member_count: int = 0


# =============================================================================
# Document adapters
# =============================================================================

def _category_budgets(raw: Any) -> Dict[str, Decimal]:
    if not isinstance(raw, Mapping):
        return {}
    budgets = {}
    for name, allocation in raw.items():
        amount = coerce_amount(allocation)
        label = _clean_text(name)
        if label and amount > 0:
            budgets[label] = amount
    return budgets


def member_record_from_document(data: Any, index: int = 0) -> MemberRecord:
    if not isinstance(data, Mapping):
        return MemberRecord(id=str(index), name=_clean_text(data))
    return MemberRecord(
        id=_clean_text(data.get('id'), str(index)),
        name=_clean_text(data.get('name')),
        email=_clean_text(data.get('email')),
        is_owner=bool(data.get('isOwner', False)),
    )


def _members(raw: Any) -> Tuple[Tuple[MemberRecord, ...], int]:
    if raw is None:
        # The acting user always travels on their own trip
        return (), 1
    if isinstance(raw, bool):
        return (), 1
    if isinstance(raw, (int, float)):
        count = coerce_head_count(raw)
        return (), 1 if count is None else count
    if isinstance(raw, (list, tuple)):
        members = tuple(
            member_record_from_document(item, index)
            for index, item in enumerate(raw)
        )
        return members, len(members)
    return (), 1


def expense_record_from_document(doc_id: Any, data: Mapping) -> ExpenseRecord:
    """Coerce one raw expense document into an ``ExpenseRecord``."""
    return ExpenseRecord(
        id=str(doc_id),
        title=_clean_text(data.get('title')),
        category=_clean_text(data.get('category'), DEFAULT_CATEGORY),
        amount=coerce_amount(data.get('amount')),
        date=normalize_timestamp(data.get('date')),
        created_at=normalize_moment(data.get('createdAt')),
        paid_by=_clean_text(data.get('paidBy'), DEFAULT_PAYER),
    )


def trip_record_from_document(doc_id: Any, data: Mapping) -> TripRecord:
    """
    Coerce one raw trip document into a ``TripRecord``.

    ``totalBudget`` is authoritative; the legacy ``budget`` field is only read
    when ``totalBudget`` is absent.
    """
    raw_budget = data.get('totalBudget')
    if raw_budget is None:
        raw_budget = data.get('budget')

    members, member_count = _members(data.get('members'))

    return TripRecord(
        id=str(doc_id),
        name=_clean_text(data.get('name'), 'Untitled Trip'),
        start_date=normalize_timestamp(data.get('startDate')),
        end_date=normalize_timestamp(data.get('endDate')),
        total_budget=coerce_amount(raw_budget),
        category_budgets=_category_budgets(data.get('categoryBudgets')),
        members=members,
        member_count=member_count,
    )


# =============================================================================
# ORM adapters
# =============================================================================

def expense_record_from_model(expense) -> ExpenseRecord:
    """Build an ``ExpenseRecord`` from an ``apps.expenses.models.Expense``."""
    return ExpenseRecord(
        id=str(expense.id),
        title=expense.title or '',
        category=_clean_text(expense.category, DEFAULT_CATEGORY),
        amount=coerce_amount(expense.amount),
        date=normalize_timestamp(expense.date),
        created_at=expense.created_at,
        paid_by=_clean_text(expense.paid_by, DEFAULT_PAYER),
    )


def trip_record_from_model(trip) -> TripRecord:
    """
    Build a ``TripRecord`` from an ``apps.trips.models.Trip``.

    Members are read through ``trip.members.all()`` so a prefetched queryset
    is reused.
    """
    members = tuple(
        MemberRecord(
            id=str(member.id),
            name=member.get_display_name(),
            email=member.email,
            is_owner=member.is_owner,
        )
        for member in trip.members.all()
    )
    return TripRecord(
        id=str(trip.id),
        name=trip.name,
        start_date=normalize_timestamp(trip.start_date),
        end_date=normalize_timestamp(trip.end_date),
        total_budget=coerce_amount(trip.total_budget),
        category_budgets=_category_budgets(trip.category_budgets),
        members=members,
        member_count=len(members),
    )
