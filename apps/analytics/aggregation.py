"""
Aggregation Engine
==================

Pure budget arithmetic over a single trip's expenses. No database access,
no mutation of inputs: each call recomputes everything from the snapshot it
is given, so results only depend on the multiset of expenses, never on the
order they were fetched in.

Classes:
    TripStatus: Lifecycle bucket of a trip relative to a reference day.
    TripAggregation: Static methods computing totals and classifications.

Example:
    Summarizing a trip snapshot::

        from apps.analytics.aggregation import TripAggregation
        from apps.analytics.records import ExpenseRecord

        summary = TripAggregation.summarize(
            budget=Decimal('3000'),
            expenses=[ExpenseRecord(id='1', amount=Decimal('1250'))],
            members=4,
        )
        summary['percent_spent']     # Decimal('41.67')
        summary['per_person_share']  # Decimal('312.50')

Note:
    ``percent_spent`` is clamped to [0, 100]. Overspending is reported through
    ``remaining`` going negative, never through a percentage above 100.
"""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from django.db import models

from .records import ExpenseRecord, TripRecord, coerce_amount, coerce_head_count
from .timestamps import normalize_timestamp, today

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    ratio = part / whole * HUNDRED
    return _money(max(ZERO, min(HUNDRED, ratio)))


def _member_count(members: Any) -> int:
    if members is None or isinstance(members, bool):
        return 0
    if isinstance(members, (int, float)):
        return coerce_head_count(members) or 0
    if isinstance(members, Sequence) and not isinstance(members, str):
        return len(members)
    return 0


class TripStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    UPCOMING = 'upcoming', 'Upcoming'
    HISTORICAL = 'historical', 'Historical'
    UNCLASSIFIABLE = 'unclassifiable', 'Unclassifiable'


class TripAggregation:
    """
    Budget aggregation and trip classification.

    All methods are static and side-effect free. Malformed numbers count as
    zero and malformed dates only drop a record out of date-based grouping;
    nothing here raises on bad data.

    Methods:
        summarize: Totals, percentages and groupings for one trip.
        classify_trip: Active / upcoming / historical / unclassifiable.
        categorize_trips: Bucket many trips by lifecycle.
        snapshot: Recompute a trip's full view from one store snapshot.
    """

    @staticmethod
    def summarize(
        budget: Any,
        expenses: Iterable[ExpenseRecord],
        members: Any = None,
        category_budgets: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Compute the aggregation result for one trip.

        Args:
            budget: Total trip budget. Negative or non-numeric counts as 0.
            expenses: The trip's expenses. May be empty.
            members: Member list or head count, used for the per-person split.
            category_budgets (dict, optional): Allocated amount per category.

        Returns:
            dict: A dictionary containing:
                - total_budget (Decimal)
                - total_spent (Decimal): Sum of every expense amount, including
                  expenses whose date could not be read.
                - remaining (Decimal): ``total_budget - total_spent``; negative
                  when the trip is over budget.
                - percent_spent (Decimal): Clamped to [0, 100], 0 when there is
                  no budget.
                - per_category_totals (dict[str, Decimal]): Category -> spend,
                  in first-seen order.
                - daily_totals (dict[str, Decimal]): ISO day -> spend, in
                  chronological order. Keyed by the expense ``date``.
                - per_person_share (Decimal): 0 when there are no members.
                - daily_average (Decimal): Spend per distinct day with expenses.
                - expense_count (int)
                - member_count (int)
                - ungrouped_count (int): Expenses left out of ``daily_totals``
                  because their date was unreadable.
                - category_breakdown (list[dict]): Spend against allocation per
                  category; budgeted categories first.
        """
        total_budget = coerce_amount(budget)
        total_spent = ZERO
        per_category: Dict[str, Decimal] = {}
        per_day: Dict[date, Decimal] = {}
        expense_count = 0
        ungrouped = 0

        for expense in expenses:
            amount = coerce_amount(expense.amount)
            total_spent += amount
            expense_count += 1

            category = expense.category or 'Other'
            per_category[category] = per_category.get(category, ZERO) + amount

            day = normalize_timestamp(expense.date)
            if day is None:
                ungrouped += 1
            else:
                per_day[day] = per_day.get(day, ZERO) + amount

        member_count = _member_count(members)
        per_person = total_spent / member_count if member_count > 0 else ZERO
        daily_average = total_spent / max(1, len(per_day))

        return {
            'total_budget': _money(total_budget),
            'total_spent': _money(total_spent),
            'remaining': _money(total_budget - total_spent),
            'percent_spent': _percent(total_spent, total_budget),
            'per_category_totals': {
                category: _money(amount) for category, amount in per_category.items()
            },
            'daily_totals': {
                day.isoformat(): _money(per_day[day]) for day in sorted(per_day)
            },
            'per_person_share': _money(per_person),
            'daily_average': _money(daily_average),
            'expense_count': expense_count,
            'member_count': member_count,
            'ungrouped_count': ungrouped,
            'category_breakdown': TripAggregation._category_breakdown(
                per_category, category_budgets or {}
            ),
        }

    @staticmethod
    def _category_breakdown(
        spent_by_category: Dict[str, Decimal],
        category_budgets: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        rows = []
        budgeted = {name: coerce_amount(amount) for name, amount in category_budgets.items()}
        names = list(budgeted) + [name for name in spent_by_category if name not in budgeted]

        for name in names:
            spent = spent_by_category.get(name, ZERO)
            allocation = budgeted.get(name, ZERO)
            rows.append({
                'category': name,
                'spent': _money(spent),
                'budget': _money(allocation),
                'remaining': _money(allocation - spent),
                'percent_spent': _percent(spent, allocation),
            })
        return rows

    @staticmethod
    def classify_trip(start_date: Any, end_date: Any, reference_date: Any = None) -> TripStatus:
        """
        Place a trip in its lifecycle bucket relative to ``reference_date``.

        Both bounds are inclusive. Dates may be any shape accepted by
        ``normalize_timestamp``; a missing or unreadable bound, or a start
        after the end, gives ``UNCLASSIFIABLE`` instead of an error.

        Args:
            start_date: First day of the trip.
            end_date: Last day of the trip.
            reference_date (optional): The day to classify against.
                Defaults to today in the active time zone.
        """
        start = normalize_timestamp(start_date)
        end = normalize_timestamp(end_date)
        reference = normalize_timestamp(reference_date) if reference_date is not None else today()

        if start is None or end is None or reference is None or start > end:
            return TripStatus.UNCLASSIFIABLE
        if reference < start:
            return TripStatus.UPCOMING
        if reference > end:
            return TripStatus.HISTORICAL
        return TripStatus.ACTIVE

    @staticmethod
    def categorize_trips(trips: Iterable[Any], reference_date: Any = None) -> Dict[str, list]:
        """
        Bucket trips into active, upcoming and historical lists.

        Any object with ``start_date`` and ``end_date`` attributes works.
        Unclassifiable trips are skipped silently. Input order is kept within
        each bucket. An unreadable ``reference_date`` classifies nothing.
        """
        reference = normalize_timestamp(reference_date) if reference_date is not None else today()
        buckets = {
            TripStatus.ACTIVE.value: [],
            TripStatus.UPCOMING.value: [],
            TripStatus.HISTORICAL.value: [],
        }
        if reference is None:
            return buckets
        for trip in trips:
            status = TripAggregation.classify_trip(trip.start_date, trip.end_date, reference)
            if status != TripStatus.UNCLASSIFIABLE:
                buckets[status.value].append(trip)
        return buckets

    @staticmethod
    def snapshot(
        trip: TripRecord,
        expenses: Iterable[ExpenseRecord],
        reference_date: Any = None,
    ) -> Dict[str, Any]:
        """
        Recompute a trip's complete view from one store snapshot.

        Live subscriptions deliver the full expense set on every change; each
        delivery is handled as an independent call to this method.
        """
        summary = TripAggregation.summarize(
            budget=trip.total_budget,
            expenses=expenses,
            members=trip.member_count,
            category_budgets=trip.category_budgets,
        )
        summary['status'] = TripAggregation.classify_trip(
            trip.start_date, trip.end_date, reference_date
        ).value
        return summary
