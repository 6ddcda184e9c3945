"""Plain-text trip report used for sharing a trip's spending."""

from decimal import Decimal
from typing import Any, Dict

from .records import TripRecord

CURRENCY_SYMBOLS = {
    'INR': '₹',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
}


def currency_symbol(code: str) -> str:
    code = (code or '').upper()
    return CURRENCY_SYMBOLS.get(code, f'{code} ' if code else '')


def format_money(amount: Decimal, currency: str) -> str:
    return f"{currency_symbol(currency)}{amount:,.2f}"


def _format_day(value) -> str:
    return value.strftime('%b %d, %Y').replace(' 0', ' ') if value else 'Unknown'


def format_trip_report(trip: TripRecord, summary: Dict[str, Any], currency: str = 'INR') -> str:
    """
    Render the shareable text summary of a trip.

    ``summary`` is the dictionary returned by ``TripAggregation.summarize``.
    """
    lines = [
        f"Trip: {trip.name}",
        f"Date: {_format_day(trip.start_date)} - {_format_day(trip.end_date)}",
        f"Members: {summary['member_count']}",
        f"Budget: {format_money(summary['total_budget'], currency)}",
        f"Total Spent: {format_money(summary['total_spent'], currency)}",
        f"Remaining: {format_money(summary['remaining'], currency)}",
        f"Per Person: {format_money(summary['per_person_share'], currency)}",
        f"Daily Average: {format_money(summary['daily_average'], currency)}",
    ]

    if summary['per_category_totals']:
        lines.append('')
        lines.append('Expense Breakdown:')
        for category, amount in summary['per_category_totals'].items():
            lines.append(f"{category}: {format_money(amount, currency)}")

    return '\n'.join(lines)
