"""Daily spend ledger: one row per campaign and UTC calendar day.

The ledger is the source of truth for spend. ``Campaign.spend`` is only a
cached copy of an aggregate over it (see ``apps.campaigns.sync``).
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import DayNotEditable, InvalidAmount, InvalidSpendDate
from .models import DailySpendEntry

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')
# DailySpendEntry.amount is DECIMAL(12, 2)
MAX_AMOUNT = Decimal('9999999999.99')

DEFAULT_EDIT_DAYS = 5
DEFAULT_CALENDAR_DAYS = 7


@dataclass(frozen=True)
class Editability:
    editable: bool
    has_input_controls: bool


@dataclass(frozen=True)
class CalendarDay:
    date: date
    amount: Decimal
    is_today: bool
    editable: bool
    has_input_controls: bool


def to_money(value):
    """Coerce a DB or Python number to a 2-digit currency Decimal."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def utc_today():
    return timezone.now().astimezone(dt_timezone.utc).date()


def normalize_day(value):
    """Return the UTC calendar day for a date, datetime or ISO-8601 string.

    Naive datetimes are taken to be UTC already.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = value.astimezone(dt_timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidSpendDate(value)

    text = value.strip()
    try:
        parsed = parse_datetime(text)
        if parsed is not None:
            return normalize_day(parsed)
        parsed_day = parse_date(text)
    except ValueError:
        raise InvalidSpendDate(value)
    if parsed_day is None:
        raise InvalidSpendDate(value)
    return parsed_day


def validate_amount(value):
    if value is None or isinstance(value, bool):
        raise InvalidAmount(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(value)
    # Bounded before quantize; huge exponents overflow the decimal context
    if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
        raise InvalidAmount(value)
    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount > MAX_AMOUNT:
        raise InvalidAmount(value)
    return amount


def ensure_editable(day, today=None):
    """Raise ``DayNotEditable`` unless ``day`` is inside the edit window.

    ``SPEND_EDIT_WINDOW_DAYS = 0`` turns the check off.
    """
    day = normalize_day(day)
    edit_days = settings.SPEND_EDIT_WINDOW_DAYS
    if not edit_days:
        return day
    today = normalize_day(today) if today is not None else utc_today()
    if not editability_window(today, day, edit_days, settings.SPEND_CALENDAR_DAYS).editable:
        raise DayNotEditable(day)
    return day


def upsert_entry(campaign_id, day, amount):
    """Insert or replace the spend recorded for ``campaign_id`` on ``day``.

    Amounts are never accumulated: the last write for a day wins, whether
    the day is closed or still accruing.
    """
    day = normalize_day(day)
    amount = validate_amount(amount)

    with transaction.atomic():
        entry, created = DailySpendEntry.objects.update_or_create(
            campaign_id=campaign_id,
            date=day,
            defaults={'amount': amount},
        )

    logger.info(
        "%s daily spend for campaign %s on %s: %s",
        "Recorded" if created else "Replaced", campaign_id, day, amount
    )
    return entry


def list_entries(campaign_id, from_day=None, to_day=None):
    entries = DailySpendEntry.objects.filter(campaign_id=campaign_id)
    if from_day is not None:
        entries = entries.filter(date__gte=normalize_day(from_day))
    if to_day is not None:
        entries = entries.filter(date__lte=normalize_day(to_day))
    return entries.order_by('date')


def total_for_range(campaign_id, start=None, end=None):
    total = list_entries(campaign_id, start, end).aggregate(total=Sum('amount'))['total']
    return to_money(total)


def total_for_window(campaign_id, window_days, today=None):
    """Sum of entries in ``[today - window_days + 1, today]``; missing days count as 0."""
    if window_days < 1:
        raise ValueError("window_days must be at least 1")
    today = normalize_day(today) if today is not None else utc_today()
    start = today - timedelta(days=window_days - 1)
    return total_for_range(campaign_id, start, today)


def total_for_campaign(campaign_id):
    return total_for_range(campaign_id)


def editability_window(today, entry_date, edit_days=DEFAULT_EDIT_DAYS, visible_days=DEFAULT_CALENDAR_DAYS):
    today = normalize_day(today)
    age = (today - normalize_day(entry_date)).days
    if age < 0:
        return Editability(editable=False, has_input_controls=False)
    return Editability(editable=age < edit_days, has_input_controls=age < visible_days)


def calendar(campaign_id, today=None, days=DEFAULT_CALENDAR_DAYS, edit_days=DEFAULT_EDIT_DAYS):
    today = normalize_day(today) if today is not None else utc_today()
    start = today - timedelta(days=days - 1)
    amounts = {
        entry.date: entry.amount
        for entry in list_entries(campaign_id, start, today)
    }

    cells = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        window = editability_window(today, day, edit_days, days)
        cells.append(CalendarDay(
            date=day,
            amount=to_money(amounts.get(day)),
            is_today=day == today,
            editable=window.editable,
            has_input_controls=window.has_input_controls,
        ))
    return cells
