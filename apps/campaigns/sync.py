"""Debounced synchronization of ``Campaign.spend`` from the daily spend ledger.

Every ledger change calls :func:`request_sync`, which computes the current
aggregate and hands it to :class:`SpendSyncDebouncer`. The debouncer parks
``{token, total}`` in the shared cache and schedules a Celery task for
``now + interval``. Each new trigger replaces the token, so when the earlier
tasks fire they find a token that is no longer current and exit. Only the
last trigger of a burst reaches the database, carrying the aggregate computed
at that trigger.

Failed writes are logged and recorded as the campaign's sync status. They are
not retried: ``Campaign.spend`` stays stale until the next trigger.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone
from kombu.exceptions import OperationalError

from .cache import invalidate_campaign_reads
from .ledger import to_money, total_for_campaign, total_for_window, upsert_entry
from .models import Campaign

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteDecision:
    should_write: bool
    total: Decimal


@dataclass(frozen=True)
class SyncTicket:
    campaign_id: int
    token: str
    total: Decimal
    due_at: datetime
    queued: bool = True


@dataclass(frozen=True)
class SyncResult:
    campaign_id: int
    status: str
    total: Optional[Decimal] = None
    error: str = ''


def decide_write(old_total, new_total):
    """Pure write decision: write only when the cached total actually changes."""
    new_total = to_money(new_total)
    return WriteDecision(should_write=to_money(old_total) != new_total, total=new_total)


def current_aggregate(campaign_id, today=None):
    window_days = settings.CAMPAIGN_SPEND_WINDOW_DAYS
    if window_days:
        return total_for_window(campaign_id, window_days, today=today)
    return total_for_campaign(campaign_id)


def update_campaign_spend(campaign_id, total):
    """Write ``total`` into ``Campaign.spend``; a no-op when it is unchanged."""
    current = Campaign.objects.filter(pk=campaign_id).values_list('spend', flat=True).first()
    if current is None:
        logger.warning("Spend sync skipped: campaign %s no longer exists", campaign_id)
        return SyncResult(campaign_id, 'missing', to_money(total))

    decision = decide_write(current, total)
    if not decision.should_write:
        return SyncResult(campaign_id, 'unchanged', decision.total)

    Campaign.objects.filter(pk=campaign_id).update(spend=decision.total, updated_at=timezone.now())
    invalidate_campaign_reads(campaign_id)
    logger.info("Campaign %s spend synced: %s -> %s", campaign_id, current, decision.total)
    return SyncResult(campaign_id, 'written', decision.total)


class SpendSyncDebouncer:
    key_prefix = 'spend-sync'

    def __init__(self, interval=None, cache_backend=None):
        self.interval = settings.SPEND_SYNC_DEBOUNCE_SECONDS if interval is None else interval
        self.cache = cache_backend or cache

    def _pending_key(self, campaign_id):
        return f"{self.key_prefix}:pending:{campaign_id}"

    def _status_key(self, campaign_id):
        return f"{self.key_prefix}:status:{campaign_id}"

    def _pending_timeout(self):
        # Must outlive a backed-up queue; a flush that finds no entry reports 'expired'
        return max(settings.SPEND_SYNC_STATUS_TTL, int(self.interval * 10))

    def trigger(self, campaign_id, total, now=None):
        from .tasks import sync_campaign_spend

        now = now or timezone.now()
        ticket = SyncTicket(
            campaign_id=campaign_id,
            token=uuid.uuid4().hex,
            total=to_money(total),
            due_at=now + timedelta(seconds=self.interval),
        )
        self.cache.set(
            self._pending_key(campaign_id),
            {'token': ticket.token, 'total': str(ticket.total), 'due_at': ticket.due_at.isoformat()},
            self._pending_timeout(),
        )

        try:
            sync_campaign_spend.apply_async(args=(campaign_id, ticket.token), eta=ticket.due_at)
        except OperationalError as e:
            logger.error("Could not schedule spend sync for campaign %s: %s", campaign_id, e)
            self._record_status(SyncResult(campaign_id, 'failed', ticket.total, str(e)))
            return SyncTicket(campaign_id, ticket.token, ticket.total, ticket.due_at, queued=False)

        logger.debug("Spend sync for campaign %s due at %s (total %s)", campaign_id, ticket.due_at, ticket.total)
        return ticket

    def flush(self, campaign_id, token):
        key = self._pending_key(campaign_id)
        pending = self.cache.get(key)
        if not pending:
            logger.error("Spend sync %s for campaign %s expired before it ran", token, campaign_id)
            result = SyncResult(campaign_id, 'failed', error='pending sync expired before it ran')
            self._record_status(result)
            return result
        if pending.get('token') != token or pending.get('done'):
            logger.debug("Spend sync %s for campaign %s superseded", token, campaign_id)
            return SyncResult(campaign_id, 'superseded')

        total = Decimal(pending['total'])
        try:
            result = update_campaign_spend(campaign_id, total)
        except DatabaseError as e:
            logger.error("Spend sync for campaign %s failed: %s", campaign_id, e)
            result = SyncResult(campaign_id, 'failed', total, str(e))

        # Tombstone rather than delete, so late superseded tasks are not read as expired
        current = self.cache.get(key)
        if current and current.get('token') == token:
            self.cache.set(key, {**current, 'done': True}, self._pending_timeout())
        self._record_status(result)
        return result

    def _record_status(self, result):
        self.cache.set(self._status_key(result.campaign_id), {
            'status': result.status,
            'total': None if result.total is None else str(result.total),
            'error': result.error,
            'at': timezone.now().isoformat(),
        }, settings.SPEND_SYNC_STATUS_TTL)

    def status(self, campaign_id):
        pending = self.cache.get(self._pending_key(campaign_id))
        if pending and pending.get('done'):
            pending = None
        last = self.cache.get(self._status_key(campaign_id))
        return {
            'campaign_id': campaign_id,
            'pending': pending is not None,
            'due_at': pending['due_at'] if pending else None,
            'last_sync': last,
        }


def request_sync(campaign_id, now=None, debouncer=None):
    debouncer = debouncer or SpendSyncDebouncer()
    return debouncer.trigger(campaign_id, current_aggregate(campaign_id), now=now)


def record_daily_spend(campaign_id, day, amount, now=None, debouncer=None):
    """Upsert a ledger day and schedule the campaign's spend sync."""
    entry = upsert_entry(campaign_id, day, amount)
    ticket = request_sync(campaign_id, now=now, debouncer=debouncer)
    return entry, ticket
