from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase, override_settings
from kombu.exceptions import OperationalError

from apps.campaigns.ledger import upsert_entry, utc_today
from apps.campaigns.models import Campaign
from apps.campaigns.sync import (
    SpendSyncDebouncer,
    decide_write,
    record_daily_spend,
    request_sync,
    update_campaign_spend,
)
from apps.campaigns.tasks import sync_campaign_spend
from .utils import create_campaign

T0 = datetime(2024, 5, 10, 12, 0, tzinfo=dt_timezone.utc)


class DecideWriteTest(TestCase):
    def test_writes_only_on_change(self):
        self.assertTrue(decide_write('10.00', '12.50').should_write)
        self.assertFalse(decide_write(Decimal('10'), '10.00').should_write)

    def test_total_is_quantized(self):
        self.assertEqual(decide_write('0', 3.333).total, Decimal('3.33'))


class UpdateCampaignSpendTest(TestCase):
    def setUp(self):
        cache.clear()
        self.campaign = create_campaign(spend='10.00')

    def test_written_then_unchanged(self):
        first = update_campaign_spend(self.campaign.pk, Decimal('25.00'))
        second = update_campaign_spend(self.campaign.pk, Decimal('25.00'))

        self.assertEqual(first.status, 'written')
        self.assertEqual(second.status, 'unchanged')
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('25.00'))

    def test_missing_campaign(self):
        self.assertEqual(update_campaign_spend(999999, Decimal('1.00')).status, 'missing')


class SpendSyncDebouncerTest(TestCase):
    def setUp(self):
        cache.clear()
        self.campaign = create_campaign()
        self.debouncer = SpendSyncDebouncer(interval=1.0)

    def _flush_all(self, mocked):
        return [
            self.debouncer.flush(*call.kwargs['args'])
            for call in mocked.call_args_list
        ]

    def test_burst_of_triggers_writes_once_with_last_total(self):
        with patch.object(sync_campaign_spend, 'apply_async') as mocked:
            self.debouncer.trigger(self.campaign.pk, '10.00', now=T0)
            self.debouncer.trigger(self.campaign.pk, '20.00', now=T0 + timedelta(milliseconds=200))
            last = self.debouncer.trigger(self.campaign.pk, '35.00', now=T0 + timedelta(milliseconds=400))

        self.assertEqual(mocked.call_count, 3)
        self.assertEqual(mocked.call_args.kwargs['eta'], T0 + timedelta(milliseconds=1400))
        self.assertEqual(last.due_at, T0 + timedelta(milliseconds=1400))

        with patch('apps.campaigns.sync.update_campaign_spend', wraps=update_campaign_spend) as writer:
            results = self._flush_all(mocked)

        self.assertEqual([r.status for r in results], ['superseded', 'superseded', 'written'])
        writer.assert_called_once_with(self.campaign.pk, Decimal('35.00'))
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('35.00'))
        self.assertFalse(self.debouncer.status(self.campaign.pk)['pending'])

    def test_triggers_for_different_campaigns_do_not_coalesce(self):
        other = create_campaign(ad_account=self.campaign.ad_account, name='Other')
        with patch.object(sync_campaign_spend, 'apply_async') as mocked:
            self.debouncer.trigger(self.campaign.pk, '5.00', now=T0)
            self.debouncer.trigger(other.pk, '7.00', now=T0)

        results = self._flush_all(mocked)

        self.assertEqual([r.status for r in results], ['written', 'written'])

    def test_failed_write_is_recorded_and_not_retried(self):
        with patch.object(sync_campaign_spend, 'apply_async') as mocked:
            ticket = self.debouncer.trigger(self.campaign.pk, '50.00', now=T0)

        with patch('apps.campaigns.sync.update_campaign_spend', side_effect=DatabaseError('gone')):
            result = self.debouncer.flush(self.campaign.pk, ticket.token)

        self.assertEqual(mocked.call_count, 1)
        self.assertEqual(result.status, 'failed')
        status = self.debouncer.status(self.campaign.pk)
        self.assertEqual(status['last_sync']['status'], 'failed')
        self.assertEqual(status['last_sync']['error'], 'gone')
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('0.00'))

    def test_flush_after_pending_entry_expired_is_recorded_as_failure(self):
        with patch.object(sync_campaign_spend, 'apply_async'):
            ticket = self.debouncer.trigger(self.campaign.pk, '50.00', now=T0)
        cache.delete(self.debouncer._pending_key(self.campaign.pk))

        result = self.debouncer.flush(self.campaign.pk, ticket.token)

        self.assertEqual(result.status, 'failed')
        last_sync = self.debouncer.status(self.campaign.pk)['last_sync']
        self.assertEqual(last_sync['status'], 'failed')
        self.assertIn('expired', last_sync['error'])
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('0.00'))

    def test_late_superseded_task_does_not_clobber_written_status(self):
        with patch.object(sync_campaign_spend, 'apply_async') as mocked:
            self.debouncer.trigger(self.campaign.pk, '10.00', now=T0)
            self.debouncer.trigger(self.campaign.pk, '20.00', now=T0 + timedelta(milliseconds=200))

        early, last = [call.kwargs['args'] for call in mocked.call_args_list]
        self.assertEqual(self.debouncer.flush(*last).status, 'written')
        self.assertEqual(self.debouncer.flush(*early).status, 'superseded')

        status = self.debouncer.status(self.campaign.pk)
        self.assertFalse(status['pending'])
        self.assertEqual(status['last_sync']['status'], 'written')

    def test_pending_entry_outlives_status_ttl(self):
        self.assertGreaterEqual(self.debouncer._pending_timeout(), 86400)

    def test_broker_outage_marks_ticket_unqueued(self):
        with patch.object(sync_campaign_spend, 'apply_async', side_effect=OperationalError('down')):
            ticket = self.debouncer.trigger(self.campaign.pk, '50.00', now=T0)

        self.assertFalse(ticket.queued)
        self.assertEqual(self.debouncer.status(self.campaign.pk)['last_sync']['status'], 'failed')

    def test_status_reports_pending_sync(self):
        with patch.object(sync_campaign_spend, 'apply_async'):
            ticket = self.debouncer.trigger(self.campaign.pk, '5.00', now=T0)

        status = self.debouncer.status(self.campaign.pk)
        self.assertTrue(status['pending'])
        self.assertEqual(status['due_at'], ticket.due_at.isoformat())
        self.assertIsNone(status['last_sync'])


class RequestSyncTest(TestCase):
    def setUp(self):
        cache.clear()
        self.campaign = create_campaign()

    def test_eager_task_converges_spend_to_ledger(self):
        today = utc_today()
        upsert_entry(self.campaign.pk, today - timedelta(days=1), '40')
        entry, ticket = record_daily_spend(self.campaign.pk, today, '60')

        self.assertTrue(ticket.queued)
        self.assertEqual(ticket.total, Decimal('100.00'))
        self.assertEqual(entry.amount, Decimal('60.00'))
        self.assertEqual(Campaign.objects.get(pk=self.campaign.pk).spend, Decimal('100.00'))

    @override_settings(CAMPAIGN_SPEND_WINDOW_DAYS=3)
    def test_trailing_window_aggregate(self):
        today = utc_today()
        upsert_entry(self.campaign.pk, today - timedelta(days=10), '500')
        upsert_entry(self.campaign.pk, today, '20')

        ticket = request_sync(self.campaign.pk)

        self.assertEqual(ticket.total, Decimal('20.00'))
        self.assertEqual(Campaign.objects.get(pk=self.campaign.pk).spend, Decimal('20.00'))
