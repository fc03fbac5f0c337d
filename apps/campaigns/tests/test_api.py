from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.models import User
from apps.campaigns.ledger import upsert_entry, utc_today
from apps.campaigns.models import AdCopySet, Campaign, DailySpendEntry
from .utils import create_ad_account, create_campaign


class CampaignAPITestCase(APITestCase):
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(
            username='ops', email='ops@backoffice.agency', password='testpass123'
        )
        self.client.force_authenticate(user=self.user)
        self.account = create_ad_account(spend_limit='1000.00')
        self.campaign = create_campaign(ad_account=self.account, budget='800.00')
        self.base = f'/api/campaigns/{self.campaign.pk}'


class CampaignCrudTest(CampaignAPITestCase):
    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/campaigns/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_and_list(self):
        response = self.client.post('/api/campaigns/', {
            'name': 'Summer Push',
            'ad_account': self.account.pk,
            'budget': '300.00',
            'start_date': '2024-06-01',
            'status': 'draft',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['spend'], '0.00')
        self.assertEqual(response.data['ad_account_name'], 'Main Account')

        names = [c['name'] for c in self.client.get('/api/campaigns/').data]
        self.assertIn('Summer Push', names)

    def test_spend_is_read_only(self):
        response = self.client.patch(f'{self.base}/', {'spend': '999.00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('0.00'))

    def test_invalid_status_transition(self):
        Campaign.objects.filter(pk=self.campaign.pk).update(status='completed')

        response = self.client.patch(f'{self.base}/', {'status': 'active'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_budget_rejected(self):
        response = self.client.patch(f'{self.base}/', {'budget': '-1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_ad_account(self):
        other_account = create_ad_account(account_name='Other Account')
        create_campaign(ad_account=other_account, name='Elsewhere')

        response = self.client.get('/api/campaigns/', {'adAccountId': self.account.pk})

        self.assertEqual([c['id'] for c in response.data], [self.campaign.pk])

    def test_detail_reports_campaign_scoped_balance(self):
        Campaign.objects.filter(pk=self.campaign.pk).update(spend=Decimal('1200.00'))

        response = self.client.get(f'{self.base}/')

        self.assertEqual(response.data['available_balance'], '-200.00')
        self.assertTrue(response.data['is_overspent'])


class DailySpendAPITest(CampaignAPITestCase):
    def test_post_upserts_and_syncs_spend(self):
        today = utc_today()
        upsert_entry(self.campaign.pk, today - timedelta(days=1), '40.00')

        response = self.client.post(
            f'{self.base}/daily-spends/',
            {'date': today.isoformat(), 'amount': '60'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], '60.00')
        self.assertEqual(response.data['sync']['status'], 'scheduled')
        self.assertEqual(response.data['sync']['total'], '100.00')
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('100.00'))

    def test_repeat_post_replaces_amount(self):
        day = utc_today().isoformat()
        self.client.post(f'{self.base}/daily-spends/', {'date': day, 'amount': '10'}, format='json')
        self.client.post(f'{self.base}/daily-spends/', {'date': day, 'amount': '15.5'}, format='json')

        entries = DailySpendEntry.objects.filter(campaign=self.campaign)
        self.assertEqual(entries.count(), 1)
        self.assertEqual(entries.get().amount, Decimal('15.50'))

    def test_rejects_negative_amount(self):
        response = self.client.post(
            f'{self.base}/daily-spends/',
            {'date': utc_today().isoformat(), 'amount': '-3'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_rejects_out_of_range_amount(self):
        response = self.client.post(
            f'{self.base}/daily-spends/',
            {'date': utc_today().isoformat(), 'amount': '1e30'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)
        self.assertFalse(DailySpendEntry.objects.exists())

    def test_rejects_locked_day(self):
        old_day = utc_today() - timedelta(days=10)
        response = self.client.post(
            f'{self.base}/daily-spends/',
            {'date': old_day.isoformat(), 'amount': '3'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date', response.data)
        self.assertFalse(DailySpendEntry.objects.exists())

    def test_list_with_range(self):
        today = utc_today()
        for offset in range(4):
            upsert_entry(self.campaign.pk, today - timedelta(days=offset), str(offset + 1))

        response = self.client.get(f'{self.base}/daily-spends/', {
            'from': (today - timedelta(days=2)).isoformat(),
            'to': (today - timedelta(days=1)).isoformat(),
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['amount'] for row in response.data], ['3.00', '2.00'])

    def test_list_with_bad_range(self):
        response = self.client.get(f'{self.base}/daily-spends/', {'from': 'last-week'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_campaign(self):
        response = self.client.post(
            '/api/campaigns/999999/daily-spends/',
            {'date': utc_today().isoformat(), 'amount': '3'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_campaign_detail_cache_is_invalidated_by_sync(self):
        first = self.client.get(f'{self.base}/')
        self.assertEqual(first.data['spend'], '0.00')

        self.client.post(
            f'{self.base}/daily-spends/',
            {'date': utc_today().isoformat(), 'amount': '25'},
            format='json',
        )

        second = self.client.get(f'{self.base}/')
        self.assertEqual(second.data['spend'], '25.00')


class CalendarAPITest(CampaignAPITestCase):
    def test_calendar_shape(self):
        today = utc_today()
        upsert_entry(self.campaign.pk, today, '30')
        upsert_entry(self.campaign.pk, today - timedelta(days=6), '50')

        response = self.client.get(f'{self.base}/calendar/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        days = response.data['days']
        self.assertEqual(len(days), 7)
        self.assertEqual(response.data['total'], '80.00')
        self.assertTrue(days[-1]['is_today'])
        self.assertTrue(days[-1]['editable'])
        self.assertFalse(days[0]['editable'])
        self.assertTrue(days[0]['has_input_controls'])


class SpendSyncAPITest(CampaignAPITestCase):
    def test_manual_sync_recomputes_from_ledger(self):
        upsert_entry(self.campaign.pk, utc_today(), '70')

        response = self.client.post(f'{self.base}/spend-sync/')

        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(response.data['total'], '70.00')
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.spend, Decimal('70.00'))

        sync_status = self.client.get(f'{self.base}/spend-sync/').data
        self.assertFalse(sync_status['pending'])
        self.assertEqual(sync_status['last_sync']['status'], 'written')


class CommentAPITest(CampaignAPITestCase):
    def test_comments_are_appended_in_order(self):
        self.client.post(f'{self.base}/comments/', {'text': ' first '}, format='json')
        self.client.post(f'{self.base}/comments/', {'text': 'second'}, format='json')

        response = self.client.get(f'{self.base}/comments/')

        self.assertEqual([c['text'] for c in response.data], ['first', 'second'])
        self.assertEqual(response.data[0]['author_name'], 'ops')

    def test_blank_comment_rejected(self):
        response = self.client.post(f'{self.base}/comments/', {'text': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdCopySetAPITest(CampaignAPITestCase):
    def test_create_and_set_active(self):
        first = self.client.post(f'{self.base}/ad-copy-sets/', {'set_name': 'A'}, format='json')
        second = self.client.post(f'{self.base}/ad-copy-sets/', {'set_name': 'B'}, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertFalse(first.data['is_active'])

        self.client.post(f'{self.base}/ad-copy-sets/{first.data["id"]}/set-active/')
        response = self.client.post(f'{self.base}/ad-copy-sets/{second.data["id"]}/set-active/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        active = list(AdCopySet.objects.filter(campaign=self.campaign, is_active=True))
        self.assertEqual([s.set_name for s in active], ['B'])

    def test_set_active_on_foreign_set(self):
        other = create_campaign(ad_account=self.account, name='Other')
        copy_set = AdCopySet.objects.create(campaign=other, set_name='X')

        response = self.client.post(f'{self.base}/ad-copy-sets/{copy_set.pk}/set-active/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_via_flat_route(self):
        copy_set = AdCopySet.objects.create(campaign=self.campaign, set_name='A')

        response = self.client.patch(
            f'/api/ad-copy-sets/{copy_set.pk}/', {'headline': 'Buy now'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['headline'], 'Buy now')
