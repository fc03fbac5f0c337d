from unittest.mock import patch

from django.core.cache import cache
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APITestCase

from apps.analytics.repository import AnalyticsRepository
from apps.authentication.models import User
from apps.campaigns.tests.utils import create_ad_account, create_campaign

URL = '/api/campaigns/analytics'


class CampaignAnalyticsViewTest(APITestCase):
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(
            username='analyst', email='analyst@backoffice.agency', password='testpass123'
        )
        self.client.force_authenticate(user=self.user)
        self.account = create_ad_account(account_name='X')
        create_campaign(ad_account=self.account, name='X1', budget='200', spend='100')
        create_campaign(ad_account=self.account, name='X2', budget='100', spend='50')

    def test_rollup_payload(self):
        response = self.client.get(URL)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['grandTotalSpend'], '150.00')
        self.assertEqual(response.data['grandTotalBudget'], '300.00')
        self.assertEqual(response.data['totalCampaigns'], 2)
        group = response.data['perAccount'][0]
        self.assertEqual(group['adAccountId'], self.account.pk)
        self.assertEqual(group['availableBalance'], '150.00')

    def test_trailing_slash_is_accepted(self):
        response = self.client.get(URL + '/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_filters_are_echoed(self):
        response = self.client.get(URL, {
            'adAccountId': self.account.pk,
            'startDate': '2024-05-01',
            'endDate': '2024-05-31',
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['filters']['startDate'], '2024-05-01')
        self.assertEqual(response.data['grandTotalSpend'], '0.00')

    def test_invalid_parameters(self):
        for params in (
            {'adAccountId': 'abc'},
            {'campaignId': '-1'},
            {'startDate': '05/01/2024'},
            {'startDate': '2024-06-01', 'endDate': '2024-05-01'},
        ):
            with self.subTest(params=params):
                response = self.client.get(URL, params)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        self.assertEqual(self.client.get(URL).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_store_failure_without_fallback(self):
        with patch.object(AnalyticsRepository, 'campaign_rollup', side_effect=DatabaseError('down')):
            response = self.client.get(URL)

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_store_failure_serves_last_known_good(self):
        self.assertEqual(self.client.get(URL).status_code, status.HTTP_200_OK)

        with patch.object(AnalyticsRepository, 'campaign_rollup', side_effect=DatabaseError('down')):
            response = self.client.get(URL)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['grandTotalSpend'], '150.00')

    def test_circuit_status(self):
        response = self.client.get('/api/analytics/circuit-breaker/status/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['overall_health'], 'OK')
