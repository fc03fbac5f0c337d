from collections import OrderedDict
from decimal import Decimal

from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from apps.campaigns.ledger import ZERO, to_money
from apps.campaigns.models import Campaign
from .repositories.performance import monitor_query_performance


class AnalyticsRepository:
    @staticmethod
    @monitor_query_performance
    def campaign_rollup(ad_account_id=None, campaign_id=None, start_date=None, end_date=None):
        """Spend, budget and balance per ad account, plus grand totals.

        Account and campaign filters narrow which campaigns are counted. A
        date range does not: it switches each campaign's spend from the cached
        ``Campaign.spend`` to its ledger total inside the range, so campaigns
        without activity in the window contribute 0 spend but full budget.
        """
        campaigns = Campaign.objects.select_related('ad_account')
        if ad_account_id is not None:
            campaigns = campaigns.filter(ad_account_id=ad_account_id)
        if campaign_id is not None:
            campaigns = campaigns.filter(pk=campaign_id)

        date_scoped = start_date is not None or end_date is not None
        if date_scoped:
            in_window = Q()
            if start_date is not None:
                in_window &= Q(daily_spends__date__gte=start_date)
            if end_date is not None:
                in_window &= Q(daily_spends__date__lte=end_date)
            campaigns = campaigns.annotate(
                window_spend=Coalesce(
                    Sum('daily_spends__amount', filter=in_window),
                    Value(Decimal('0.00')),
                    output_field=DecimalField(max_digits=14, decimal_places=2),
                )
            )

        groups = OrderedDict()
        for campaign in campaigns.order_by('ad_account__account_name', 'ad_account_id', 'pk'):
            account = campaign.ad_account
            group = groups.get(account.pk)
            if group is None:
                group = groups[account.pk] = {
                    'adAccountId': account.pk,
                    'adAccountName': account.account_name,
                    'platform': account.platform,
                    'totalSpend': ZERO,
                    'totalBudget': ZERO,
                    'campaignCount': 0,
                }
            spend = campaign.window_spend if date_scoped else campaign.spend
            group['totalSpend'] += to_money(spend)
            group['totalBudget'] += to_money(campaign.budget)
            group['campaignCount'] += 1

        per_account = []
        for group in groups.values():
            group['availableBalance'] = group['totalBudget'] - group['totalSpend']
            per_account.append(group)

        return {
            'perAccount': per_account,
            'grandTotalSpend': sum((g['totalSpend'] for g in per_account), ZERO),
            'grandTotalBudget': sum((g['totalBudget'] for g in per_account), ZERO),
            'totalCampaigns': sum(g['campaignCount'] for g in per_account),
        }
