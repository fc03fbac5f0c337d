import strawberry
from datetime import date
from typing import List, Optional
from apps.ad_accounts.models import AdAccount
from apps.analytics.repository import AnalyticsRepository
from apps.campaigns.ledger import list_entries
from apps.campaigns.models import Campaign
from .permissions import IsAuthenticated
from .types import (
    AccountRollupType,
    AdAccountType,
    CampaignAnalyticsType,
    CampaignType,
    DailySpendEntryType,
)


@strawberry.type
class CampaignQueries:

    @strawberry.field(permission_classes=[IsAuthenticated])
    def campaigns(self, ad_account_id: Optional[int] = None) -> List[CampaignType]:
        queryset = Campaign.objects.select_related('ad_account')
        if ad_account_id is not None:
            queryset = queryset.filter(ad_account_id=ad_account_id)
        return queryset

    @strawberry.field(permission_classes=[IsAuthenticated])
    def campaign(self, id: int) -> Optional[CampaignType]:
        return Campaign.objects.select_related('ad_account').filter(id=id).first()

    @strawberry.field(permission_classes=[IsAuthenticated])
    def ad_accounts(self) -> List[AdAccountType]:
        return AdAccount.objects.all()

    @strawberry.field(permission_classes=[IsAuthenticated])
    def daily_spends(
        self,
        campaign_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[DailySpendEntryType]:
        return list_entries(campaign_id, start_date, end_date)

    @strawberry.field(permission_classes=[IsAuthenticated])
    def campaign_analytics(
        self,
        ad_account_id: Optional[int] = None,
        campaign_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CampaignAnalyticsType:
        rollup = AnalyticsRepository.campaign_rollup(
            ad_account_id=ad_account_id,
            campaign_id=campaign_id,
            start_date=start_date,
            end_date=end_date,
        )
        return CampaignAnalyticsType(
            per_account=[
                AccountRollupType(
                    ad_account_id=row['adAccountId'],
                    ad_account_name=row['adAccountName'],
                    platform=row['platform'],
                    total_spend=row['totalSpend'],
                    total_budget=row['totalBudget'],
                    available_balance=row['availableBalance'],
                    campaign_count=row['campaignCount'],
                )
                for row in rollup['perAccount']
            ],
            grand_total_spend=rollup['grandTotalSpend'],
            grand_total_budget=rollup['grandTotalBudget'],
            total_campaigns=rollup['totalCampaigns'],
        )
