import strawberry
import strawberry_django
from decimal import Decimal
from typing import List
from strawberry import auto
from apps.ad_accounts.models import AdAccount
from apps.campaigns.balance import campaign_scoped_balance
from apps.campaigns.models import Campaign, DailySpendEntry


@strawberry_django.type(AdAccount)
class AdAccountType:
    id: auto
    platform: auto
    account_name: auto
    account_id: auto
    spend_limit: auto
    total_spend: auto
    status: auto


@strawberry_django.type(Campaign)
class CampaignType:
    id: auto
    name: auto
    ad_account: AdAccountType
    status: auto
    objective: auto
    budget: auto
    spend: auto
    start_date: auto

    @strawberry.field
    def available_balance(self) -> Decimal:
        return campaign_scoped_balance(self.ad_account, self)


@strawberry_django.type(DailySpendEntry)
class DailySpendEntryType:
    id: auto
    date: auto
    amount: auto
    updated_at: auto


@strawberry.type
class AccountRollupType:
    ad_account_id: int
    ad_account_name: str
    platform: str
    total_spend: Decimal
    total_budget: Decimal
    available_balance: Decimal
    campaign_count: int


@strawberry.type
class CampaignAnalyticsType:
    per_account: List[AccountRollupType]
    grand_total_spend: Decimal
    grand_total_budget: Decimal
    total_campaigns: int
