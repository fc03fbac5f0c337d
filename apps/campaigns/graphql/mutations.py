import strawberry
from apps.campaigns.exceptions import SpendLedgerError
from apps.campaigns.ledger import ensure_editable, validate_amount
from apps.campaigns.models import Campaign
from apps.campaigns.sync import record_daily_spend
from .permissions import IsAuthenticated
from .types import DailySpendEntryType


@strawberry.input
class DailySpendInput:
    campaign_id: int
    date: str
    amount: str


@strawberry.type
class CampaignMutations:

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    def upsert_daily_spend(self, input: DailySpendInput) -> DailySpendEntryType:
        if not Campaign.objects.filter(pk=input.campaign_id).exists():
            raise ValueError(f"Campaign {input.campaign_id} does not exist")
        try:
            day = ensure_editable(input.date)
            amount = validate_amount(input.amount)
        except SpendLedgerError as e:
            raise ValueError(str(e))
        entry, _ticket = record_daily_spend(input.campaign_id, day, amount)
        return entry
