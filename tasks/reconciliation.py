from celery import shared_task
from datetime import timedelta
from decimal import Decimal
from django.conf import settings
from django.db import OperationalError
from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
import logging

logger = logging.getLogger(__name__)


@retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    reraise=True,
)
def find_drifted_campaigns(today=None):
    """Campaigns whose cached spend no longer matches the ledger aggregate"""
    from apps.campaigns.ledger import utc_today
    from apps.campaigns.models import Campaign
    from apps.campaigns.sync import decide_write

    in_window = None
    window_days = settings.CAMPAIGN_SPEND_WINDOW_DAYS
    if window_days:
        today = today or utc_today()
        in_window = Q(
            daily_spends__date__gte=today - timedelta(days=window_days - 1),
            daily_spends__date__lte=today,
        )

    campaigns = Campaign.objects.annotate(
        ledger_total=Coalesce(
            Sum('daily_spends__amount', filter=in_window),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    ).order_by('pk').values_list('id', 'spend', 'ledger_total')

    return [
        campaign_id
        for campaign_id, spend, ledger_total in campaigns
        if decide_write(spend, ledger_total).should_write
    ]


@shared_task
def reconcile_campaign_spend():
    """Nightly safety net for syncs that were dropped or failed"""
    from apps.campaigns.sync import SpendSyncDebouncer, request_sync

    drifted = find_drifted_campaigns()
    debouncer = SpendSyncDebouncer()
    scheduled = 0
    for campaign_id in drifted:
        if request_sync(campaign_id, debouncer=debouncer).queued:
            scheduled += 1

    logger.info(f"Spend reconciliation: {len(drifted)} drifted campaigns, {scheduled} syncs scheduled")
    return {'drifted': len(drifted), 'scheduled': scheduled}
