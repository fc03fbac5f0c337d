import logging

from celery import shared_task

from .sync import SpendSyncDebouncer

logger = logging.getLogger(__name__)


@shared_task
def sync_campaign_spend(campaign_id, token):
    """Debounced write of the ledger aggregate into Campaign.spend.

    Not retried on failure; the next ledger change schedules a fresh attempt.
    """
    result = SpendSyncDebouncer().flush(campaign_id, token)
    return {
        'campaign_id': campaign_id,
        'status': result.status,
        'total': None if result.total is None else str(result.total),
    }
