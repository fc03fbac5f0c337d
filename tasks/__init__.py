from core.celery import app as celery_app

__all__ = ('celery_app',)

# Register tasks explicitly
from .reconciliation import reconcile_campaign_spend

# Register periodic tasks
from celery.schedules import crontab
from django.conf import settings

if hasattr(settings, 'CELERY_BEAT_SCHEDULE'):
    celery_app.conf.beat_schedule = {
        **settings.CELERY_BEAT_SCHEDULE,
        'reconcile-campaign-spend': {
            'task': 'tasks.reconciliation.reconcile_campaign_spend',
            'schedule': crontab(hour=1, minute=0),  # Daily at 1 AM
        },
    }
