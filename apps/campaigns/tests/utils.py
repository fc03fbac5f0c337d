from datetime import date
from decimal import Decimal

from apps.ad_accounts.models import AdAccount
from apps.campaigns.models import Campaign
from apps.clients.models import Client


def create_ad_account(account_name='Main Account', spend_limit='1000.00', client=None, **extra):
    if client is None:
        client, _ = Client.objects.get_or_create(name='Acme', email='acme@example.com')
    return AdAccount.objects.create(
        client=client,
        platform=extra.pop('platform', 'Meta'),
        account_name=account_name,
        spend_limit=Decimal(spend_limit),
        **extra
    )


def create_campaign(ad_account=None, name='Spring Launch', budget='500.00', spend='0.00', **extra):
    if ad_account is None:
        ad_account = create_ad_account()
    return Campaign.objects.create(
        ad_account=ad_account,
        client=ad_account.client,
        name=name,
        budget=Decimal(budget),
        spend=Decimal(spend),
        start_date=extra.pop('start_date', date(2024, 1, 1)),
        **extra
    )
