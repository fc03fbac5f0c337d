"""Available balance at the two scopes the back office displays.

The scopes are deliberately separate quantities and are never substituted
for one another:

* campaign scope: ``ad_account.spend_limit - campaign.spend``
* account scope: ``ad_account.spend_limit - ad_account.total_spend``

A negative balance means overspend. It is reported, not rejected.
"""
from .ledger import ZERO, to_money


def campaign_scoped_balance(ad_account, campaign):
    if ad_account is None:
        return ZERO
    return to_money(to_money(ad_account.spend_limit) - to_money(campaign.spend))


def account_scoped_balance(ad_account):
    if ad_account is None:
        return ZERO
    return to_money(to_money(ad_account.spend_limit) - to_money(ad_account.total_spend))


def is_overspent(balance):
    return balance < 0
