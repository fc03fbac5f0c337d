from django.core.management.base import BaseCommand
from django.db import DatabaseError, transaction
from django.db.models import Sum
from apps.ad_accounts.models import AdAccount
from apps.campaigns.ledger import to_money, utc_today
from apps.campaigns.models import Campaign, DailySpendEntry
from apps.campaigns.sync import current_aggregate, update_campaign_spend
from apps.clients.models import Client
import random
from datetime import timedelta

PLATFORMS = ['Meta', 'Google Ads', 'TikTok', 'LinkedIn']


class Command(BaseCommand):
    help = 'Seed clients, ad accounts, campaigns and daily spend for local testing'

    def add_arguments(self, parser):
        parser.add_argument('--accounts', type=int, default=4, help='Number of ad accounts to ensure')
        parser.add_argument('--campaigns', type=int, default=5, help='Campaigns per ad account')
        parser.add_argument('--days_back', type=int, default=90, help='Days of ledger history per campaign')
        parser.add_argument('--batch_size', type=int, default=5000, help='Batch size for bulk creation')

    def handle(self, *args, **options):
        days_back = options['days_back']

        self.stdout.write(
            self.style.SUCCESS(f'Seeding {days_back} days of spend history')
        )

        # 1. Ensure base data exists
        client = self.ensure_client()
        accounts = self.ensure_ad_accounts(client, options['accounts'])
        campaigns = self.ensure_campaigns(client, accounts, options['campaigns'], days_back)

        # 2. Fill the ledger in batches
        total_created = self.create_daily_spends(campaigns, days_back, options['batch_size'])

        # 3. Bring Campaign.spend in line with the ledger
        self.sync_campaigns(campaigns)

        self.show_stats(total_created)

    def ensure_client(self):
        client, created = Client.objects.get_or_create(
            email='seed@backoffice.agency',
            defaults={
                'name': 'Seed Client',
                'company': 'Seed Co',
                'initial_balance': 10000,
            }
        )
        if created:
            self.stdout.write(f'Created client: {client.name}')
        return client

    def ensure_ad_accounts(self, client, count):
        accounts = []
        for i in range(count):
            account, _ = AdAccount.objects.get_or_create(
                client=client,
                account_name=f'Seed Account {i + 1}',
                defaults={
                    'platform': PLATFORMS[i % len(PLATFORMS)],
                    'account_id': f'seed-{i + 1:04d}',
                    'spend_limit': random.randint(20, 80) * 1000,
                }
            )
            accounts.append(account)
        self.stdout.write(f'Ensured {len(accounts)} ad accounts')
        return accounts

    def ensure_campaigns(self, client, accounts, per_account, days_back):
        start_date = utc_today() - timedelta(days=days_back)
        campaigns = []
        for account in accounts:
            for j in range(per_account):
                campaign, _ = Campaign.objects.get_or_create(
                    ad_account=account,
                    name=f'{account.account_name} Campaign {j + 1}',
                    defaults={
                        'client': client,
                        'budget': random.randint(5, 50) * 1000,
                        'status': 'active',
                        'start_date': start_date,
                    }
                )
                campaigns.append(campaign)
        self.stdout.write(f'Ensured {len(campaigns)} campaigns')
        return campaigns

    def create_daily_spends(self, campaigns, days_back, batch_size):
        today = utc_today()
        batch = []
        total_created = 0

        for campaign in campaigns:
            for offset in range(days_back):
                batch.append(DailySpendEntry(
                    campaign=campaign,
                    date=today - timedelta(days=offset),
                    amount=to_money(random.uniform(0, 400)),
                ))
                if len(batch) >= batch_size:
                    total_created += self._flush_batch(batch)
                    batch = []

        if batch:
            total_created += self._flush_batch(batch)
        return total_created

    def _flush_batch(self, batch):
        try:
            with transaction.atomic():
                # Existing days are left alone
                DailySpendEntry.objects.bulk_create(batch, batch_size=1000, ignore_conflicts=True)
        except DatabaseError as e:
            self.stdout.write(self.style.ERROR(f'Error in batch: {e}'))
            return 0
        self.stdout.write(f'Inserted batch of {len(batch):,} ledger rows')
        return len(batch)

    def sync_campaigns(self, campaigns):
        written = 0
        for campaign in campaigns:
            result = update_campaign_spend(campaign.pk, current_aggregate(campaign.pk))
            if result.status == 'written':
                written += 1
        self.stdout.write(f'Synced spend for {written} campaigns')

    def show_stats(self, total_created):
        total_spend = DailySpendEntry.objects.aggregate(total=Sum('amount'))['total'] or 0

        self.stdout.write(
            self.style.SUCCESS('\nFINAL STATISTICS:')
        )
        self.stdout.write(f'   Ad Accounts: {AdAccount.objects.count()}')
        self.stdout.write(f'   Campaigns: {Campaign.objects.count()}')
        self.stdout.write(f'   Ledger Rows: {DailySpendEntry.objects.count():,}')
        self.stdout.write(f'   Rows Attempted: {total_created:,}')
        self.stdout.write(f'   Total Spend: {to_money(total_spend)}')
