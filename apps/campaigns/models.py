from django.conf import settings
from django.db import models


class Campaign(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['ad_account', 'status'], name='campaign_account_status_idx'),
            models.Index(fields=['start_date'], name='campaign_start_date_idx'),
        ]

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('active', 'Active'),
        ('paused', 'Paused'),
        ('completed', 'Completed'),
    ]

    name = models.CharField(max_length=150)
    ad_account = models.ForeignKey('ad_accounts.AdAccount', on_delete=models.PROTECT, related_name='campaigns')
    client = models.ForeignKey(
        'clients.Client', on_delete=models.SET_NULL, null=True, blank=True, related_name='campaigns'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    objective = models.CharField(max_length=100, blank=True, default='')
    budget = models.DecimalField(max_digits=12, decimal_places=2)
    # Cache of the daily spend ledger, written only by the spend synchronizer
    spend = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    start_date = models.DateField()
    is_synced = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def can_transition_to(self, new_status):
        """Validate status transitions"""
        valid_transitions = {
            'draft': ['active'],
            'active': ['paused', 'completed'],
            'paused': ['active', 'completed'],
            'completed': [],  # Terminal state
        }
        return new_status in valid_transitions.get(self.status, [])


class DailySpendEntry(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['date']
        constraints = [
            models.UniqueConstraint(
                fields=['campaign', 'date'],
                name='unique_daily_spend_per_campaign_day'
            )
        ]

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='daily_spends')
    date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.campaign_id} {self.date}: {self.amount}"


class CampaignComment(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['created_at', 'id']

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='comments')
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    # Kept so the log still reads correctly after the author is removed
    author_name = models.CharField(max_length=150)
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)


class AdCopySet(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['-created_at']

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='ad_copy_sets')
    set_name = models.CharField(max_length=150)
    is_active = models.BooleanField(default=False)
    age = models.CharField(max_length=50, blank=True, default='')
    budget = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    ad_type = models.CharField(max_length=50, blank=True, default='')
    creative_link = models.URLField(blank=True, default='')
    headline = models.CharField(max_length=255, blank=True, default='')
    description = models.TextField(blank=True, default='')
    call_to_action = models.CharField(max_length=50, blank=True, default='')
    target_audience = models.CharField(max_length=255, blank=True, default='')
    placement = models.CharField(max_length=100, blank=True, default='')
    schedule = models.CharField(max_length=100, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
