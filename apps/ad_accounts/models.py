from django.db import models


class AdAccount(models.Model):
    class Meta:
        app_label = 'ad_accounts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['client', 'status'], name='adaccount_client_status_idx'),
        ]

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('suspended', 'Suspended'),
        ('closed', 'Closed'),
    ]

    platform = models.CharField(max_length=50)
    account_name = models.CharField(max_length=150)
    account_id = models.CharField(max_length=100, blank=True, default='')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='ad_accounts')
    spend_limit = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    # Denormalized; maintained by the form and by platform imports
    total_spend = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.account_name} ({self.platform})"
