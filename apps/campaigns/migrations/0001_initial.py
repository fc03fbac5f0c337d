import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("ad_accounts", "0001_initial"),
        ("clients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Campaign",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("active", "Active"), ("paused", "Paused"), ("completed", "Completed")], default="active", max_length=20)),
                ("objective", models.CharField(blank=True, default="", max_length=100)),
                ("budget", models.DecimalField(decimal_places=2, max_digits=12)),
                ("spend", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("start_date", models.DateField()),
                ("is_synced", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("ad_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="campaigns", to="ad_accounts.adaccount")),
                ("client", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="campaigns", to="clients.client")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["ad_account", "status"], name="campaign_account_status_idx"),
                    models.Index(fields=["start_date"], name="campaign_start_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DailySpendEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("campaign", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="daily_spends", to="campaigns.campaign")),
            ],
            options={
                "ordering": ["date"],
                "constraints": [models.UniqueConstraint(fields=("campaign", "date"), name="unique_daily_spend_per_campaign_day")],
            },
        ),
        migrations.CreateModel(
            name="CampaignComment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("author_name", models.CharField(max_length=150)),
                ("text", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("author", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("campaign", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="comments", to="campaigns.campaign")),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="AdCopySet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("set_name", models.CharField(max_length=150)),
                ("is_active", models.BooleanField(default=False)),
                ("age", models.CharField(blank=True, default="", max_length=50)),
                ("budget", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("ad_type", models.CharField(blank=True, default="", max_length=50)),
                ("creative_link", models.URLField(blank=True, default="")),
                ("headline", models.CharField(blank=True, default="", max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("call_to_action", models.CharField(blank=True, default="", max_length=50)),
                ("target_audience", models.CharField(blank=True, default="", max_length=255)),
                ("placement", models.CharField(blank=True, default="", max_length=100)),
                ("schedule", models.CharField(blank=True, default="", max_length=100)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("campaign", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ad_copy_sets", to="campaigns.campaign")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
