import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AdAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("platform", models.CharField(max_length=50)),
                ("account_name", models.CharField(max_length=150)),
                ("account_id", models.CharField(blank=True, default="", max_length=100)),
                ("spend_limit", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total_spend", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("status", models.CharField(choices=[("active", "Active"), ("suspended", "Suspended"), ("closed", "Closed")], default="active", max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ad_accounts", to="clients.client")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["client", "status"], name="adaccount_client_status_idx")],
            },
        ),
    ]
