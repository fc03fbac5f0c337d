from django.apps import AppConfig


class AdAccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.ad_accounts"
    label = "ad_accounts"
