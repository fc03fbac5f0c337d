from rest_framework import serializers
from apps.campaigns.balance import account_scoped_balance, is_overspent
from .models import AdAccount


class AdAccountSerializer(serializers.ModelSerializer):
    available_balance = serializers.SerializerMethodField()
    is_overspent = serializers.SerializerMethodField()

    class Meta:
        model = AdAccount
        fields = '__all__'

    def get_available_balance(self, obj):
        return str(account_scoped_balance(obj))

    def get_is_overspent(self, obj):
        return is_overspent(account_scoped_balance(obj))

    def validate_spend_limit(self, value):
        if value < 0:
            raise serializers.ValidationError("Spend limit cannot be negative.")
        return value
