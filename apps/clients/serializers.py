from rest_framework import serializers
from .models import Client


class ClientSerializer(serializers.ModelSerializer):
    ad_accounts_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Client
        fields = '__all__'
