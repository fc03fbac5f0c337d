from rest_framework import serializers

from .balance import campaign_scoped_balance, is_overspent
from .exceptions import DayNotEditable, InvalidAmount, InvalidSpendDate
from .ledger import ensure_editable, validate_amount
from .models import AdCopySet, Campaign, CampaignComment, DailySpendEntry


class CampaignSerializer(serializers.ModelSerializer):
    ad_account_name = serializers.CharField(source='ad_account.account_name', read_only=True)
    client_name = serializers.CharField(source='client.name', read_only=True, default=None)
    available_balance = serializers.SerializerMethodField()
    is_overspent = serializers.SerializerMethodField()

    class Meta:
        model = Campaign
        fields = '__all__'
        read_only_fields = ('spend', 'is_synced', 'created_at', 'updated_at')

    def get_available_balance(self, obj):
        return str(campaign_scoped_balance(obj.ad_account, obj))

    def get_is_overspent(self, obj):
        return is_overspent(campaign_scoped_balance(obj.ad_account, obj))

    def validate_budget(self, value):
        if value < 0:
            raise serializers.ValidationError("Budget cannot be negative.")
        return value

    def validate_status(self, value):
        if self.instance and self.instance.status != value:
            if not self.instance.can_transition_to(value):
                raise serializers.ValidationError(
                    f"Cannot transition from {self.instance.status} to {value}"
                )
        return value


class DailySpendEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = DailySpendEntry
        fields = ('date', 'amount', 'updated_at')


class DailySpendWriteSerializer(serializers.Serializer):
    # Accepts plain dates and full ISO-8601 timestamps; both collapse to the UTC day
    date = serializers.CharField()
    amount = serializers.CharField()

    def validate_date(self, value):
        try:
            return ensure_editable(value, today=self.context.get('today'))
        except (InvalidSpendDate, DayNotEditable) as e:
            raise serializers.ValidationError(str(e))

    def validate_amount(self, value):
        try:
            return validate_amount(value)
        except InvalidAmount as e:
            raise serializers.ValidationError(str(e))


class CalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_today = serializers.BooleanField()
    editable = serializers.BooleanField()
    has_input_controls = serializers.BooleanField()


class CampaignCommentSerializer(serializers.ModelSerializer):
    class Meta:
        model = CampaignComment
        fields = ('id', 'text', 'author', 'author_name', 'created_at')
        read_only_fields = ('author', 'author_name', 'created_at')

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment is required")
        return value


class AdCopySetSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdCopySet
        fields = '__all__'
        read_only_fields = ('campaign', 'is_active', 'created_at', 'updated_at')
