import logging

from django.conf import settings
from django.core.cache import cache
from django.db import OperationalError, transaction
from django.shortcuts import get_object_or_404
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .cache import READ_TIMEOUT, campaign_detail_key, campaign_list_key, invalidate_campaign_reads
from .exceptions import InvalidSpendDate
from .ledger import calendar as build_calendar, list_entries, to_money, utc_today
from .models import AdCopySet, Campaign
from .serializers import (
    AdCopySetSerializer,
    CalendarDaySerializer,
    CampaignCommentSerializer,
    CampaignSerializer,
    DailySpendEntrySerializer,
    DailySpendWriteSerializer,
)
from .sync import SpendSyncDebouncer, record_daily_spend, request_sync

logger = logging.getLogger(__name__)

LIST_FILTERS = ('status', 'adAccountId', 'clientId', 'search')


class CampaignViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = CampaignSerializer

    def get_queryset(self):
        queryset = Campaign.objects.select_related('ad_account', 'client')
        params = self.request.query_params

        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('adAccountId', '').isdigit():
            queryset = queryset.filter(ad_account_id=params['adAccountId'])
        if params.get('clientId', '').isdigit():
            queryset = queryset.filter(client_id=params['clientId'])
        if params.get('search'):
            queryset = queryset.filter(name__icontains=params['search'])
        return queryset

    @retry(
        retry=retry_if_exception_type(OperationalError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    def _serialize_list(self):
        return self.get_serializer(self.get_queryset(), many=True).data

    def list(self, request, *args, **kwargs):
        if any(request.query_params.get(name) for name in LIST_FILTERS):
            return Response(self._serialize_list())

        key = campaign_list_key()
        data = cache.get(key)
        if data is None:
            data = self._serialize_list()
            cache.set(key, data, READ_TIMEOUT)
        return Response(data)

    def retrieve(self, request, *args, **kwargs):
        key = campaign_detail_key(kwargs['pk'])
        data = cache.get(key)
        if data is None:
            data = self.get_serializer(self.get_object()).data
            cache.set(key, data, READ_TIMEOUT)
        return Response(data)

    def perform_create(self, serializer):
        campaign = serializer.save()
        invalidate_campaign_reads(campaign.pk)

    def perform_update(self, serializer):
        campaign = serializer.save()
        invalidate_campaign_reads(campaign.pk)

    def perform_destroy(self, instance):
        campaign_id = instance.pk
        instance.delete()
        invalidate_campaign_reads(campaign_id)

    @action(detail=True, methods=['get', 'post'], url_path='daily-spends')
    def daily_spends(self, request, pk=None):
        campaign = self.get_object()

        if request.method == 'GET':
            try:
                entries = list_entries(
                    campaign.pk,
                    request.query_params.get('from') or None,
                    request.query_params.get('to') or None,
                )
            except InvalidSpendDate as e:
                raise ValidationError({'detail': str(e)})
            return Response(DailySpendEntrySerializer(entries, many=True).data)

        serializer = DailySpendWriteSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        entry, ticket = record_daily_spend(
            campaign.pk,
            serializer.validated_data['date'],
            serializer.validated_data['amount'],
        )
        payload = DailySpendEntrySerializer(entry).data
        payload['sync'] = {
            'status': 'scheduled' if ticket.queued else 'failed',
            'due_at': ticket.due_at,
            'total': str(ticket.total),
        }
        return Response(payload, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def calendar(self, request, pk=None):
        campaign = self.get_object()
        days = build_calendar(
            campaign.pk,
            today=utc_today(),
            days=settings.SPEND_CALENDAR_DAYS,
            edit_days=settings.SPEND_EDIT_WINDOW_DAYS,
        )
        total = to_money(sum(day.amount for day in days))
        return Response({
            'campaign_id': campaign.pk,
            'window_days': settings.SPEND_CALENDAR_DAYS,
            'edit_window_days': settings.SPEND_EDIT_WINDOW_DAYS,
            'days': CalendarDaySerializer(days, many=True).data,
            'total': str(total),
        })

    @action(detail=True, methods=['get', 'post'], url_path='spend-sync')
    def spend_sync(self, request, pk=None):
        campaign = self.get_object()
        debouncer = SpendSyncDebouncer()

        if request.method == 'POST':
            ticket = request_sync(campaign.pk, debouncer=debouncer)
            logger.info("Manual spend sync requested for campaign %s", campaign.pk)
            return Response({
                'campaign_id': campaign.pk,
                'status': 'scheduled' if ticket.queued else 'failed',
                'due_at': ticket.due_at,
                'total': str(ticket.total),
            }, status=status.HTTP_202_ACCEPTED)

        return Response(debouncer.status(campaign.pk))

    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, pk=None):
        campaign = self.get_object()

        if request.method == 'GET':
            return Response(CampaignCommentSerializer(campaign.comments.all(), many=True).data)

        serializer = CampaignCommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(
            campaign=campaign,
            author=request.user,
            author_name=request.user.display_name,
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get', 'post'], url_path='ad-copy-sets')
    def ad_copy_sets(self, request, pk=None):
        campaign = self.get_object()

        if request.method == 'GET':
            return Response(AdCopySetSerializer(campaign.ad_copy_sets.all(), many=True).data)

        serializer = AdCopySetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(campaign=campaign)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post', 'put'], url_path=r'ad-copy-sets/(?P<set_id>\d+)/set-active')
    def set_active_ad_copy_set(self, request, pk=None, set_id=None):
        campaign = self.get_object()
        copy_set = get_object_or_404(AdCopySet, pk=set_id, campaign=campaign)

        with transaction.atomic():
            campaign.ad_copy_sets.exclude(pk=copy_set.pk).update(is_active=False)
            copy_set.is_active = True
            copy_set.save(update_fields=['is_active', 'updated_at'])

        return Response({'message': 'Ad copy set set as active', 'id': copy_set.pk})


class AdCopySetViewSet(mixins.RetrieveModelMixin,
                       mixins.UpdateModelMixin,
                       mixins.DestroyModelMixin,
                       mixins.ListModelMixin,
                       viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = AdCopySetSerializer
    queryset = AdCopySet.objects.select_related('campaign')
