import logging
import time

from django.utils.dateparse import parse_date
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .circuit_breaker import CircuitBreaker, CircuitOpenError
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)

analytics_circuit = CircuitBreaker(failure_threshold=5, recovery_timeout=60)


class AnalyticsUnavailable(APIException):
    status_code = 503
    default_detail = 'Analytics are temporarily unavailable.'
    default_code = 'analytics_unavailable'


@analytics_circuit
def _cached_rollup(ad_account_id, campaign_id, start_date, end_date):
    return AnalyticsRepository.campaign_rollup(
        ad_account_id=ad_account_id,
        campaign_id=campaign_id,
        start_date=start_date,
        end_date=end_date,
    )


def _parse_id(params, name, errors):
    raw = params.get(name)
    if not raw:
        return None
    if not raw.isdigit():
        errors[name] = 'Must be a positive integer.'
        return None
    return int(raw)


def _parse_day(params, name, errors):
    raw = params.get(name)
    if not raw:
        return None
    try:
        day = parse_date(raw)
    except ValueError:
        day = None
    if day is None:
        errors[name] = 'Must be a date in YYYY-MM-DD format.'
    return day


def _money(value):
    return f"{value:.2f}"


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def campaign_analytics(request):
    """Per ad account spend/budget rollup with grand totals"""
    params = request.query_params
    errors = {}
    ad_account_id = _parse_id(params, 'adAccountId', errors)
    campaign_id = _parse_id(params, 'campaignId', errors)
    start_date = _parse_day(params, 'startDate', errors)
    end_date = _parse_day(params, 'endDate', errors)

    if start_date and end_date and start_date > end_date:
        errors['startDate'] = 'Must not be after endDate.'
    if errors:
        return Response({'error': 'Invalid query parameters', 'fields': errors}, status=400)

    try:
        rollup = _cached_rollup(ad_account_id, campaign_id, start_date, end_date)
    except CircuitOpenError as e:
        logger.error(f"Campaign analytics unavailable: {e}")
        raise AnalyticsUnavailable()

    return Response({
        'perAccount': [
            {
                **row,
                'totalSpend': _money(row['totalSpend']),
                'totalBudget': _money(row['totalBudget']),
                'availableBalance': _money(row['availableBalance']),
            }
            for row in rollup['perAccount']
        ],
        'grandTotalSpend': _money(rollup['grandTotalSpend']),
        'grandTotalBudget': _money(rollup['grandTotalBudget']),
        'totalCampaigns': rollup['totalCampaigns'],
        'filters': {
            'adAccountId': ad_account_id,
            'campaignId': campaign_id,
            'startDate': start_date,
            'endDate': end_date,
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def circuit_breaker_status(request):
    """Circuit breaker status monitoring"""
    status_data = [
        {**circuit, 'last_check': time.time()}
        for circuit in analytics_circuit.status()
    ]
    return Response({
        'circuit_breakers': status_data,
        'overall_health': 'OK' if all(c['state'] == 'closed' for c in status_data) else 'DEGRADED'
    })
