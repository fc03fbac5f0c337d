from django.db.models import ProtectedError
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from apps.campaigns.cache import invalidate_all_campaign_reads
from .models import AdAccount
from .serializers import AdAccountSerializer


class AdAccountViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = AdAccountSerializer

    def get_queryset(self):
        queryset = AdAccount.objects.select_related('client')
        client_id = self.request.query_params.get('clientId')
        if client_id and client_id.isdigit():
            queryset = queryset.filter(client_id=client_id)
        return queryset

    def perform_update(self, serializer):
        # Campaign payloads embed the account's spend limit in their balance
        serializer.save()
        invalidate_all_campaign_reads()

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            instance.delete()
        except ProtectedError:
            return Response(
                {'error': 'Ad account still has campaigns; delete or move them first'},
                status=status.HTTP_409_CONFLICT
            )
        invalidate_all_campaign_reads()
        return Response(status=status.HTTP_204_NO_CONTENT)
