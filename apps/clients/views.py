from django.db.models import Count, ProtectedError
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from apps.campaigns.cache import invalidate_all_campaign_reads
from .models import Client
from .serializers import ClientSerializer


class ClientViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = ClientSerializer

    def get_queryset(self):
        return Client.objects.annotate(ad_accounts_count=Count('ad_accounts'))

    def perform_update(self, serializer):
        serializer.save()
        invalidate_all_campaign_reads()

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            instance.delete()
        except ProtectedError:
            # Ad accounts cascade, their campaigns do not
            return Response(
                {'error': 'Client still has campaigns under its ad accounts'},
                status=status.HTTP_409_CONFLICT
            )
        invalidate_all_campaign_reads()
        return Response(status=status.HTTP_204_NO_CONTENT)
