from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdCopySetViewSet, CampaignViewSet

router = DefaultRouter()
router.register(r'campaigns', CampaignViewSet, basename='campaign')
router.register(r'ad-copy-sets', AdCopySetViewSet, basename='ad-copy-set')

urlpatterns = [
    path('', include(router.urls)),
]
