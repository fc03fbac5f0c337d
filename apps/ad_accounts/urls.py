from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdAccountViewSet

router = DefaultRouter()
router.register(r'ad-accounts', AdAccountViewSet, basename='ad-account')

urlpatterns = [
    path('', include(router.urls)),
]
