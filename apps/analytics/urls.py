from django.urls import path, re_path
from . import views

urlpatterns = [
    re_path(r'^campaigns/analytics/?$', views.campaign_analytics, name='campaign_analytics'),
    path('analytics/circuit-breaker/status/', views.circuit_breaker_status, name='circuit_status'),
]
