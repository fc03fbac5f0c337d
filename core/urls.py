"""
URL configuration for the back office.

Campaign analytics is mounted ahead of the campaigns router so that
``/api/campaigns/analytics`` is not captured as a campaign detail lookup.
"""

from django.contrib import admin
from django.urls import path
from django.urls import include
from django.http import JsonResponse
from strawberry.django.views import GraphQLView
from core.graphql.schema import schema
from django.views.decorators.csrf import csrf_exempt
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


def home_view(request):
    return JsonResponse({
        "message": "Agency Back Office API",
        "status": "running",
        "endpoints": {
            "admin": "/admin/",
            "api": "/api/",
            "graphql": "/graphql/",
            "docs": "/api/docs/",
            "schema": "/api/schema/"
        }
    })


urlpatterns = [
    path("", home_view, name="home"),
    path("admin/", admin.site.urls),
    path("api/auth/", include("apps.authentication.urls")),
    path("api/", include("apps.analytics.urls")),
    path("api/", include("apps.clients.urls")),
    path("api/", include("apps.ad_accounts.urls")),
    path("api/", include("apps.campaigns.urls")),
    path('graphql/', csrf_exempt(GraphQLView.as_view(schema=schema, graphql_ide="graphiql"))),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
