"""
Root URLconf: Django admin, the labcore API and its OpenAPI documents
(``/swagger/`` and ``/redoc/``).
"""
from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework.permissions import AllowAny

# also referenced by SWAGGER_SETTINGS["DEFAULT_INFO"]
api_info = openapi.Info(
    title="Pathology Lab API",
    default_version="v1",
    description="Users, labs, test catalog, lab tests and test orders for pathology labs.",
)

docs_view = get_schema_view(api_info, public=True, permission_classes=(AllowAny,))

urlpatterns = [
    path("admin/", admin.site.urls),
    path("swagger/", docs_view.with_ui("swagger", cache_timeout=0), name="schema-swagger-ui"),
    path("redoc/", docs_view.with_ui("redoc", cache_timeout=0), name="schema-redoc"),
    path("", include("labcore.routers")),
]
