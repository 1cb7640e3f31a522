from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # JSON API consumed by the front end
    path("api/", include("construction_core.urls")),
]
