from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("accounts.urls")),
    path("", include("stations.urls")),
    path("", include("routes.urls")),
    path("", include("trains.urls")),
    path("", include("bookingsystem.urls")),
]
