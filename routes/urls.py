from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import TrainRouteViewSet

router = DefaultRouter()
router.register(r"admin/routes", TrainRouteViewSet, basename="train-route")

urlpatterns = [
    path("api/", include(router.urls)),
]
