from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CompartmentViewSet, TrainViewSet, TrainScheduleViewSet, TrainSearchViewSet

router = DefaultRouter()
router.register(r'admin/compartments', CompartmentViewSet, basename='admin-compartments')
router.register(r'admin/trains', TrainViewSet, basename='admin-trains')
router.register(r'admin/train-schedules', TrainScheduleViewSet, basename='admin-train-schedules')
router.register(r'trains', TrainSearchViewSet, basename='trains')

urlpatterns = [
    path('api/', include(router.urls)),
]
