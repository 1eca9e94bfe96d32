from django.http import Http404
from rest_framework import viewsets, status, permissions
from rest_framework.response import Response
from rest_framework.decorators import action
from .models import TrainRoute
from .serializers import (
    TrainRouteCreateSerializer,
    TrainRouteSerializer,
    RouteStationSerializer,
)
from utils.permission_helpers import AdminOnlyPermissionMixin
from utils.route_helpers import RouteIndex, RouteBuilderHelpers
from exceptions.handlers import NotFoundException
from utils.constants import RouteMessage
import logging

logger = logging.getLogger("routes")


class TrainRouteViewSet(AdminOnlyPermissionMixin, viewsets.ModelViewSet):
    """
    ViewSet for managing train routes.
    Routes are created in one request and are read-only afterwards.
    """

    queryset = TrainRoute.objects.select_related(
        "start_station", "end_station"
    ).prefetch_related("stations__station")
    serializer_class = TrainRouteSerializer
    http_method_names = ["get", "post", "head", "options"]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        """
        The ordered station list is readable by any authenticated user.
        """
        if self.action == "stations":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            logger.warning(f"Train route {self.kwargs.get('pk')} not found.")
            raise NotFoundException(RouteMessage.ROUTE_NOT_FOUND)

    def create(self, request, *args, **kwargs):
        """
        Creates a route from an ordered list of station codes and segment distances.
        """
        logger.info(f"Attempting to create train route with data: {request.data}")
        serializer = TrainRouteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated_data = serializer.validated_data

        route = RouteBuilderHelpers.build_route(
            validated_data["name"],
            validated_data["stations"],
            validated_data["segment_distances"],
        )
        route = self.get_queryset().get(pk=route.pk)
        return Response(TrainRouteSerializer(route).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="stations")
    def stations(self, request, pk=None):
        """
        Returns the route's stations ordered by distance from the start.
        """
        route_stations = RouteIndex.stations_in_order(pk)
        return Response(RouteStationSerializer(route_stations, many=True).data)
