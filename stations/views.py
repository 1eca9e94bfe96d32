from rest_framework import viewsets, status
from rest_framework.response import Response
from .models import Station
from .serializers import StationSerializer
from exceptions.handlers import ConflictException, NotFoundException
from routes.models import RouteStation
from utils.permission_helpers import DynamicPermissionMixin
from utils.queryset_helpers import FilterableQuerysetMixin
from utils.validators import StationValidators
from utils.constants import StationMessage
import logging

logger = logging.getLogger("stations")


class StationViewSet(DynamicPermissionMixin, FilterableQuerysetMixin,
                     viewsets.ModelViewSet):
    """
    Provides CRUD and soft delete endpoints for stations.
    Reads are public, writes are admin only.
    """

    queryset = Station.objects.all()
    serializer_class = StationSerializer
    lookup_field = "code"
    filter_fields = ["city", "district"]

    def get_object(self):
        """
        Retrieves a station by code, raising NotFoundException when missing.
        """
        code = self.kwargs.get("code", "")
        try:
            return Station.all_objects.get(code=code.upper())
        except Station.DoesNotExist:
            logger.warning(f"Station with code {code} not found.")
            raise NotFoundException(StationMessage.STATION_NOT_FOUND)

    def create(self, request, *args, **kwargs):
        """
        Creates a new station. Duplicate checks run in Station.full_clean().
        """
        logger.info(f"Attempting to create station with data: {request.data}")
        return super().create(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """
        Soft deletes a station that no route references.
        """
        station = self.get_object()
        StationValidators.validate_station_for_deletion(station)

        if RouteStation.objects.filter(station=station).exists():
            logger.warning(
                f"Refusing to remove {station.code}: referenced by a train route."
            )
            raise ConflictException(StationMessage.STATION_IN_USE)

        station.is_active = False
        station.save()
        logger.info(f"{station.name} ({station.code}) station deleted successfully.")
        return Response(status=status.HTTP_204_NO_CONTENT)
