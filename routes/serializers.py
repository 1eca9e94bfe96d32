import logging
from rest_framework import serializers
from .models import TrainRoute, RouteStation
from stations.serializers import StationSummarySerializer
from utils.validators import RouteValidators

logger = logging.getLogger("routes")


class RouteStopSerializer(serializers.Serializer):
    """One stop of a route request: station code and distance from the previous stop."""

    station_code = serializers.CharField(max_length=5)
    distance = serializers.DecimalField(max_digits=10, decimal_places=2)


class TrainRouteCreateSerializer(serializers.Serializer):
    """
    Validates a route creation request.
    Stops are given in travel order; the first stop's distance must be 0.
    """

    name = serializers.CharField(max_length=100)
    stops = RouteStopSerializer(many=True)

    def validate(self, attrs):
        stops = attrs["stops"]
        codes = [stop["station_code"].strip().upper() for stop in stops]
        distances = [stop["distance"] for stop in stops]

        RouteValidators.validate_route_stops(codes, distances)
        attrs["stations"] = RouteValidators.validate_stations_exist(codes)
        attrs["segment_distances"] = distances
        return attrs


class RouteStationSerializer(serializers.ModelSerializer):
    """Route Index entry: station with its position on the route."""

    station = StationSummarySerializer(read_only=True)

    class Meta:
        model = RouteStation
        fields = ["id", "station", "distance", "distance_from_start"]


class TrainRouteSerializer(serializers.ModelSerializer):
    """
    Serializes a route with start/end stations and its ordered stations.
    """

    start_station = StationSummarySerializer(read_only=True)
    end_station = StationSummarySerializer(read_only=True)
    stations = serializers.SerializerMethodField()

    class Meta:
        model = TrainRoute
        fields = ["id", "name", "total_distance", "start_station", "end_station",
                  "is_active", "stations"]

    def get_stations(self, obj):
        ordered = sorted(obj.stations.all(), key=lambda rs: rs.distance_from_start)
        return RouteStationSerializer(ordered, many=True).data


class TrainRouteSummarySerializer(serializers.ModelSerializer):
    """Route summary nested into trains, schedules and bookings."""

    start_station = StationSummarySerializer(read_only=True)
    end_station = StationSummarySerializer(read_only=True)

    class Meta:
        model = TrainRoute
        fields = ["id", "name", "total_distance", "start_station", "end_station"]
