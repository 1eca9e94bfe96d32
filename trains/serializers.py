import logging
from rest_framework import serializers
from .models import Compartment, Train, TrainSchedule, StationSchedule
from routes.models import TrainRoute
from routes.serializers import TrainRouteSummarySerializer
from stations.serializers import StationSummarySerializer
from utils.constants import Choices, RouteMessage, ScheduleMessage
from utils.train_helpers import StationPlanEntry
from utils.validators import TrainValidators, ScheduleValidators
from exceptions.handlers import InvalidInputException

logger = logging.getLogger("trains")


class CompartmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Compartment
        fields = ["id", "name", "compartment_type", "price", "total_seat"]
        read_only_fields = ["id"]

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than 0.")
        return value

    def validate_total_seat(self, value):
        if value < 1:
            raise serializers.ValidationError("A compartment needs at least one seat.")
        return value


class TrainSummarySerializer(serializers.ModelSerializer):
    """Compact train representation nested into schedules, search results and bookings."""

    class Meta:
        model = Train
        fields = ["id", "train_number", "name", "train_type"]


class TrainSerializer(serializers.ModelSerializer):
    """
    Serializes train data, including route and compartments for API responses.
    """

    route = TrainRouteSummarySerializer(read_only=True)
    compartments = CompartmentSerializer(many=True, read_only=True)

    class Meta:
        model = Train
        fields = ["id", "train_number", "name", "train_type", "route", "compartments", "is_active"]
        read_only_fields = ["id", "train_number", "is_active"]


class TrainCreateUpdateSerializer(serializers.ModelSerializer):
    """
    Serializes and validates train creation and update requests.
    """

    train_number = serializers.CharField(required=False, read_only=True)
    route = serializers.PrimaryKeyRelatedField(
        queryset=TrainRoute.objects.all(), required=False, allow_null=True
    )
    compartment_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, write_only=True
    )

    class Meta:
        model = Train
        fields = ["train_number", "name", "train_type", "route", "compartment_ids"]

    def validate_compartment_ids(self, value):
        """
        Resolves compartment ids to Compartment objects, all or nothing.
        """
        return TrainValidators.validate_compartments_exist(value)


class StationPlanEntrySerializer(serializers.Serializer):
    """One station of a schedule request."""

    station_id = serializers.IntegerField(min_value=1)
    estimated_arrival = serializers.DateTimeField()
    estimated_departure = serializers.DateTimeField()
    platform_number = serializers.CharField(max_length=10, required=False, allow_blank=True, default="")
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class TrainScheduleCreateSerializer(serializers.Serializer):
    """
    Validates a schedule creation request and turns the station list into
    StationPlanEntry items for TrainScheduleHelpers.create_schedule.
    """

    train_id = serializers.IntegerField(min_value=1)
    departure_time = serializers.CharField(max_length=5)
    station_schedules = StationPlanEntrySerializer(many=True)

    def validate_departure_time(self, value):
        return ScheduleValidators.validate_departure_time(value)

    def validate_station_schedules(self, value):
        if not value:
            raise InvalidInputException(ScheduleMessage.STATION_PLAN_REQUIRED)
        return value

    def validate(self, attrs):
        attrs["station_plan"] = [StationPlanEntry(**entry) for entry in attrs["station_schedules"]]
        return attrs


class StationScheduleSerializer(serializers.ModelSerializer):
    station = StationSummarySerializer(read_only=True)

    class Meta:
        model = StationSchedule
        fields = [
            "id",
            "sequence_order",
            "station",
            "estimated_arrival",
            "estimated_departure",
            "actual_arrival",
            "actual_departure",
            "duration_from_previous",
            "waiting_time",
            "status",
            "platform_number",
            "remarks",
        ]


class TrainScheduleSerializer(serializers.ModelSerializer):
    """
    Schedule with train summary, route summary and ordered station timings.
    """

    train = TrainSummarySerializer(read_only=True)
    route = TrainRouteSummarySerializer(read_only=True)
    station_schedules = serializers.SerializerMethodField()

    class Meta:
        model = TrainSchedule
        fields = [
            "id",
            "train",
            "route",
            "departure_date",
            "departure_time",
            "status",
            "station_schedules",
            "created_at",
        ]

    def get_station_schedules(self, obj):
        ordered = sorted(obj.station_schedules.all(), key=lambda ss: ss.sequence_order)
        return StationScheduleSerializer(ordered, many=True).data


class TrainScheduleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Choices.SCHEDULE_STATUS_CHOICES)


class TrainSearchQuerySerializer(serializers.Serializer):
    """Query parameters of the train search endpoint."""

    from_station = serializers.IntegerField(min_value=1)
    to_station = serializers.IntegerField(min_value=1)
    date = serializers.DateField()

    def to_internal_value(self, data):
        if not data.get("from_station") or not data.get("to_station"):
            raise InvalidInputException(RouteMessage.FROM_AND_TO_REQUIRED)
        if not data.get("date"):
            raise InvalidInputException(RouteMessage.DATE_REQUIRED)
        return super().to_internal_value(data)


class SeatStatusQuerySerializer(serializers.Serializer):
    date = serializers.DateField()

    def to_internal_value(self, data):
        if not data.get("date"):
            raise InvalidInputException(RouteMessage.DATE_REQUIRED)
        return super().to_internal_value(data)


class TrainSearchResultSerializer(serializers.Serializer):
    schedule_id = serializers.IntegerField()
    train = TrainSummarySerializer()
    departure_date = serializers.DateField()
    departure_time = serializers.CharField()
    status = serializers.CharField()
    compartments = CompartmentSerializer(many=True)


class SeatSerializer(serializers.Serializer):
    seat_number = serializers.CharField()
    status = serializers.CharField()
    booking_id = serializers.IntegerField(allow_null=True)


class SeatStatusSerializer(serializers.Serializer):
    """Seat map of one compartment on one schedule."""

    schedule_id = serializers.IntegerField()
    compartment_id = serializers.IntegerField()
    date = serializers.DateField()
    total_seats = serializers.IntegerField()
    booked_seats = serializers.IntegerField()
    available_seats = serializers.IntegerField()
    seats = SeatSerializer(many=True)
