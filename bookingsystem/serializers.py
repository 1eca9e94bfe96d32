from rest_framework import serializers
from .models import Booking
from stations.serializers import StationSummarySerializer
from trains.serializers import CompartmentSerializer, TrainSummarySerializer


class BookSeatSerializer(serializers.Serializer):
    """
    Validates a seat booking request.
    seat_number stays a string; BookingHelpers.book_seat checks its range.
    """

    schedule_id = serializers.IntegerField(min_value=1)
    compartment_id = serializers.IntegerField(min_value=1)
    seat_number = serializers.CharField(max_length=10)
    from_station_id = serializers.IntegerField(min_value=1)
    to_station_id = serializers.IntegerField(min_value=1)


class BookingSerializer(serializers.ModelSerializer):
    """
    Serializes booking data for API usage, with the train, route,
    compartment and station details a ticket shows.
    """

    train = TrainSummarySerializer(source="schedule.train", read_only=True)
    route_name = serializers.CharField(source="schedule.route.name", read_only=True)
    departure_date = serializers.DateField(source="schedule.departure_date", read_only=True)
    departure_time = serializers.CharField(source="schedule.departure_time", read_only=True)
    compartment = CompartmentSerializer(read_only=True)
    from_station = StationSummarySerializer(read_only=True)
    to_station = StationSummarySerializer(read_only=True)
    user = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "user",
            "schedule",
            "train",
            "route_name",
            "departure_date",
            "departure_time",
            "compartment",
            "seat_number",
            "from_station",
            "to_station",
            "price",
            "status",
            "booking_date",
        ]
        read_only_fields = fields
