from rest_framework import serializers
from .models import Station


class StationSerializer(serializers.ModelSerializer):
    """
    Serializes station data for API representation and validation.
    Uniqueness and format checks run in Station.clean().
    """

    # Model-level validators are replaced by StationValidators in clean()
    code = serializers.CharField(max_length=5, validators=[])

    class Meta:
        model = Station
        fields = ["id", "name", "code", "city", "district", "is_active"]
        read_only_fields = ["id", "is_active"]


class StationSummarySerializer(serializers.ModelSerializer):
    """Compact station representation nested into routes, schedules and bookings."""

    class Meta:
        model = Station
        fields = ["id", "name", "code", "city"]
