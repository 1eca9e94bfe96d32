from django.db import models
from routes.models import TrainRoute, RouteStation
from stations.models import Station
import random
from utils.constants import Choices, ScheduleStatus


class ActiveManager(models.Manager):
    """Manager that returns only active records"""

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)


class Compartment(models.Model):
    """
    A seating class on a train: fixed seat count and the fare for the full route.
    """

    name = models.CharField(max_length=100)
    compartment_type = models.CharField(
        max_length=20, choices=Choices.COMPARTMENT_TYPE_CHOICES, db_index=True
    )
    price = models.DecimalField(
        max_digits=10, decimal_places=2,
        help_text="Base fare for travelling the whole route"
    )
    total_seat = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "compartments"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_compartment_type_display()}, {self.total_seat} seats)"


class Train(models.Model):
    """
    Represents a train with its number, name, type, route and compartments.
    Supports soft delete via is_active.
    """

    TRAIN_TYPE_CHOICES = Choices.TRAIN_TYPE_CHOICES
    train_number = models.CharField(max_length=10, unique=True, blank=True, db_index=True)
    name = models.CharField(max_length=200)
    train_type = models.CharField(
        max_length=20,
        choices=Choices.TRAIN_TYPE_CHOICES,
        db_index=True
        )
    route = models.ForeignKey(
        TrainRoute, on_delete=models.PROTECT, null=True, blank=True, related_name="trains"
    )
    compartments = models.ManyToManyField(Compartment, blank=True, related_name="trains")
    is_active = models.BooleanField(
        default=True, help_text="Indicates if the train is active or soft deleted", db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Managers
    objects = ActiveManager()  # Returns only active records
    all_objects = models.Manager()  # Returns all records including inactive

    def generate_train_number(self):
        """
        Generates a unique 5-digit train number for new trains.
        """
        while True:
            train_number = str(random.randint(10000, 99999))
            if not Train.all_objects.filter(train_number=train_number).exists():
                return train_number

    def save(self, *args, **kwargs):
        """
        Saves the train, auto-generating a train number if needed.
        """
        if not self.train_number:
            self.train_number = self.generate_train_number()

        super().save(*args, **kwargs)

    def __str__(self):
        status = " (Inactive)" if not self.is_active else ""
        return f"{self.name} ({self.train_number}){status}"

    class Meta:
        db_table = "trains"
        verbose_name = "Train"
        verbose_name_plural = "Trains"
        ordering = ["train_number"]
        indexes = [
            models.Index(fields=['train_number', 'is_active']),
            models.Index(fields=['train_type', 'is_active']),
        ]


class TrainSchedule(models.Model):
    """
    One day's run of a train over its route, leaving at departure_time.
    The route is copied from the train when the schedule is created.
    """

    train = models.ForeignKey(Train, on_delete=models.CASCADE, related_name="schedules")
    route = models.ForeignKey(TrainRoute, on_delete=models.PROTECT, related_name="schedules")
    departure_date = models.DateField(db_index=True)
    departure_time = models.CharField(max_length=5, help_text="HH:MM, 24-hour")
    status = models.CharField(
        max_length=20,
        choices=Choices.SCHEDULE_STATUS_CHOICES,
        default=ScheduleStatus.SCHEDULED,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "train_schedules"
        verbose_name = "Train Schedule"
        verbose_name_plural = "Train Schedules"
        ordering = ["departure_date", "departure_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["train", "departure_time"],
                name="unique_schedule_per_train_departure_time",
            )
        ]
        indexes = [
            models.Index(fields=['route', 'departure_date']),
            models.Index(fields=['train', 'status']),
        ]

    @property
    def is_cancelled(self):
        return self.status == ScheduleStatus.CANCELLED

    def __str__(self):
        return f"{self.train} on {self.departure_date} at {self.departure_time}"


class StationSchedule(models.Model):
    """
    Timing of one route station within a schedule.
    duration_from_previous and waiting_time are derived minutes.
    """

    schedule = models.ForeignKey(
        TrainSchedule, on_delete=models.CASCADE, related_name="station_schedules"
    )
    station = models.ForeignKey(Station, on_delete=models.PROTECT, related_name="+")
    route_station = models.ForeignKey(RouteStation, on_delete=models.PROTECT, related_name="+")
    sequence_order = models.PositiveIntegerField()
    estimated_arrival = models.DateTimeField()
    estimated_departure = models.DateTimeField()
    actual_arrival = models.DateTimeField(null=True, blank=True)
    actual_departure = models.DateTimeField(null=True, blank=True)
    duration_from_previous = models.IntegerField(default=0)
    waiting_time = models.IntegerField(default=0)
    status = models.CharField(
        max_length=20, choices=Choices.STATION_SCHEDULE_STATUS_CHOICES, default="pending"
    )
    platform_number = models.CharField(max_length=10, blank=True)
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = "station_schedules"
        ordering = ["schedule", "sequence_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["schedule", "sequence_order"],
                name="unique_sequence_per_schedule",
            )
        ]

    def __str__(self):
        return f"{self.schedule_id} #{self.sequence_order} {self.station.code}"
