from django.db import models
from django.contrib.auth import get_user_model
from utils.constants import Choices, BookingStatus

User = get_user_model()


class Booking(models.Model):
    """
    One passenger's claim on one seat of a compartment for one schedule,
    between two stations of the schedule's route.
    A seat is held by at most one live booking per schedule and compartment.
    """

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    schedule = models.ForeignKey('trains.TrainSchedule', on_delete=models.PROTECT,
                                 related_name='bookings')
    compartment = models.ForeignKey('trains.Compartment', on_delete=models.PROTECT,
                                    related_name='bookings')
    seat_number = models.CharField(max_length=10)
    from_station = models.ForeignKey('stations.Station', on_delete=models.PROTECT,
                                     related_name='source_bookings')
    to_station = models.ForeignKey('stations.Station', on_delete=models.PROTECT,
                                   related_name='destination_bookings')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=Choices.BOOKING_STATUS_CHOICES,
                              default=BookingStatus.CONFIRMED)
    booking_date = models.DateTimeField(auto_now_add=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Seat {self.seat_number} - {self.compartment.name} - {self.user.username}"

    class Meta:
        ordering = ['-booking_date']
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        db_table = 'booking'
        constraints = [
            models.UniqueConstraint(
                fields=['schedule', 'compartment', 'seat_number'],
                condition=models.Q(status__in=BookingStatus.LIVE),
                name='unique_live_seat_per_schedule_compartment',
            )
        ]
        indexes = [
            models.Index(fields=['schedule', 'compartment']),
            models.Index(fields=['user', 'status']),
        ]
