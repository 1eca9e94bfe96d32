from django.db import models
from stations.models import Station


class TrainRoute(models.Model):
    """
    A fixed, ordered sequence of stations with cumulative distances.
    Shared by every train assigned to it; immutable once a schedule uses it.
    """

    name = models.CharField(max_length=100)
    total_distance = models.DecimalField(max_digits=10, decimal_places=2)
    start_station = models.ForeignKey(Station, related_name='routes_starting',
                                      on_delete=models.PROTECT)
    end_station = models.ForeignKey(Station, related_name='routes_ending',
                                    on_delete=models.PROTECT)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'train_routes'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.start_station.code} - {self.end_station.code})"


class RouteStation(models.Model):
    """
    One station's position on a route.
    distance is measured from the previous station, distance_from_start
    from the first station of the route.
    """

    route = models.ForeignKey(TrainRoute, on_delete=models.CASCADE, related_name='stations')
    station = models.ForeignKey(Station, on_delete=models.PROTECT, related_name='route_positions')
    previous_station = models.ForeignKey(Station, on_delete=models.PROTECT, null=True,
                                         blank=True, related_name='+')
    next_station = models.ForeignKey(Station, on_delete=models.PROTECT, null=True,
                                     blank=True, related_name='+')
    distance = models.DecimalField(max_digits=10, decimal_places=2)
    distance_from_start = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = 'route_stations'
        ordering = ['route', 'distance_from_start']
        constraints = [
            models.UniqueConstraint(fields=['route', 'station'],
                                    name='unique_station_per_route'),
            models.UniqueConstraint(fields=['route', 'distance_from_start'],
                                    name='unique_position_per_route'),
        ]

    def __str__(self):
        return f"{self.route.name}: {self.station.code} @ {self.distance_from_start} km"
