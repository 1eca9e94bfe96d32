import logging
from decimal import Decimal
from django.db import transaction
from exceptions.handlers import NotFoundException
from utils.constants import RouteMessage

logger = logging.getLogger("routes")


class RouteIndex:
    """
    Read-only projection of a route's ordered station list.
    Shared by schedule construction, search and booking.
    """

    @staticmethod
    def stations_in_order(route_id):
        """
        Return the route's stations sorted by distance from the route start.

        Args:
            route_id (int): TrainRoute id

        Returns:
            list: RouteStation rows with their station loaded

        Raises:
            NotFoundException: If the route does not exist
        """
        from routes.models import TrainRoute, RouteStation

        if not TrainRoute.objects.filter(pk=route_id).exists():
            logger.error(f"Train route {route_id} not found.")
            raise NotFoundException(RouteMessage.ROUTE_NOT_FOUND)

        return list(
            RouteStation.objects.filter(route_id=route_id)
            .select_related("station")
            .order_by("distance_from_start")
        )

    @staticmethod
    def position_of(route_id, station_id):
        """
        Return the distance from start of a station on a route.

        Raises:
            NotFoundException: If the route or the station-on-route is missing
        """
        index = RouteIndex.index_by_station(RouteIndex.stations_in_order(route_id))
        route_station = index.get(station_id)
        if route_station is None:
            logger.warning(f"Station {station_id} is not on route {route_id}.")
            raise NotFoundException(RouteMessage.STATION_NOT_ON_ROUTE)
        return route_station.distance_from_start

    @staticmethod
    def index_by_station(route_stations):
        """Map station id -> RouteStation for an already loaded station list."""
        return {rs.station_id: rs for rs in route_stations}


class RouteBuilderHelpers:
    """
    Builds routes whose distances satisfy the route invariants by
    construction: first station at 0, strictly increasing cumulative
    distance, last station at the total distance.
    """

    @staticmethod
    def build_route(name, stations, segment_distances):
        """
        Create a TrainRoute and its RouteStation rows atomically.

        Args:
            name (str): Route name
            stations (list): Station objects in travel order
            segment_distances (list): Distance from the previous station for
                each station; the first value must be 0

        Returns:
            TrainRoute: The created route
        """
        from routes.models import TrainRoute, RouteStation

        cumulative = []
        running = Decimal("0")
        for distance in segment_distances:
            running += Decimal(distance)
            cumulative.append(running)

        with transaction.atomic():
            route = TrainRoute.objects.create(
                name=name,
                total_distance=cumulative[-1],
                start_station=stations[0],
                end_station=stations[-1],
            )
            RouteStation.objects.bulk_create([
                RouteStation(
                    route=route,
                    station=station,
                    previous_station=stations[idx - 1] if idx > 0 else None,
                    next_station=stations[idx + 1] if idx < len(stations) - 1 else None,
                    distance=Decimal(segment_distances[idx]),
                    distance_from_start=cumulative[idx],
                )
                for idx, station in enumerate(stations)
            ])

        logger.info(
            f"Route created: {route.name} with {len(stations)} stations, "
            f"{route.total_distance} km"
        )
        return route
