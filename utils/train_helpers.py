import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, time
from django.db import transaction, IntegrityError
from django.utils import timezone
from exceptions.handlers import NotFoundException, ConflictException, InvalidInputException
from utils.constants import RouteMessage, TrainMessage, ScheduleMessage
from utils.route_helpers import RouteIndex

logger = logging.getLogger("trains")


@dataclass(frozen=True)
class StationPlanEntry:
    """Timing of one station in a schedule request, already validated by the serializer."""

    station_id: int
    estimated_arrival: datetime
    estimated_departure: datetime
    platform_number: str = ""
    remarks: str = ""


def minutes_between(start, end):
    """Whole minutes from start to end, half a minute rounding up. May be negative."""
    return math.floor((end - start).total_seconds() / 60 + 0.5)


def parse_time_of_day(value):
    """Turn an "HH:MM" departure time string into a datetime.time."""
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


class TrainScheduleHelpers:
    """
    Builds train schedules from a per-station timing plan.
    A schedule and its station rows are written together or not at all.
    """

    @staticmethod
    def validate_station_plan(route_stations, station_plan):
        """
        Checks the plan covers exactly the route's stations, in route order.

        Args:
            route_stations (list): RouteStation rows from RouteIndex.stations_in_order
            station_plan (list): StationPlanEntry items in requested order

        Raises:
            ConflictException: If a station is off the route, or the plan's
                station sequence differs from the route in content, order or count
        """
        route_station_ids = [rs.station_id for rs in route_stations]
        on_route = set(route_station_ids)
        plan_station_ids = [entry.station_id for entry in station_plan]

        missing = [station_id for station_id in plan_station_ids if station_id not in on_route]
        if missing:
            logger.warning(f"Stations not on route: {missing}")
            raise ConflictException(
                ScheduleMessage.STATIONS_NOT_IN_ROUTE.format(
                    station_ids=", ".join(str(station_id) for station_id in missing)
                )
            )

        if plan_station_ids != route_station_ids:
            logger.warning(
                f"Station sequence {plan_station_ids} does not match route order {route_station_ids}"
            )
            raise ConflictException(ScheduleMessage.SEQUENCE_MISMATCH)

    @staticmethod
    def calculate_station_timings(station_plan):
        """
        Derive waiting time and duration from the previous station, in minutes.

        Returns:
            list: One dict per plan entry with "waiting_time" and
                "duration_from_previous" (0 for the first station)
        """
        timings = []
        previous = None
        for entry in station_plan:
            waiting_time = minutes_between(entry.estimated_arrival, entry.estimated_departure)
            duration = 0
            if previous is not None:
                duration = minutes_between(previous.estimated_departure, entry.estimated_arrival)
                if duration < 0:
                    logger.warning(
                        f"Station {entry.station_id} arrives {-duration} min before the "
                        f"previous station's departure."
                    )
            timings.append({"waiting_time": waiting_time, "duration_from_previous": duration})
            previous = entry
        return timings

    @staticmethod
    def create_schedule(train_id, departure_time, station_plan):
        """
        Create a schedule for a train's route with one station row per route station.

        Args:
            train_id (int): Train id
            departure_time (str): "HH:MM"; matched literally against existing schedules
            station_plan (list): StationPlanEntry items in route order

        Returns:
            TrainSchedule: The created schedule

        Raises:
            NotFoundException: If the train does not exist
            ConflictException: If the train has no route, a schedule already exists
                at departure_time, or the plan does not match the route
        """
        from trains.models import Train, TrainSchedule, StationSchedule

        try:
            train = Train.objects.select_related("route").get(pk=train_id)
        except Train.DoesNotExist:
            logger.warning(f"Schedule requested for unknown train {train_id}.")
            raise NotFoundException(TrainMessage.TRAIN_NOT_FOUND)

        if train.route_id is None:
            logger.warning(f"Train {train.train_number} has no route assigned.")
            raise ConflictException(TrainMessage.TRAIN_ROUTE_REQUIRED)

        if TrainSchedule.objects.filter(train=train, departure_time=departure_time).exists():
            logger.warning(f"Train {train.train_number} already runs at {departure_time}.")
            raise ConflictException(ScheduleMessage.SCHEDULE_ALREADY_EXISTS)

        route_stations = RouteIndex.stations_in_order(train.route_id)
        TrainScheduleHelpers.validate_station_plan(route_stations, station_plan)
        timings = TrainScheduleHelpers.calculate_station_timings(station_plan)

        first_departure = station_plan[0].estimated_departure
        if timezone.is_aware(first_departure):
            first_departure = timezone.localtime(first_departure)

        try:
            with transaction.atomic():
                schedule = TrainSchedule.objects.create(
                    train=train,
                    route_id=train.route_id,
                    departure_date=first_departure.date(),
                    departure_time=departure_time,
                )
                StationSchedule.objects.bulk_create([
                    StationSchedule(
                        schedule=schedule,
                        station_id=entry.station_id,
                        route_station=route_station,
                        sequence_order=idx + 1,
                        estimated_arrival=entry.estimated_arrival,
                        estimated_departure=entry.estimated_departure,
                        duration_from_previous=timing["duration_from_previous"],
                        waiting_time=timing["waiting_time"],
                        platform_number=entry.platform_number,
                        remarks=entry.remarks,
                    )
                    for idx, (entry, route_station, timing) in enumerate(
                        zip(station_plan, route_stations, timings)
                    )
                ])
        except IntegrityError:
            logger.warning(
                f"Concurrent schedule insert for train {train.train_number} at {departure_time}."
            )
            raise ConflictException(ScheduleMessage.SCHEDULE_ALREADY_EXISTS)

        logger.info(
            f"Schedule {schedule.id} created for train {train.train_number} on "
            f"{schedule.departure_date} at {departure_time} with {len(station_plan)} stations."
        )
        return schedule

    @staticmethod
    def update_status(schedule, new_status):
        """Apply an operational status change (e.g. cancelling a run)."""
        old_status = schedule.status
        schedule.status = new_status
        schedule.save(update_fields=["status", "updated_at"])
        logger.info(f"Schedule {schedule.id} status changed: {old_status} -> {new_status}")
        return schedule


class TrainSearchHelpers:
    """
    Finds schedules that travel from one station to another on a given day.
    """

    @staticmethod
    def find_valid_route_ids(from_station_id, to_station_id):
        """
        Routes that visit both stations with the origin before the destination.

        Returns:
            list: TrainRoute ids
        """
        from routes.models import RouteStation

        positions = defaultdict(dict)
        rows = RouteStation.objects.filter(
            station_id__in=[from_station_id, to_station_id]
        ).values_list("route_id", "station_id", "distance_from_start")
        for route_id, station_id, distance_from_start in rows:
            positions[route_id][station_id] = distance_from_start

        return [
            route_id
            for route_id, stops in positions.items()
            if from_station_id in stops
            and to_station_id in stops
            and stops[from_station_id] < stops[to_station_id]
        ]

    @staticmethod
    def search_trains(from_station_id, to_station_id, travel_date):
        """
        Schedules running from_station -> to_station on travel_date.

        Args:
            from_station_id (int): Origin station id
            to_station_id (int): Destination station id
            travel_date (date): Calendar day of travel

        Returns:
            list: Dicts with schedule_id, train, departure_date, departure_time,
                status and compartments, ordered by departure time

        Raises:
            InvalidInputException: If no route runs between the stations in that direction
        """
        from trains.models import TrainSchedule

        valid_route_ids = TrainSearchHelpers.find_valid_route_ids(from_station_id, to_station_id)
        if not valid_route_ids:
            logger.info(f"No valid routes from station {from_station_id} to {to_station_id}.")
            raise InvalidInputException(RouteMessage.NO_VALID_ROUTES)

        schedules = (
            TrainSchedule.objects.filter(
                route_id__in=valid_route_ids,
                departure_date=travel_date,
                train__is_active=True,
            )
            .select_related("train")
            .prefetch_related("train__compartments")
        )
        schedules = sorted(schedules, key=lambda s: parse_time_of_day(s.departure_time))

        results = [
            {
                "schedule_id": schedule.id,
                "train": schedule.train,
                "departure_date": schedule.departure_date,
                "departure_time": schedule.departure_time,
                "status": schedule.status,
                "compartments": list(schedule.train.compartments.all()),
            }
            for schedule in schedules
        ]
        logger.info(
            f"Search {from_station_id} -> {to_station_id} on {travel_date}: "
            f"{len(results)} schedule(s) on {len(valid_route_ids)} route(s)."
        )
        return results
