import re
from decimal import Decimal, InvalidOperation
from django.core.exceptions import ValidationError
from utils.constants import (
    StationMessage, RouteMessage, TrainMessage, ScheduleMessage,
    BookingMessage, UserMessage, DEPARTURE_TIME_PATTERN)
from exceptions.handlers import (
    AlreadyExistsException, PermissionDeniedException, NotFoundException,
    InvalidInputException)
import logging

logger = logging.getLogger("validators")


class StationValidators:
    """
    Centralized validation logic for station-related operations.
    Eliminates code duplication across views and models.
    """

    @staticmethod
    def validate_station_code(code, exclude_pk=None):
        """
        Validates station code format and uniqueness.

        Args:
            code (str): Station code to validate
            exclude_pk (int, optional): PK to exclude from uniqueness check

        Returns:
            str: Validated and normalized station code

        Raises:
            ValidationError: If code format is invalid
            AlreadyExistsException: If code already exists
        """
        if not code:
            raise ValidationError(StationMessage.STATION_CODE_REQUIRED)

        if not (2 <= len(code) <= 5):
            raise ValidationError(StationMessage.STATION_CODE_INVALID)

        code = code.upper()
        from stations.models import Station

        queryset = Station.all_objects
        if exclude_pk:
            queryset = queryset.exclude(pk=exclude_pk)

        if queryset.filter(code__iexact=code).exists():
            logger.error(f"Station code already exists: {code}")
            raise AlreadyExistsException(StationMessage.STATION_ALREADY_EXISTS)

        return code

    @staticmethod
    def validate_station_name(name, exclude_pk=None):
        """
        Validates station name format and uniqueness.

        Returns:
            str: Validated station name

        Raises:
            ValidationError: If name format is invalid
            AlreadyExistsException: If name already exists
        """
        if not name:
            raise ValidationError(StationMessage.STATION_NAME_REQUIRED)

        if len(name.strip()) < 3:
            raise ValidationError(StationMessage.STATION_NAME_TOO_SHORT)

        name = name.strip()
        from stations.models import Station
        queryset = Station.all_objects
        if exclude_pk:
            queryset = queryset.exclude(pk=exclude_pk)

        if queryset.filter(name__iexact=name).exists():
            logger.error(f"Station name already exists: {name}")
            raise AlreadyExistsException(StationMessage.STATION_ALREADY_EXISTS)

        return name

    @staticmethod
    def validate_station_for_deletion(station):
        """
        Raises NotFoundException if the station is already inactive.
        """
        if not station.is_active:
            logger.warning(f"Station {station.name} ({station.code}) is already inactive.")
            raise NotFoundException(StationMessage.STATION_NOT_FOUND)


class RouteValidators:
    """
    Validation logic for building routes.
    """

    @staticmethod
    def validate_distance(distance, allow_zero=False):
        """
        Validates distance is a positive number.

        Args:
            distance: Distance value to validate
            allow_zero (bool): Accept 0 (the first stop of a route)

        Returns:
            Decimal: Validated distance

        Raises:
            InvalidInputException: If distance is invalid
        """
        try:
            distance = Decimal(str(distance))
        except (TypeError, ValueError, InvalidOperation):
            raise InvalidInputException(RouteMessage.ROUTE_INVALID_DISTANCE)

        if distance < 0 or (distance == 0 and not allow_zero):
            raise InvalidInputException(RouteMessage.ROUTE_INVALID_DISTANCE)

        return distance

    @staticmethod
    def validate_route_stops(codes, distances):
        """
        Validates the ordered stops of a new route.

        The first stop sits at distance 0 and every later stop must be a
        positive distance from its predecessor, so cumulative distances come
        out strictly increasing.

        Raises:
            InvalidInputException: On too few stops, repeated stations or bad distances
        """
        if len(codes) < 2:
            raise InvalidInputException(RouteMessage.ROUTE_NOT_ENOUGH_STATIONS)

        if len(set(codes)) != len(codes):
            logger.error(f"Duplicate station in route stops: {codes}")
            raise InvalidInputException(RouteMessage.ROUTE_DUPLICATE_STATION)

        if RouteValidators.validate_distance(distances[0], allow_zero=True) != 0:
            raise InvalidInputException(RouteMessage.ROUTE_FIRST_DISTANCE_NOT_ZERO)

        for distance in distances[1:]:
            RouteValidators.validate_distance(distance)

    @staticmethod
    def validate_stations_exist(stop_codes):
        """
        Validates that all station codes exist and returns station objects.
        Single query; the result keeps the order of stop_codes.

        Raises:
            NotFoundException: If any station is not found
        """
        from stations.models import Station

        station_map = {
            station.code.upper(): station
            for station in Station.objects.filter(code__in=stop_codes)
        }
        missing_codes = [code for code in stop_codes if code not in station_map]
        if missing_codes:
            logger.error(f"Stations not found: {missing_codes}")
            raise NotFoundException(
                StationMessage.STATIONS_NOT_FOUND.format(codes=", ".join(missing_codes))
            )

        return [station_map[code] for code in stop_codes]


class TrainValidators:
    """
    Reusable validation logic for train operations.
    """

    @staticmethod
    def validate_train_number_uniqueness(train_number, exclude_pk=None):
        """
        Validates that train number is unique among all trains.

        Raises:
            AlreadyExistsException: If train number already exists
        """
        from trains.models import Train

        queryset = Train.all_objects.filter(train_number=train_number)
        if exclude_pk:
            queryset = queryset.exclude(pk=exclude_pk)
        if queryset.exists():
            logger.error(f"Train number already exists: {train_number}")
            raise AlreadyExistsException(TrainMessage.TRAIN_ALREADY_EXISTS)
        return train_number

    @staticmethod
    def validate_compartments_exist(compartment_ids):
        """
        Validates that every compartment id exists and returns the compartments.

        Raises:
            NotFoundException: If one or more compartments are missing
        """
        from trains.models import Compartment

        unique_ids = set(compartment_ids)
        compartments = list(Compartment.objects.filter(id__in=unique_ids))
        if len(compartments) != len(unique_ids):
            logger.error(f"Compartments not found among: {sorted(unique_ids)}")
            raise NotFoundException(TrainMessage.COMPARTMENTS_NOT_FOUND)
        return compartments


class ScheduleValidators:
    """
    Validation of schedule request fields that do not need the database.
    """

    @staticmethod
    def validate_departure_time(value):
        """
        Validates an HH:MM (24-hour) departure time string.

        Returns:
            str: The unchanged time string; duplicates are matched on it literally

        Raises:
            InvalidInputException: If the format is wrong
        """
        if not isinstance(value, str) or not re.match(DEPARTURE_TIME_PATTERN, value):
            raise InvalidInputException(ScheduleMessage.INVALID_DEPARTURE_TIME)
        return value


class BookingValidators:
    """
    Reusable validation logic for booking operations.
    """

    @staticmethod
    def validate_user_authorized(user):
        """
        Validates that user is not staff or superuser for booking creation.

        Raises:
            PermissionDeniedException: If user is staff or superuser
        """
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            logger.warning(f"Admin/staff {user} attempted to create a booking.")
            raise PermissionDeniedException(UserMessage.ADMIN_CANNOT_CREATE_BOOKING)

    @staticmethod
    def validate_seat_number(seat_number, total_seats):
        """
        Parses a seat number and checks it lies in 1..total_seats.

        Returns:
            int: The seat number

        Raises:
            NotFoundException: If the value is not an integer in range
        """
        try:
            seat = int(str(seat_number).strip())
        except (TypeError, ValueError):
            seat = None

        if seat is None or seat < 1 or seat > total_seats:
            logger.warning(f"Invalid seat number {seat_number!r} (1..{total_seats}).")
            raise NotFoundException(
                BookingMessage.INVALID_SEAT_NUMBER.format(total_seats=total_seats)
            )
        return seat
