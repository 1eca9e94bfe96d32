import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from django.db import transaction, IntegrityError
from django.utils import timezone
from exceptions.handlers import NotFoundException, ConflictException
from utils.constants import (
    BookingMessage, BookingStatus, ScheduleMessage, SeatStatus, TrainMessage)
from utils.route_helpers import RouteIndex
from utils.train_helpers import parse_time_of_day
from utils.validators import BookingValidators

logger = logging.getLogger("booking")

CENTS = Decimal("0.01")


class BookingHelpers:
    """
    Reusable helper methods for booking operations.
    Seat availability is always derived from booking rows, never from a counter.
    """

    @staticmethod
    def calculate_fare(base_price, from_distance, to_distance, total_distance):
        """
        Fare for a sub-journey, proportional to its share of the route distance.

        Args:
            base_price (Decimal): Compartment fare for the whole route
            from_distance (Decimal): Origin distance from route start
            to_distance (Decimal): Destination distance from route start
            total_distance (Decimal): Route length

        Returns:
            Decimal: Fare rounded half-up to 2 decimal places
        """
        fare = Decimal(base_price) * (Decimal(to_distance) - Decimal(from_distance)) / Decimal(total_distance)
        return fare.quantize(CENTS, rounding=ROUND_HALF_UP)

    @staticmethod
    def departure_instant(schedule):
        """Aware datetime when the schedule leaves its first station."""
        naive = datetime.combine(schedule.departure_date, parse_time_of_day(schedule.departure_time))
        return timezone.make_aware(naive)

    @staticmethod
    def get_seat_status(schedule_id, compartment_id, travel_date):
        """
        Per-seat occupancy of a compartment on a schedule's operating day.

        Args:
            schedule_id (int): TrainSchedule id
            compartment_id (int): Compartment id
            travel_date (date): Must equal the schedule's departure date

        Returns:
            dict: schedule_id, compartment_id, date, total_seats, booked_seats,
                available_seats and a seats list of
                {seat_number, status, booking_id} for seats 1..total_seats

        Raises:
            NotFoundException: If the schedule is missing or runs on another
                date, or the compartment is not on the train
        """
        from trains.models import TrainSchedule
        from bookingsystem.models import Booking

        schedule = TrainSchedule.objects.select_related("train").filter(pk=schedule_id).first()
        if schedule is None or schedule.departure_date != travel_date:
            logger.warning(f"No schedule {schedule_id} running on {travel_date}.")
            raise NotFoundException(ScheduleMessage.SCHEDULE_NOT_FOUND_FOR_DATE)

        compartment = schedule.train.compartments.filter(pk=compartment_id).first()
        if compartment is None:
            logger.warning(f"Compartment {compartment_id} is not on train {schedule.train.train_number}.")
            raise NotFoundException(TrainMessage.COMPARTMENT_NOT_ON_TRAIN)

        booked = dict(
            Booking.objects.filter(
                schedule_id=schedule.id,
                compartment_id=compartment.id,
                status__in=BookingStatus.LIVE,
            ).values_list("seat_number", "id")
        )

        seats = []
        for number in range(1, compartment.total_seat + 1):
            booking_id = booked.get(str(number))
            seats.append({
                "seat_number": str(number),
                "status": SeatStatus.BOOKED if booking_id else SeatStatus.AVAILABLE,
                "booking_id": booking_id,
            })

        booked_count = sum(1 for seat in seats if seat["status"] == SeatStatus.BOOKED)
        return {
            "schedule_id": schedule.id,
            "compartment_id": compartment.id,
            "date": travel_date,
            "total_seats": compartment.total_seat,
            "booked_seats": booked_count,
            "available_seats": compartment.total_seat - booked_count,
            "seats": seats,
        }

    @staticmethod
    def book_seat(user, schedule_id, compartment_id, seat_number, from_station_id,
                  to_station_id, now=None):
        """
        Claim one seat for a sub-journey and price it.

        Every check runs before the insert; the first failure aborts without
        writing. The seat claim itself is a single insert guarded by the live
        seat unique constraint, so two concurrent claims can never both win.

        Args:
            user: Booking owner
            schedule_id (int): TrainSchedule id
            compartment_id (int): Compartment id
            seat_number: Seat number, int or numeric string
            from_station_id (int): Origin station id
            to_station_id (int): Destination station id
            now (datetime, optional): Current instant, defaults to timezone.now()

        Returns:
            Booking: The confirmed booking

        Raises:
            NotFoundException: Missing schedule, compartment not on the train,
                seat out of range, or stations not on the route
            ConflictException: Cancelled or departed schedule, origin not before
                destination, or the seat is already taken
        """
        from trains.models import TrainSchedule
        from bookingsystem.models import Booking

        schedule = (
            TrainSchedule.objects.select_related("train", "route")
            .prefetch_related("train__compartments")
            .filter(pk=schedule_id)
            .first()
        )
        if schedule is None:
            logger.warning(f"Booking requested for unknown schedule {schedule_id}.")
            raise NotFoundException(ScheduleMessage.SCHEDULE_NOT_FOUND)
        route_stations = RouteIndex.stations_in_order(schedule.route_id)

        if schedule.is_cancelled:
            logger.warning(f"Booking refused: schedule {schedule.id} is cancelled.")
            raise ConflictException(BookingMessage.SCHEDULE_CANCELLED)

        now = now or timezone.now()
        if BookingHelpers.departure_instant(schedule) <= now:
            logger.warning(f"Booking refused: schedule {schedule.id} has already departed.")
            raise ConflictException(BookingMessage.SCHEDULE_DEPARTED)

        compartment = next(
            (c for c in schedule.train.compartments.all() if c.id == int(compartment_id)),
            None,
        )
        if compartment is None:
            logger.warning(f"Compartment {compartment_id} is not on train {schedule.train.train_number}.")
            raise NotFoundException(TrainMessage.COMPARTMENT_NOT_ON_TRAIN)

        seat = BookingValidators.validate_seat_number(seat_number, compartment.total_seat)

        stops = RouteIndex.index_by_station(route_stations)
        origin = stops.get(from_station_id)
        destination = stops.get(to_station_id)
        if origin is None or destination is None:
            logger.warning(
                f"Stations {from_station_id}/{to_station_id} not both on route {schedule.route_id}."
            )
            raise NotFoundException(BookingMessage.STATIONS_NOT_ON_ROUTE)

        if origin.distance_from_start >= destination.distance_from_start:
            logger.warning(
                f"Booking refused: station {from_station_id} is not before {to_station_id}."
            )
            raise ConflictException(BookingMessage.STATION_ORDER_INVALID)

        price = BookingHelpers.calculate_fare(
            compartment.price,
            origin.distance_from_start,
            destination.distance_from_start,
            schedule.route.total_distance,
        )

        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    user=user,
                    schedule=schedule,
                    compartment=compartment,
                    seat_number=str(seat),
                    from_station_id=from_station_id,
                    to_station_id=to_station_id,
                    price=price,
                    status=BookingStatus.CONFIRMED,
                )
        except IntegrityError:
            logger.warning(
                f"Seat {seat} in compartment {compartment.id} of schedule {schedule.id} "
                f"already booked."
            )
            raise ConflictException(BookingMessage.SEAT_ALREADY_BOOKED)

        logger.info(
            f"Booking {booking.id} confirmed for {user.username}: schedule {schedule.id}, "
            f"compartment {compartment.id}, seat {seat}, price {price}."
        )
        return booking
