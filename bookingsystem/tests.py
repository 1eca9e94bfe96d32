from datetime import timedelta
from decimal import Decimal
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APITestCase
from rest_framework import status
from .models import Booking
from exceptions.handlers import ConflictException, NotFoundException
from utils.booking_helpers import BookingHelpers
from utils.constants import BookingStatus
from utils.testing import RailwayFixtures


class FareCalculationTest(TestCase):

    def test_full_route_is_base_price(self):
        self.assertEqual(
            BookingHelpers.calculate_fare(Decimal("500"), Decimal("0"), Decimal("100"), Decimal("100")),
            Decimal("500.00"),
        )

    def test_half_route_is_half_price(self):
        self.assertEqual(
            BookingHelpers.calculate_fare(Decimal("500"), Decimal("50"), Decimal("100"), Decimal("100")),
            Decimal("250.00"),
        )

    def test_rounds_to_cents(self):
        self.assertEqual(
            BookingHelpers.calculate_fare(Decimal("100"), Decimal("0"), Decimal("1"), Decimal("3")),
            Decimal("33.33"),
        )

    def test_rounds_half_up(self):
        self.assertEqual(
            BookingHelpers.calculate_fare(Decimal("0.05"), Decimal("0"), Decimal("1"), Decimal("2")),
            Decimal("0.03"),
        )


class BookSeatTest(TestCase):
    """Seat allocation rules, checked in order before any write."""

    def setUp(self):
        self.aaa, self.bbb, self.ccc = RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.outsider = RailwayFixtures.create_stations("ZZZ")[0]
        self.route = RailwayFixtures.create_route([self.aaa, self.bbb, self.ccc], [0, 60, 40])
        self.compartment = RailwayFixtures.create_compartment(price="500.00", total_seat=2)
        self.other_compartment = RailwayFixtures.create_compartment(name="AC Berth")
        self.train = RailwayFixtures.create_train(self.route, [self.compartment])
        self.schedule = RailwayFixtures.create_schedule(self.train)
        self.passenger = RailwayFixtures.create_passenger()
        self.other_passenger = RailwayFixtures.create_passenger("second_passenger")

    def book(self, seat_number=1, from_station=None, to_station=None, user=None, **kwargs):
        return BookingHelpers.book_seat(
            user or self.passenger,
            self.schedule.id,
            kwargs.pop("compartment_id", self.compartment.id),
            seat_number,
            (from_station or self.aaa).id,
            (to_station or self.ccc).id,
            **kwargs,
        )

    def test_end_to_end_scenario(self):
        first = self.book(1, self.aaa, self.ccc)
        self.assertEqual(first.price, Decimal("500.00"))
        self.assertEqual(first.status, BookingStatus.CONFIRMED)

        with self.assertRaises(ConflictException):
            self.book(1, self.aaa, self.ccc, user=self.other_passenger)

        second = self.book(2, self.bbb, self.ccc)
        self.assertEqual(second.price, Decimal("200.00"))

        with self.assertRaises(ConflictException):
            self.book(2, self.ccc, self.aaa)

        self.assertEqual(Booking.objects.count(), 2)

    def test_only_one_of_many_claims_wins(self):
        outcomes = []
        for idx in range(5):
            user = RailwayFixtures.create_passenger(f"racer_{idx}")
            try:
                self.book(1, user=user)
                outcomes.append("booked")
            except ConflictException:
                outcomes.append("conflict")
        self.assertEqual(outcomes.count("booked"), 1)
        self.assertEqual(outcomes.count("conflict"), 4)
        self.assertEqual(Booking.objects.filter(seat_number="1").count(), 1)

    def test_database_rejects_second_live_booking(self):
        booking = self.book(1)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Booking.objects.create(
                    user=self.other_passenger,
                    schedule=self.schedule,
                    compartment=self.compartment,
                    seat_number=booking.seat_number,
                    from_station=self.aaa,
                    to_station=self.bbb,
                    price=Decimal("300.00"),
                )

    def test_cancelled_booking_frees_seat(self):
        booking = self.book(1)
        booking.status = BookingStatus.CANCELLED
        booking.save()
        again = self.book(1, user=self.other_passenger)
        self.assertEqual(again.seat_number, "1")

    def test_seat_number_normalised(self):
        booking = self.book(" 02 ")
        self.assertEqual(booking.seat_number, "2")
        with self.assertRaises(ConflictException):
            self.book("2")

    def test_mis_ordered_stations_rejected(self):
        pairs = [
            (self.aaa, self.aaa), (self.bbb, self.aaa), (self.ccc, self.aaa),
            (self.bbb, self.bbb), (self.ccc, self.bbb), (self.ccc, self.ccc),
        ]
        for from_station, to_station in pairs:
            with self.assertRaises(ConflictException):
                self.book(1, from_station, to_station)
        self.assertEqual(Booking.objects.count(), 0)

    def test_station_not_on_route(self):
        with self.assertRaises(NotFoundException):
            self.book(1, self.outsider, self.ccc)
        with self.assertRaises(NotFoundException):
            self.book(1, self.aaa, self.outsider)

    def test_seat_out_of_range(self):
        for seat in (0, 3, -1, "abc", "", "1.5"):
            with self.assertRaises(NotFoundException):
                self.book(seat)

    def test_compartment_not_on_train(self):
        with self.assertRaises(NotFoundException):
            self.book(1, compartment_id=self.other_compartment.id)

    def test_unknown_schedule(self):
        with self.assertRaises(NotFoundException):
            BookingHelpers.book_seat(
                self.passenger, 999999, self.compartment.id, 1, self.aaa.id, self.ccc.id
            )

    def test_cancelled_schedule(self):
        self.schedule.status = "cancelled"
        self.schedule.save()
        with self.assertRaises(ConflictException):
            self.book(1)

    def test_departed_schedule(self):
        departure = BookingHelpers.departure_instant(self.schedule)
        with self.assertRaises(ConflictException):
            self.book(1, now=departure)
        with self.assertRaises(ConflictException):
            self.book(1, now=departure + timedelta(minutes=1))
        booking = self.book(1, now=departure - timedelta(minutes=1))
        self.assertEqual(booking.seat_number, "1")

    def test_cancelled_checked_before_seat(self):
        self.schedule.status = "cancelled"
        self.schedule.save()
        with self.assertRaises(ConflictException):
            self.book(99)


class BookingAPITest(APITestCase):

    def setUp(self):
        self.admin = RailwayFixtures.create_admin()
        self.passenger = RailwayFixtures.create_passenger()
        self.other_passenger = RailwayFixtures.create_passenger("second_passenger")
        self.aaa, self.bbb, self.ccc = RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.route = RailwayFixtures.create_route([self.aaa, self.bbb, self.ccc], [0, 60, 40])
        self.compartment = RailwayFixtures.create_compartment(price="500.00", total_seat=2)
        self.train = RailwayFixtures.create_train(self.route, [self.compartment])
        self.schedule = RailwayFixtures.create_schedule(self.train)
        self.url = "/api/bookings/"

    def payload(self, seat_number="1", from_station=None, to_station=None):
        return {
            "schedule_id": self.schedule.id,
            "compartment_id": self.compartment.id,
            "seat_number": seat_number,
            "from_station_id": (from_station or self.aaa).id,
            "to_station_id": (to_station or self.ccc).id,
        }

    def test_book_seat(self):
        self.client.force_authenticate(user=self.passenger)
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data["price"]), Decimal("500.00"))
        self.assertEqual(response.data["train"]["id"], self.train.id)
        self.assertEqual(response.data["route_name"], self.route.name)
        self.assertEqual(response.data["from_station"]["code"], "AAA")
        self.assertEqual(response.data["to_station"]["code"], "CCC")
        self.assertEqual(response.data["compartment"]["id"], self.compartment.id)
        self.assertEqual(response.data["status"], BookingStatus.CONFIRMED)

    def test_seat_taken(self):
        self.client.force_authenticate(user=self.passenger)
        self.client.post(self.url, self.payload(), format="json")
        self.client.force_authenticate(user=self.other_passenger)
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "Seat already booked.")

    def test_booking_shows_in_seat_status(self):
        self.client.force_authenticate(user=self.passenger)
        booking_id = self.client.post(self.url, self.payload("2"), format="json").data["id"]
        response = self.client.get(
            f"/api/trains/seat-status/{self.schedule.id}/{self.compartment.id}/",
            {"date": self.schedule.departure_date.isoformat()},
        )
        self.assertEqual(response.data["booked_seats"], 1)
        self.assertEqual(response.data["seats"][1]["booking_id"], booking_id)

    def test_admin_cannot_book(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_cannot_book(self):
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_users_see_only_their_bookings(self):
        self.client.force_authenticate(user=self.passenger)
        own_id = self.client.post(self.url, self.payload("1"), format="json").data["id"]
        self.client.force_authenticate(user=self.other_passenger)
        other_id = self.client.post(self.url, self.payload("2"), format="json").data["id"]

        response = self.client.get(self.url)
        self.assertEqual([b["id"] for b in response.data], [other_id])

        response = self.client.get(f"{self.url}{own_id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.url)
        self.assertEqual(sorted(b["id"] for b in response.data), sorted([own_id, other_id]))

    def test_bookings_cannot_be_deleted(self):
        self.client.force_authenticate(user=self.passenger)
        booking_id = self.client.post(self.url, self.payload(), format="json").data["id"]
        response = self.client.delete(f"{self.url}{booking_id}/")
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
