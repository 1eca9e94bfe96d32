from datetime import timedelta
from itertools import permutations
from unittest import mock
from django.test import TestCase
from rest_framework.test import APITestCase
from rest_framework import status
from .models import Train, TrainSchedule, StationSchedule
from bookingsystem.models import Booking
from exceptions.handlers import ConflictException, InvalidInputException, NotFoundException
from utils.booking_helpers import BookingHelpers
from utils.constants import SeatStatus, BookingStatus
from utils.train_helpers import (
    StationPlanEntry, TrainScheduleHelpers, TrainSearchHelpers, minutes_between)
from utils.testing import RailwayFixtures


class TrainModelTest(TestCase):

    def test_train_number_generated(self):
        train = Train.objects.create(name="Padma Express", train_type="express")
        self.assertEqual(len(train.train_number), 5)
        self.assertTrue(train.train_number.isdigit())

    def test_soft_deleted_train_hidden(self):
        train = Train.objects.create(name="Padma Express", train_type="express")
        train.is_active = False
        train.save()
        self.assertNotIn(train, Train.objects.all())
        self.assertIn(train, Train.all_objects.all())


class ScheduleBuilderTest(TestCase):
    """Schedule creation against a train's route."""

    def setUp(self):
        self.stations = RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.route = RailwayFixtures.create_route(self.stations, [0, 60, 40])
        self.compartment = RailwayFixtures.create_compartment()
        self.train = RailwayFixtures.create_train(self.route, [self.compartment])
        self.travel_date = RailwayFixtures.travel_date()
        self.plan = RailwayFixtures.station_plan(self.route, self.travel_date)

    def assertNothingWritten(self):
        self.assertEqual(TrainSchedule.objects.count(), 0)
        self.assertEqual(StationSchedule.objects.count(), 0)

    def test_create_schedule(self):
        schedule = TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        self.assertEqual(schedule.route, self.route)
        self.assertEqual(schedule.departure_date, self.travel_date)
        self.assertEqual(schedule.status, "scheduled")

        rows = list(schedule.station_schedules.order_by("sequence_order"))
        self.assertEqual([row.sequence_order for row in rows], [1, 2, 3])
        self.assertEqual([row.station_id for row in rows], [s.id for s in self.stations])
        self.assertEqual(
            [row.route_station.station_id for row in rows], [s.id for s in self.stations]
        )

    def test_waiting_and_duration(self):
        schedule = TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        rows = list(schedule.station_schedules.order_by("sequence_order"))
        self.assertEqual(rows[0].duration_from_previous, 0)
        for row, entry in zip(rows, self.plan):
            self.assertEqual(
                row.waiting_time,
                minutes_between(entry.estimated_arrival, entry.estimated_departure),
            )
            self.assertEqual(row.waiting_time, 5)
        self.assertEqual([row.duration_from_previous for row in rows], [0, 60, 60])

    def test_unknown_train(self):
        with self.assertRaises(NotFoundException):
            TrainScheduleHelpers.create_schedule(999999, "08:00", self.plan)

    def test_train_without_route(self):
        train = Train.objects.create(name="Unrouted", train_type="local")
        with self.assertRaises(ConflictException):
            TrainScheduleHelpers.create_schedule(train.id, "08:00", self.plan)
        self.assertNothingWritten()

    def test_duplicate_departure_time_rejected(self):
        TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        with self.assertRaises(ConflictException):
            TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        self.assertEqual(TrainSchedule.objects.count(), 1)

    def test_different_time_same_train_accepted(self):
        TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        later_plan = RailwayFixtures.station_plan(self.route, self.travel_date, "14:30")
        TrainScheduleHelpers.create_schedule(self.train.id, "14:30", later_plan)
        self.assertEqual(TrainSchedule.objects.filter(train=self.train).count(), 2)

    def test_every_reordering_rejected(self):
        for order in permutations(self.plan):
            if list(order) == self.plan:
                continue
            with self.assertRaises(ConflictException):
                TrainScheduleHelpers.create_schedule(self.train.id, "08:00", list(order))
        self.assertNothingWritten()

    def test_missing_station_rejected(self):
        partial_plan = [self.plan[0], self.plan[2]]
        with self.assertRaises(ConflictException):
            TrainScheduleHelpers.create_schedule(self.train.id, "08:00", partial_plan)
        self.assertNothingWritten()

    def test_repeated_station_rejected(self):
        with self.assertRaises(ConflictException):
            TrainScheduleHelpers.create_schedule(
                self.train.id, "08:00", self.plan + [self.plan[2]]
            )
        self.assertNothingWritten()

    def test_station_off_route_listed(self):
        outsider = RailwayFixtures.create_stations("ZZZ")[0]
        extra = StationPlanEntry(
            station_id=outsider.id,
            estimated_arrival=self.plan[-1].estimated_departure + timedelta(hours=1),
            estimated_departure=self.plan[-1].estimated_departure + timedelta(hours=1),
        )
        with self.assertRaises(ConflictException) as ctx:
            TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan + [extra])
        self.assertIn(str(outsider.id), str(ctx.exception.detail))
        self.assertNothingWritten()

    def test_negative_duration_accepted(self):
        entry = self.plan[1]
        self.plan[1] = StationPlanEntry(
            station_id=entry.station_id,
            estimated_arrival=self.plan[0].estimated_departure - timedelta(minutes=10),
            estimated_departure=entry.estimated_departure,
        )
        with self.assertLogs("trains", level="WARNING"):
            schedule = TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        second = schedule.station_schedules.get(sequence_order=2)
        self.assertEqual(second.duration_from_previous, -10)

    def test_failed_station_insert_leaves_no_schedule(self):
        with mock.patch.object(
            StationSchedule.objects, "bulk_create", side_effect=RuntimeError("disk full")
        ):
            with self.assertRaises(RuntimeError):
                TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        self.assertNothingWritten()

    def test_status_update(self):
        schedule = TrainScheduleHelpers.create_schedule(self.train.id, "08:00", self.plan)
        TrainScheduleHelpers.update_status(schedule, "cancelled")
        schedule.refresh_from_db()
        self.assertTrue(schedule.is_cancelled)


class TrainSearchTest(TestCase):

    def setUp(self):
        self.aaa, self.bbb, self.ccc, self.ddd = RailwayFixtures.create_stations(
            "AAA", "BBB", "CCC", "DDD"
        )
        self.compartment = RailwayFixtures.create_compartment()
        forward = RailwayFixtures.create_route([self.aaa, self.bbb, self.ccc], [0, 60, 40], "Forward")
        backward = RailwayFixtures.create_route([self.ccc, self.bbb, self.aaa], [0, 40, 60], "Backward")
        self.forward_train = RailwayFixtures.create_train(forward, [self.compartment], "Forward Mail")
        self.backward_train = RailwayFixtures.create_train(backward, [self.compartment], "Backward Mail")
        self.travel_date = RailwayFixtures.travel_date()

    def test_only_forward_routes_match(self):
        RailwayFixtures.create_schedule(self.forward_train, self.travel_date, "08:00")
        RailwayFixtures.create_schedule(self.backward_train, self.travel_date, "09:00")
        results = TrainSearchHelpers.search_trains(self.aaa.id, self.ccc.id, self.travel_date)
        self.assertEqual([r["train"] for r in results], [self.forward_train])
        self.assertEqual(results[0]["compartments"], [self.compartment])

    def test_reverse_direction_uses_other_route(self):
        RailwayFixtures.create_schedule(self.forward_train, self.travel_date, "08:00")
        RailwayFixtures.create_schedule(self.backward_train, self.travel_date, "09:00")
        results = TrainSearchHelpers.search_trains(self.ccc.id, self.bbb.id, self.travel_date)
        self.assertEqual([r["train"] for r in results], [self.backward_train])

    def test_results_ordered_by_departure_time(self):
        RailwayFixtures.create_schedule(self.forward_train, self.travel_date, "17:45")
        RailwayFixtures.create_schedule(self.forward_train, self.travel_date, "9:15")
        RailwayFixtures.create_schedule(self.forward_train, self.travel_date, "06:00")
        results = TrainSearchHelpers.search_trains(self.aaa.id, self.bbb.id, self.travel_date)
        self.assertEqual([r["departure_time"] for r in results], ["06:00", "9:15", "17:45"])

    def test_other_dates_excluded(self):
        RailwayFixtures.create_schedule(self.forward_train, self.travel_date, "08:00")
        results = TrainSearchHelpers.search_trains(
            self.aaa.id, self.ccc.id, self.travel_date + timedelta(days=1)
        )
        self.assertEqual(results, [])

    def test_no_route_between_stations(self):
        with self.assertRaises(InvalidInputException):
            TrainSearchHelpers.search_trains(self.aaa.id, self.ddd.id, self.travel_date)

    def test_same_station_is_not_a_journey(self):
        with self.assertRaises(InvalidInputException):
            TrainSearchHelpers.search_trains(self.aaa.id, self.aaa.id, self.travel_date)


class SeatLedgerTest(TestCase):

    def setUp(self):
        self.stations = RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.route = RailwayFixtures.create_route(self.stations, [0, 60, 40])
        self.compartment = RailwayFixtures.create_compartment(total_seat=4)
        self.other_compartment = RailwayFixtures.create_compartment(name="AC Berth")
        self.train = RailwayFixtures.create_train(self.route, [self.compartment])
        self.passenger = RailwayFixtures.create_passenger()
        self.schedule = RailwayFixtures.create_schedule(self.train)

    def book(self, seat_number, status=BookingStatus.CONFIRMED):
        return Booking.objects.create(
            user=self.passenger,
            schedule=self.schedule,
            compartment=self.compartment,
            seat_number=seat_number,
            from_station=self.stations[0],
            to_station=self.stations[2],
            price="500.00",
            status=status,
        )

    def test_empty_compartment(self):
        ledger = BookingHelpers.get_seat_status(
            self.schedule.id, self.compartment.id, self.schedule.departure_date
        )
        self.assertEqual(ledger["total_seats"], 4)
        self.assertEqual(ledger["booked_seats"], 0)
        self.assertEqual(ledger["available_seats"], 4)
        self.assertTrue(all(seat["status"] == SeatStatus.AVAILABLE for seat in ledger["seats"]))

    def test_booked_seats_reported(self):
        booking = self.book("3")
        self.book("1", status=BookingStatus.CANCELLED)
        ledger = BookingHelpers.get_seat_status(
            self.schedule.id, self.compartment.id, self.schedule.departure_date
        )
        self.assertEqual(ledger["booked_seats"], 1)
        self.assertEqual(ledger["booked_seats"] + ledger["available_seats"], ledger["total_seats"])
        self.assertEqual(
            [seat["seat_number"] for seat in ledger["seats"]], ["1", "2", "3", "4"]
        )
        seat_three = ledger["seats"][2]
        self.assertEqual(seat_three["status"], SeatStatus.BOOKED)
        self.assertEqual(seat_three["booking_id"], booking.id)
        self.assertIsNone(ledger["seats"][0]["booking_id"])

    def test_wrong_date(self):
        with self.assertRaises(NotFoundException):
            BookingHelpers.get_seat_status(
                self.schedule.id,
                self.compartment.id,
                self.schedule.departure_date + timedelta(days=1),
            )

    def test_unknown_schedule(self):
        with self.assertRaises(NotFoundException):
            BookingHelpers.get_seat_status(999999, self.compartment.id, self.schedule.departure_date)

    def test_compartment_not_on_train(self):
        with self.assertRaises(NotFoundException):
            BookingHelpers.get_seat_status(
                self.schedule.id, self.other_compartment.id, self.schedule.departure_date
            )


class TrainAPITest(APITestCase):
    """Admin train and compartment management."""

    def setUp(self):
        self.admin = RailwayFixtures.create_admin()
        self.passenger = RailwayFixtures.create_passenger()
        self.stations = RailwayFixtures.create_stations("AAA", "BBB")
        self.route = RailwayFixtures.create_route(self.stations, [0, 50])
        self.compartment = RailwayFixtures.create_compartment()
        self.client.force_authenticate(user=self.admin)

    def test_create_compartment(self):
        response = self.client.post(
            "/api/admin/compartments/",
            {"name": "Snigdha", "compartment_type": "snigdha", "price": "750.00", "total_seat": 40},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["total_seat"], 40)

    def test_create_train_with_route_and_compartments(self):
        response = self.client.post(
            "/api/admin/trains/",
            {
                "name": "Subarna Express",
                "train_type": "intercity",
                "route": self.route.id,
                "compartment_ids": [self.compartment.id],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["route"]["id"], self.route.id)
        self.assertEqual([c["id"] for c in response.data["compartments"]], [self.compartment.id])
        self.assertEqual(len(response.data["train_number"]), 5)

    def test_create_train_unknown_compartment(self):
        response = self.client.post(
            "/api/admin/trains/",
            {"name": "Ghost Express", "train_type": "mail", "compartment_ids": [999999]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Train.objects.count(), 0)

    def test_soft_delete_train(self):
        train = RailwayFixtures.create_train(self.route, [self.compartment])
        response = self.client.delete(f"/api/admin/trains/{train.train_number}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(f"/api/admin/trains/{train.train_number}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_passenger_cannot_manage_trains(self):
        self.client.force_authenticate(user=self.passenger)
        response = self.client.get("/api/admin/trains/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TrainScheduleAPITest(APITestCase):

    def setUp(self):
        self.admin = RailwayFixtures.create_admin()
        self.passenger = RailwayFixtures.create_passenger()
        self.stations = RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.route = RailwayFixtures.create_route(self.stations, [0, 60, 40])
        self.compartment = RailwayFixtures.create_compartment()
        self.train = RailwayFixtures.create_train(self.route, [self.compartment])
        self.travel_date = RailwayFixtures.travel_date()
        self.url = "/api/admin/train-schedules/"

    def payload(self, departure_time="08:00", station_ids=None):
        plan = RailwayFixtures.station_plan(self.route, self.travel_date, departure_time)
        by_station = {entry.station_id: entry for entry in plan}
        station_ids = station_ids or [s.id for s in self.stations]
        return {
            "train_id": self.train.id,
            "departure_time": departure_time,
            "station_schedules": [
                {
                    "station_id": station_id,
                    "estimated_arrival": by_station[station_id].estimated_arrival.isoformat(),
                    "estimated_departure": by_station[station_id].estimated_departure.isoformat(),
                    "platform_number": "2",
                }
                for station_id in station_ids
            ],
        }

    def test_create_schedule(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["train"]["id"], self.train.id)
        self.assertEqual(response.data["route"]["start_station"]["code"], "AAA")
        self.assertEqual(response.data["route"]["end_station"]["code"], "CCC")
        self.assertEqual(response.data["departure_date"], self.travel_date.isoformat())
        entries = response.data["station_schedules"]
        self.assertEqual([e["sequence_order"] for e in entries], [1, 2, 3])
        self.assertEqual([e["station"]["code"] for e in entries], ["AAA", "BBB", "CCC"])
        self.assertEqual(entries[0]["duration_from_previous"], 0)
        self.assertEqual(entries[1]["waiting_time"], 5)
        self.assertEqual(entries[1]["platform_number"], "2")

    def test_invalid_departure_time(self):
        self.client.force_authenticate(user=self.admin)
        data = self.payload()
        data["departure_time"] = "25:00"
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(TrainSchedule.objects.count(), 0)

    def test_empty_station_plan(self):
        self.client.force_authenticate(user=self.admin)
        data = self.payload()
        data["station_schedules"] = []
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sequence_mismatch_conflict(self):
        self.client.force_authenticate(user=self.admin)
        reordered = [self.stations[1].id, self.stations[0].id, self.stations[2].id]
        response = self.client.post(self.url, self.payload(station_ids=reordered), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])

    def test_duplicate_time_conflict(self):
        self.client.force_authenticate(user=self.admin)
        self.client.post(self.url, self.payload(), format="json")
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_list_filters_and_pagination(self):
        for departure_time in ("06:00", "08:00", "10:00"):
            RailwayFixtures.create_schedule(self.train, self.travel_date, departure_time)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(self.url, {"limit": 2})
        self.assertEqual(response.data["count"], 3)
        self.assertEqual(len(response.data["results"]), 2)

        response = self.client.get(self.url, {"departure_time": "08:00", "train_id": self.train.id})
        self.assertEqual([s["departure_time"] for s in response.data["results"]], ["08:00"])

    def test_by_train(self):
        RailwayFixtures.create_schedule(self.train, self.travel_date, "06:00")
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f"{self.url}by-train/{self.train.train_number}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(f"{self.url}by-train/00000/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancel_schedule(self):
        schedule = RailwayFixtures.create_schedule(self.train, self.travel_date)
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(
            f"{self.url}{schedule.id}/status/", {"status": "cancelled"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "cancelled")

    def test_passenger_cannot_create_schedule(self):
        self.client.force_authenticate(user=self.passenger)
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TrainSearchAPITest(APITestCase):

    def setUp(self):
        self.passenger = RailwayFixtures.create_passenger()
        self.stations = RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.route = RailwayFixtures.create_route(self.stations, [0, 60, 40])
        self.compartment = RailwayFixtures.create_compartment()
        self.train = RailwayFixtures.create_train(self.route, [self.compartment])
        self.schedule = RailwayFixtures.create_schedule(self.train)
        self.client.force_authenticate(user=self.passenger)

    def test_search(self):
        response = self.client.get(
            "/api/trains/search/",
            {
                "from_station": self.stations[0].id,
                "to_station": self.stations[2].id,
                "date": self.schedule.departure_date.isoformat(),
            },
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]["schedule_id"], self.schedule.id)
        self.assertEqual(response.data[0]["train"]["train_number"], self.train.train_number)
        self.assertEqual(response.data[0]["compartments"][0]["id"], self.compartment.id)

    def test_search_wrong_direction(self):
        response = self.client.get(
            "/api/trains/search/",
            {
                "from_station": self.stations[2].id,
                "to_station": self.stations[0].id,
                "date": self.schedule.departure_date.isoformat(),
            },
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    def test_search_missing_params(self):
        response = self.client.get("/api/trains/search/", {"from_station": self.stations[0].id})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get("/api/trains/search/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_seat_status(self):
        response = self.client.get(
            f"/api/trains/seat-status/{self.schedule.id}/{self.compartment.id}/",
            {"date": self.schedule.departure_date.isoformat()},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_seats"], 2)
        self.assertEqual(response.data["available_seats"], 2)
        self.assertEqual(len(response.data["seats"]), 2)

    def test_seat_status_wrong_date(self):
        response = self.client.get(
            f"/api/trains/seat-status/{self.schedule.id}/{self.compartment.id}/",
            {"date": (self.schedule.departure_date + timedelta(days=3)).isoformat()},
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
