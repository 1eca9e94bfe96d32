from decimal import Decimal
from django.test import TestCase
from rest_framework.test import APITestCase
from rest_framework import status
from .models import TrainRoute, RouteStation
from exceptions.handlers import InvalidInputException, NotFoundException
from utils.route_helpers import RouteIndex
from utils.validators import RouteValidators
from utils.testing import RailwayFixtures


class RouteIndexTest(TestCase):
    """Ordered station projection of a route."""

    def setUp(self):
        self.stations = RailwayFixtures.create_stations("AAA", "BBB", "CCC", "DDD")
        self.route = RailwayFixtures.create_route(self.stations, [0, 60, 40, 25])

    def test_stations_in_order_starts_at_zero_and_increases(self):
        ordered = RouteIndex.stations_in_order(self.route.id)
        distances = [rs.distance_from_start for rs in ordered]
        self.assertEqual(distances[0], Decimal("0"))
        for earlier, later in zip(distances, distances[1:]):
            self.assertLess(earlier, later)

    def test_last_station_is_total_distance(self):
        ordered = RouteIndex.stations_in_order(self.route.id)
        self.assertEqual(ordered[-1].distance_from_start, self.route.total_distance)
        self.assertEqual(self.route.total_distance, Decimal("125"))

    def test_stations_in_route_order(self):
        ordered = RouteIndex.stations_in_order(self.route.id)
        self.assertEqual(
            [rs.station.code for rs in ordered], ["AAA", "BBB", "CCC", "DDD"]
        )

    def test_route_start_end_and_neighbours(self):
        self.assertEqual(self.route.start_station, self.stations[0])
        self.assertEqual(self.route.end_station, self.stations[-1])
        middle = RouteStation.objects.get(route=self.route, station=self.stations[1])
        self.assertEqual(middle.previous_station, self.stations[0])
        self.assertEqual(middle.next_station, self.stations[2])

    def test_position_of(self):
        self.assertEqual(
            RouteIndex.position_of(self.route.id, self.stations[2].id), Decimal("100")
        )

    def test_position_of_station_not_on_route(self):
        outsider = RailwayFixtures.create_stations("ZZZ")[0]
        with self.assertRaises(NotFoundException):
            RouteIndex.position_of(self.route.id, outsider.id)

    def test_unknown_route(self):
        with self.assertRaises(NotFoundException):
            RouteIndex.stations_in_order(999999)


class RouteValidatorsTest(TestCase):

    def test_needs_two_stations(self):
        with self.assertRaises(InvalidInputException):
            RouteValidators.validate_route_stops(["AAA"], [0])

    def test_duplicate_station_rejected(self):
        with self.assertRaises(InvalidInputException):
            RouteValidators.validate_route_stops(["AAA", "BBB", "AAA"], [0, 10, 10])

    def test_first_distance_must_be_zero(self):
        with self.assertRaises(InvalidInputException):
            RouteValidators.validate_route_stops(["AAA", "BBB"], [5, 10])

    def test_later_distances_must_be_positive(self):
        with self.assertRaises(InvalidInputException):
            RouteValidators.validate_route_stops(["AAA", "BBB"], [0, 0])
        with self.assertRaises(InvalidInputException):
            RouteValidators.validate_route_stops(["AAA", "BBB"], [0, -3])

    def test_unknown_station_codes_listed(self):
        RailwayFixtures.create_stations("AAA")
        with self.assertRaises(NotFoundException) as ctx:
            RouteValidators.validate_stations_exist(["AAA", "QQQ"])
        self.assertIn("QQQ", str(ctx.exception.detail))


class TrainRouteAPITest(APITestCase):

    def setUp(self):
        self.admin = RailwayFixtures.create_admin()
        self.passenger = RailwayFixtures.create_passenger()
        RailwayFixtures.create_stations("AAA", "BBB", "CCC")
        self.url = "/api/admin/routes/"
        self.payload = {
            "name": "North Line",
            "stops": [
                {"station_code": "aaa", "distance": "0"},
                {"station_code": "BBB", "distance": "60"},
                {"station_code": "CCC", "distance": "40"},
            ],
        }

    def test_admin_creates_route(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data["total_distance"]), Decimal("100"))
        self.assertEqual(response.data["start_station"]["code"], "AAA")
        self.assertEqual(response.data["end_station"]["code"], "CCC")
        self.assertEqual(
            [Decimal(s["distance_from_start"]) for s in response.data["stations"]],
            [Decimal("0"), Decimal("60"), Decimal("100")],
        )

    def test_invalid_route_writes_nothing(self):
        self.client.force_authenticate(user=self.admin)
        self.payload["stops"][1]["station_code"] = "QQQ"
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(TrainRoute.objects.count(), 0)

    def test_passenger_cannot_create_route(self):
        self.client.force_authenticate(user=self.passenger)
        response = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_route_stations_endpoint(self):
        self.client.force_authenticate(user=self.admin)
        route_id = self.client.post(self.url, self.payload, format="json").data["id"]

        self.client.force_authenticate(user=self.passenger)
        response = self.client.get(f"{self.url}{route_id}/stations/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s["station"]["code"] for s in response.data], ["AAA", "BBB", "CCC"])

    def test_route_stations_unknown_route(self):
        self.client.force_authenticate(user=self.passenger)
        response = self.client.get(f"{self.url}424242/stations/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
