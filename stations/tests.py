from django.test import TestCase
from django.core.exceptions import ValidationError
from rest_framework.test import APITestCase
from rest_framework import status
from .models import Station
from exceptions.handlers import AlreadyExistsException
from utils.testing import RailwayFixtures


class StationModelTest(TestCase):
    """Test cases for Station model validation and behavior"""

    def test_station_creation_valid_data(self):
        """Test creating station with valid data"""
        station = Station.objects.create(
            name="Central Station",
            code="CST",
            city="Dhaka",
            district="Dhaka"
        )
        self.assertEqual(station.name, "Central Station")
        self.assertEqual(station.code, "CST")
        self.assertTrue(station.is_active)

    def test_station_code_uppercase_conversion(self):
        """Test that station code is automatically converted to uppercase"""
        station = Station.objects.create(name="Test Station", code="tst", city="Test City")
        self.assertEqual(station.code, "TST")

    def test_station_soft_delete(self):
        """Test soft delete functionality"""
        station = Station.objects.create(name="To Delete", code="DEL", city="Test City")
        station.is_active = False
        station.save()

        # Should not appear in default queryset
        self.assertNotIn(station, Station.objects.all())
        # Should appear in all_objects
        self.assertIn(station, Station.all_objects.all())

    def test_station_string_representation(self):
        """Test string representation of station"""
        station = Station.objects.create(name="Test Station", code="TST", city="Test City")
        self.assertEqual(str(station), "Test Station (TST)")

        station.is_active = False
        station.save()
        self.assertEqual(str(station), "Test Station (TST) (Inactive)")

    def test_station_validation_code_too_short(self):
        with self.assertRaises(ValidationError):
            Station.objects.create(name="Test Station", code="A", city="Test City")

    def test_station_validation_code_too_long(self):
        with self.assertRaises(ValidationError):
            Station.objects.create(name="Test Station", code="ABCDEF", city="Test City")

    def test_station_validation_name_too_short(self):
        with self.assertRaises(ValidationError):
            Station.objects.create(name="AB", code="ABC", city="Test City")

    def test_duplicate_code_rejected(self):
        Station.objects.create(name="First Station", code="DUP", city="Test City")
        with self.assertRaises(AlreadyExistsException):
            Station.objects.create(name="Second Station", code="dup", city="Test City")


class StationAPITest(APITestCase):
    """Reads are public, writes need an admin."""

    def setUp(self):
        self.admin = RailwayFixtures.create_admin()
        self.passenger = RailwayFixtures.create_passenger()
        self.station = Station.objects.create(
            name="Kamalapur", code="KMP", city="Dhaka", district="Dhaka"
        )
        self.list_url = "/api/stations/"

    def test_list_stations_public(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s["code"] for s in response.data], ["KMP"])

    def test_filter_stations_by_city(self):
        Station.objects.create(name="Chattogram", code="CTG", city="Chattogram")
        response = self.client.get(self.list_url, {"city": "dhaka"})
        self.assertEqual([s["code"] for s in response.data], ["KMP"])

    def test_retrieve_station_by_code(self):
        response = self.client.get(f"{self.list_url}kmp/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], "Kamalapur")

    def test_retrieve_unknown_station(self):
        response = self.client.get(f"{self.list_url}XYZ/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_admin_creates_station(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            self.list_url, {"name": "Airport", "code": "apt", "city": "Dhaka"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["code"], "APT")

    def test_admin_duplicate_station_conflict(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            self.list_url, {"name": "Other Name", "code": "KMP", "city": "Dhaka"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_passenger_cannot_create_station(self):
        self.client.force_authenticate(user=self.passenger)
        response = self.client.post(
            self.list_url, {"name": "Airport", "code": "APT", "city": "Dhaka"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_cannot_create_station(self):
        response = self.client.post(
            self.list_url, {"name": "Airport", "code": "APT", "city": "Dhaka"}, format="json"
        )
        self.assertIn(
            response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        )

    def test_admin_soft_deletes_unused_station(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"{self.list_url}KMP/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.station.refresh_from_db()
        self.assertFalse(self.station.is_active)

    def test_station_on_route_cannot_be_removed(self):
        other = Station.objects.create(name="Tongi Junction", code="TNG", city="Gazipur")
        RailwayFixtures.create_route([self.station, other], [0, 22])
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"{self.list_url}KMP/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.station.refresh_from_db()
        self.assertTrue(self.station.is_active)
