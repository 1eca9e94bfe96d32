from datetime import datetime, time, timedelta
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.utils import timezone
from accounts.models import Role
from stations.models import Station
from trains.models import Compartment, Train
from utils.route_helpers import RouteIndex, RouteBuilderHelpers
from utils.train_helpers import StationPlanEntry, TrainScheduleHelpers, parse_time_of_day

User = get_user_model()


class RailwayFixtures:
    """
    Builders for the stations, routes, trains and schedules tests need.
    """

    @staticmethod
    def create_admin(username="admin_user"):
        role, _ = Role.objects.get_or_create(name="admin")
        return User.objects.create_user(
            username=username, email=f"{username}@test.com", password="adminpass123", role=role
        )

    @staticmethod
    def create_passenger(username="passenger"):
        role, _ = Role.objects.get_or_create(name="user")
        return User.objects.create_user(
            username=username, email=f"{username}@test.com", password="userpass123", role=role
        )

    @staticmethod
    def create_stations(*codes):
        return [
            Station.objects.create(name=f"{code} Junction", code=code, city=f"{code} City")
            for code in codes
        ]

    @staticmethod
    def create_route(stations, segment_distances, name="Test Line"):
        return RouteBuilderHelpers.build_route(
            name, stations, [Decimal(str(d)) for d in segment_distances]
        )

    @staticmethod
    def create_compartment(price="500.00", total_seat=2, name="Shovan Chair"):
        return Compartment.objects.create(
            name=name, compartment_type="shovan_chair", price=Decimal(price), total_seat=total_seat
        )

    @staticmethod
    def create_train(route, compartments=(), name="Test Express"):
        train = Train.objects.create(name=name, train_type="express", route=route)
        train.compartments.set(compartments)
        return train

    @staticmethod
    def travel_date(days_ahead=1):
        return timezone.localdate() + timedelta(days=days_ahead)

    @staticmethod
    def station_plan(route, travel_date, departure_time="08:00", travel_minutes=60, halt_minutes=5):
        """
        A plan covering every route station: halt_minutes at each station and
        travel_minutes between consecutive stations.
        """
        start = timezone.make_aware(
            datetime.combine(travel_date, parse_time_of_day(departure_time))
        )
        plan = []
        for idx, route_station in enumerate(RouteIndex.stations_in_order(route.id)):
            departure = start + timedelta(minutes=idx * (travel_minutes + halt_minutes))
            plan.append(
                StationPlanEntry(
                    station_id=route_station.station_id,
                    estimated_arrival=departure - timedelta(minutes=halt_minutes),
                    estimated_departure=departure,
                )
            )
        return plan

    @staticmethod
    def create_schedule(train, travel_date=None, departure_time="08:00"):
        travel_date = travel_date or RailwayFixtures.travel_date()
        plan = RailwayFixtures.station_plan(train.route, travel_date, departure_time)
        return TrainScheduleHelpers.create_schedule(train.id, departure_time, plan)

    @staticmethod
    def aware(travel_date, hour, minute=0):
        return timezone.make_aware(datetime.combine(travel_date, time(hour, minute)))
