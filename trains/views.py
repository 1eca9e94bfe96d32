import logging
from rest_framework import viewsets, mixins, status, permissions
from rest_framework.response import Response
from rest_framework.decorators import action
from rest_framework.pagination import LimitOffsetPagination
from django.http import Http404
from .models import Compartment, Train, TrainSchedule
from .serializers import (
    CompartmentSerializer,
    TrainSerializer,
    TrainCreateUpdateSerializer,
    TrainScheduleCreateSerializer,
    TrainScheduleSerializer,
    TrainScheduleStatusSerializer,
    TrainSearchQuerySerializer,
    TrainSearchResultSerializer,
    SeatStatusQuerySerializer,
    SeatStatusSerializer,
)
from utils.constants import TrainMessage, ScheduleMessage
from utils.permission_helpers import AdminOnlyPermissionMixin
from utils.queryset_helpers import FilterableQuerysetMixin
from utils.train_helpers import TrainScheduleHelpers, TrainSearchHelpers
from utils.booking_helpers import BookingHelpers
from exceptions.handlers import NotFoundException

logger = logging.getLogger("trains")


class ScheduleLimitOffsetPagination(LimitOffsetPagination):
    default_limit = 20
    max_limit = 100


class CompartmentViewSet(AdminOnlyPermissionMixin, FilterableQuerysetMixin, viewsets.ModelViewSet):
    """
    CRUD for compartments (seating classes) that trains are built from.
    """

    queryset = Compartment.objects.all()
    serializer_class = CompartmentSerializer
    filter_fields = ["compartment_type"]

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            logger.warning(f"Compartment {self.kwargs.get('pk')} not found.")
            raise NotFoundException(TrainMessage.COMPARTMENT_NOT_FOUND)


class TrainViewSet(AdminOnlyPermissionMixin, FilterableQuerysetMixin, viewsets.ModelViewSet):
    """
    ViewSet for managing trains.
    Supports CRUD operations with soft delete.
    """

    queryset = Train.objects.select_related(
        "route__start_station", "route__end_station"
    ).prefetch_related("compartments")
    lookup_field = "train_number"
    filter_fields = ["train_type"]  # Fields to filter by query parameters

    def get_serializer_class(self):
        """
        Serializer for creation and updation of trains.
        """
        if self.action in ["create", "update", "partial_update"]:
            return TrainCreateUpdateSerializer
        return TrainSerializer

    def get_object(self):
        """
        Return the object if present else raises 404.
        """
        try:
            return super().get_object()
        except Http404:
            logger.warning(f"Train {self.kwargs.get('train_number')} not found.")
            raise NotFoundException(TrainMessage.TRAIN_NOT_FOUND)

    def create(self, request, *args, **kwargs):
        """
        Creates a new train; the train number is generated on save.
        """
        logger.info(f"Attempting to create train with data: {request.data}")
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated_data = dict(serializer.validated_data)
        compartments = validated_data.pop("compartment_ids", None)

        train = Train.objects.create(**validated_data)
        if compartments is not None:
            train.compartments.set(compartments)

        train = self.get_queryset().get(pk=train.pk)
        logger.info(f"Train created successfully: {train.train_number}")
        return Response(TrainSerializer(train).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """
        Updates name, type, route and compartments of an existing train.
        """
        instance = self.get_object()
        logger.info(
            f"Attempting to update train {instance.train_number} with data: {request.data}"
        )
        serializer = self.get_serializer(
            instance, data=request.data, partial=kwargs.get("partial", False)
        )
        serializer.is_valid(raise_exception=True)
        validated_data = dict(serializer.validated_data)
        compartments = validated_data.pop("compartment_ids", None)

        instance.name = validated_data.get("name", instance.name)
        instance.train_type = validated_data.get("train_type", instance.train_type)
        if "route" in validated_data:
            instance.route = validated_data["route"]
        instance.save()
        if compartments is not None:
            instance.compartments.set(compartments)

        instance = self.get_queryset().get(pk=instance.pk)
        logger.info(f"Train updated successfully: {instance.train_number}")
        return Response(TrainSerializer(instance).data)

    def destroy(self, request, *args, **kwargs):
        """
        Deletes a train by marking it inactive.
        """
        instance = self.get_object()
        instance.is_active = False
        instance.save()
        logger.info(
            f"Train soft-deleted (is_active set to False): {instance.train_number}"
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class TrainSearchViewSet(viewsets.GenericViewSet):
    """
    Passenger-facing lookups: trains between two stations on a date and
    the seat map of a compartment.
    """

    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        """
        Returns schedules running from from_station to to_station on date.
        """
        query = TrainSearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        results = TrainSearchHelpers.search_trains(
            params["from_station"], params["to_station"], params["date"]
        )
        return Response(TrainSearchResultSerializer(results, many=True).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"seat-status/(?P<schedule_id>\d+)/(?P<compartment_id>\d+)",
    )
    def seat_status(self, request, schedule_id=None, compartment_id=None):
        """
        Returns booked/available status for every seat of the compartment.
        """
        query = SeatStatusQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        seat_status = BookingHelpers.get_seat_status(
            int(schedule_id), int(compartment_id), query.validated_data["date"]
        )
        return Response(SeatStatusSerializer(seat_status).data)


class TrainScheduleViewSet(AdminOnlyPermissionMixin, FilterableQuerysetMixin,
                           mixins.CreateModelMixin, mixins.ListModelMixin,
                           mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Creates and lists train schedules.
    A schedule is created together with its station timings in one request.
    """

    queryset = TrainSchedule.objects.select_related(
        "train", "route__start_station", "route__end_station"
    ).prefetch_related("station_schedules__station")
    serializer_class = TrainScheduleSerializer
    pagination_class = ScheduleLimitOffsetPagination
    filter_fields = ["departure_time", "status"]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = super().get_queryset()
        train_id = self.request.query_params.get("train_id")
        if train_id:
            qs = qs.filter(train_id=train_id)
        return qs

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            logger.warning(f"Train schedule {self.kwargs.get('pk')} not found.")
            raise NotFoundException(ScheduleMessage.SCHEDULE_NOT_FOUND)

    def create(self, request, *args, **kwargs):
        """
        Create a schedule for a train's route from a per-station timing plan.
        """
        logger.info(f"Attempting to create train schedule with data: {request.data}")
        serializer = TrainScheduleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated_data = serializer.validated_data

        schedule = TrainScheduleHelpers.create_schedule(
            validated_data["train_id"],
            validated_data["departure_time"],
            validated_data["station_plan"],
        )
        schedule = TrainSchedule.objects.select_related(
            "train", "route__start_station", "route__end_station"
        ).prefetch_related("station_schedules__station").get(pk=schedule.pk)
        return Response(TrainScheduleSerializer(schedule).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"],
            url_path="by-train/(?P<train_number>[^/]+)")
    def schedule_by_train(self, request, train_number=None):
        """
        Returns all schedules for a given train number.
        Raises exception if the train is not found.
        """
        train = Train.objects.filter(train_number=train_number).first()
        if not train:
            logger.error(f"train not found with number {train_number}")
            raise NotFoundException(TrainMessage.TRAIN_NOT_FOUND)
        schedules = self.get_queryset().filter(train=train)
        serializer = self.get_serializer(schedules, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        """
        Operational status change, e.g. cancelling a run.
        """
        schedule = self.get_object()
        serializer = TrainScheduleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        TrainScheduleHelpers.update_status(schedule, serializer.validated_data["status"])
        return Response(self.get_serializer(schedule).data)
