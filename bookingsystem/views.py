import logging
from rest_framework import viewsets, mixins, status
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import Http404
from .models import Booking
from .serializers import BookingSerializer, BookSeatSerializer
from utils.queryset_helpers import UserFilterableQuerysetMixin
from utils.validators import BookingValidators
from utils.booking_helpers import BookingHelpers
from utils.constants import BookingMessage
from exceptions.handlers import NotFoundException

logger = logging.getLogger("bookingsystem")


class IsRegularUser(IsAuthenticated):
    def has_permission(self, request, view):
        is_authenticated = super().has_permission(request, view)
        if view.action == "create":
            return is_authenticated and not (
                request.user.is_staff or request.user.is_superuser
            )
        return is_authenticated


class BookingViewSet(UserFilterableQuerysetMixin, mixins.CreateModelMixin,
                     mixins.ListModelMixin, mixins.RetrieveModelMixin,
                     viewsets.GenericViewSet):
    """
    Seat bookings. Users create and read their own bookings; admins read all.
    Bookings cannot be changed or deleted through the API.
    """

    queryset = Booking.objects.select_related(
        "user", "schedule__train", "schedule__route", "compartment",
        "from_station", "to_station",
    )
    serializer_class = BookingSerializer
    permission_classes = [IsRegularUser]
    user_field = "user"
    filter_fields = ["status"]
    default_ordering = ["-booking_date"]

    def create(self, request, *args, **kwargs):
        """
        Books one seat for a sub-journey of a schedule.
        """
        BookingValidators.validate_user_authorized(request.user)

        serializer = BookSeatSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validated_data = serializer.validated_data
        logger.info(f"Booking request from {request.user}: {dict(validated_data)}")

        booking = BookingHelpers.book_seat(
            request.user,
            validated_data["schedule_id"],
            validated_data["compartment_id"],
            validated_data["seat_number"],
            validated_data["from_station_id"],
            validated_data["to_station_id"],
        )
        booking = self.get_queryset().get(pk=booking.pk)
        return Response(self.get_serializer(booking).data, status=status.HTTP_201_CREATED)

    def get_object(self):
        """Only the owner's (or, for admins, any) booking is visible."""
        try:
            return super().get_object()
        except Http404:
            logger.warning(
                f"Booking {self.kwargs.get('pk')} not visible to {self.request.user}."
            )
            raise NotFoundException(BookingMessage.BOOKING_NOT_FOUND)
