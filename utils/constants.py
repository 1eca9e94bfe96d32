# ---------- CHOICES ----------

class Choices:
    TRAIN_TYPE_CHOICES = [
        ("intercity", "Intercity"),
        ("express", "Express"),
        ("mail", "Mail"),
        ("local", "Local"),
        ]

    COMPARTMENT_TYPE_CHOICES = [
        ("shovan", "Shovan"),
        ("shovan_chair", "Shovan Chair"),
        ("snigdha", "Snigdha"),
        ("ac_seat", "AC Seat"),
        ("ac_berth", "AC Berth"),
        ]

    SCHEDULE_STATUS_CHOICES = [
        ("scheduled", "Scheduled"),
        ("running", "Running"),
        ("completed", "Completed"),
        ("delayed", "Delayed"),
        ("cancelled", "Cancelled"),
    ]

    STATION_SCHEDULE_STATUS_CHOICES = [
        ("pending", "Pending"),
        ("arrived", "Arrived"),
        ("departed", "Departed"),
        ("skipped", "Skipped"),
        ("delayed", "Delayed"),
    ]

    BOOKING_STATUS_CHOICES = [
        ("CONFIRMED", "Confirmed"),
        ("CANCELLED", "Cancelled"),
    ]


class ScheduleStatus:
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class BookingStatus:
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    LIVE = [CONFIRMED]


class SeatStatus:
    BOOKED = "booked"
    AVAILABLE = "available"


# HH:MM, 24-hour, leading zero on the hour optional
DEPARTURE_TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


# ---------- USER MESSAGES ----------
class UserMessage:
    INVALID_CREDENTIALS = "Invalid username or password."
    ADMIN_CANNOT_CREATE_BOOKING = "Admin users cannot create bookings."


class GeneralMessage:
    INVALID_INPUT = "Invalid input provided."
    PERMISSION_DENIED = "You do not have permission to perform this action."
    SOMETHING_WENT_WRONG = "Something went wrong. Please try again later."


# ---------STATION CONSTANTS-----------
class StationMessage:
    STATION_NOT_FOUND = "Station not found."
    STATIONS_NOT_FOUND = "Stations not found: {codes}."
    STATION_CODE_REQUIRED = "Station code is required."
    STATION_CODE_INVALID = "Station code must be 2 to 5 characters."
    STATION_ALREADY_EXISTS = "Station with this name or code already exists."
    STATION_NAME_REQUIRED = "Station name is required."
    STATION_NAME_TOO_SHORT = "Station name must be at least 3 characters."
    STATION_IN_USE = "Station is part of a train route and cannot be removed."


# ----------- ROUTE CONSTANTS -------------
class RouteMessage:
    ROUTE_NOT_FOUND = "Train route not found."
    ROUTE_NOT_ENOUGH_STATIONS = "A route needs at least two stations."
    ROUTE_DUPLICATE_STATION = "A station can appear only once on a route."
    ROUTE_INVALID_DISTANCE = "Distance must be a positive number."
    ROUTE_FIRST_DISTANCE_NOT_ZERO = "The first station of a route must have distance 0."
    STATION_NOT_ON_ROUTE = "Station not found on this route."
    NO_VALID_ROUTES = "No valid train routes found between these stations."
    FROM_AND_TO_REQUIRED = "Both from_station and to_station are required."
    DATE_REQUIRED = "A valid date (YYYY-MM-DD) is required."


# ------------TRAIN CONSTANTS-------------
class TrainMessage:
    TRAIN_NOT_FOUND = "Train not found."
    TRAIN_ALREADY_EXISTS = "Train with this number already exists."
    TRAIN_ROUTE_REQUIRED = "Train must be assigned to a route before creating a schedule."
    COMPARTMENTS_NOT_FOUND = "One or more compartments not found."
    COMPARTMENT_NOT_FOUND = "Compartment not found."
    COMPARTMENT_NOT_ON_TRAIN = "Compartment not available on this train."


# ------------SCHEDULE CONSTANTS-------------
class ScheduleMessage:
    SCHEDULE_NOT_FOUND = "Train schedule not found."
    SCHEDULE_NOT_FOUND_FOR_DATE = "No schedule found for the specified date."
    SCHEDULE_ALREADY_EXISTS = "Schedule already exists for this train at the specified time."
    STATIONS_NOT_IN_ROUTE = "Stations not found in train route: {station_ids}"
    SEQUENCE_MISMATCH = "Station sequence must match the train route order."
    INVALID_DEPARTURE_TIME = "Invalid time format. Use HH:MM (24-hour format)."
    STATION_PLAN_REQUIRED = "At least one station schedule is required."


# ------------BOOKING CONSTANTS-------------
class BookingMessage:
    SCHEDULE_CANCELLED = "This train schedule has been cancelled."
    SCHEDULE_DEPARTED = "Cannot book tickets for past or current schedules."
    INVALID_SEAT_NUMBER = "Invalid seat number. Valid seats are 1 to {total_seats}."
    STATIONS_NOT_ON_ROUTE = "Stations not found on this route."
    STATION_ORDER_INVALID = "From station must be before to station on the route."
    SEAT_ALREADY_BOOKED = "Seat already booked."
    BOOKING_NOT_FOUND = "Booking not found."
