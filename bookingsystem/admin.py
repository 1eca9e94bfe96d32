from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'schedule', 'compartment', 'seat_number',
                    'from_station', 'to_station', 'price', 'status', 'booking_date']
    list_filter = ['status', 'booking_date']
    search_fields = ['user__username', 'schedule__train__train_number', 'schedule__train__name']
    readonly_fields = ['price', 'booking_date', 'created_at', 'updated_at']
    ordering = ['-booking_date']
