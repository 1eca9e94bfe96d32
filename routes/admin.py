from django.contrib import admin
from .models import TrainRoute, RouteStation


class RouteStationInline(admin.TabularInline):
    model = RouteStation
    fk_name = 'route'
    extra = 0
    ordering = ['distance_from_start']
    readonly_fields = ['previous_station', 'next_station']


@admin.register(TrainRoute)
class TrainRouteAdmin(admin.ModelAdmin):
    list_display = ('name', 'start_station', 'end_station', 'total_distance', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'start_station__name', 'end_station__name')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [RouteStationInline]
