from django.contrib import admin
from .models import Compartment, Train, TrainSchedule, StationSchedule


class StationScheduleInline(admin.TabularInline):
    model = StationSchedule
    extra = 0
    readonly_fields = ('duration_from_previous', 'waiting_time')


@admin.register(Train)
class TrainAdmin(admin.ModelAdmin):
    list_display = ('train_number', 'name', 'train_type', 'route', 'is_active', 'created_at')
    search_fields = ('train_number', 'name')
    list_filter = ('train_type', 'is_active', 'created_at')
    filter_horizontal = ('compartments',)
    readonly_fields = ('train_number', 'created_at', 'updated_at')

    def get_queryset(self, request):
        return Train.all_objects.select_related('route')


@admin.register(Compartment)
class CompartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'compartment_type', 'price', 'total_seat')
    list_filter = ('compartment_type',)
    search_fields = ('name',)


@admin.register(TrainSchedule)
class TrainScheduleAdmin(admin.ModelAdmin):
    list_display = ('train', 'departure_date', 'departure_time', 'status')
    list_filter = ('status', 'departure_date')
    search_fields = ('train__name', 'train__train_number')
    inlines = [StationScheduleInline]
