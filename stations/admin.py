from django.contrib import admin
from .models import Station


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "city", "district", "is_active"]
    list_filter = ["is_active", "district"]
    search_fields = ["code", "name", "city"]

    def get_queryset(self, request):
        return Station.all_objects.all()
