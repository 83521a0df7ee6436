from django.contrib import admin

from .models import Ilot, Lotissement, Parcelle


class IlotInline(admin.TabularInline):
    model = Ilot
    extra = 0
    fields = ("name", "capacity", "assigned_to")


@admin.register(Lotissement)
class LotissementAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "city", "total_area", "deleted_at")
    search_fields = ("name", "location", "city")
    inlines = [IlotInline]


@admin.register(Ilot)
class IlotAdmin(admin.ModelAdmin):
    list_display = ("name", "lotissement", "capacity", "assigned_to")
    list_filter = ("lotissement",)
    search_fields = ("name", "lotissement__name")


@admin.register(Parcelle)
class ParcelleAdmin(admin.ModelAdmin):
    list_display = ("plot_number", "lotissement", "ilot", "area", "price", "status", "deleted_at")
    list_filter = ("status", "lotissement")
    search_fields = ("plot_number", "lotissement__name")
    # Le statut suit les réservations et les ventes.
    readonly_fields = ("status",)
