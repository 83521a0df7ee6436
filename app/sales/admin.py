from django.contrib import admin

from .models import Acquereur, ActivityLog, Echeance, Reservation, Vente


@admin.register(Acquereur)
class AcquereurAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "cni_number", "created_at")
    search_fields = ("name", "phone", "cni_number", "email")


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ("parcelle", "acquereur", "deposit_amount", "reservation_date", "expiry_date", "status")
    list_filter = ("status",)
    search_fields = ("parcelle__plot_number", "acquereur__name")
    readonly_fields = ("status", "converted_vente")


class EcheanceInline(admin.TabularInline):
    model = Echeance
    extra = 0
    ordering = ("due_date",)


@admin.register(Vente)
class VenteAdmin(admin.ModelAdmin):
    list_display = ("id", "parcelle", "acquereur", "total_price", "payment_type", "paid_installments", "status", "sale_date")
    list_filter = ("payment_type", "status")
    search_fields = ("id", "parcelle__plot_number", "acquereur__name")
    ordering = ("-sale_date",)
    inlines = [EcheanceInline]


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity_type", "entity_id", "message", "created_by")
    list_filter = ("action", "entity_type")
    search_fields = ("entity_id", "message")
