from django.contrib import admin

from .models import ManagementType, Owner, Payment, Property, Tenant


@admin.register(ManagementType)
class ManagementTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "percentage", "is_default")
    list_filter = ("type", "is_default")


@admin.register(Owner)
class OwnerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "management_type", "status")
    list_filter = ("status", "management_type")
    search_fields = ("name", "phone", "email")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "price", "property_type", "status")
    search_fields = ("title", "address", "owner__name")


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "property")
    search_fields = ("name", "phone", "property__title")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("tenant", "amount", "due_date", "paid_date", "status", "method")
    list_filter = ("status",)
    search_fields = ("tenant__name",)
    date_hierarchy = "due_date"
