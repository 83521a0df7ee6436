"""
URL configuration for config project - Lotissements
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API JSON
    path('api/inventaire/', include('inventory.api_urls')),  # Lotissements, îlots, parcelles
    path('api/ventes/', include('sales.api_urls')),          # Acquéreurs, réservations, ventes
    path('api/finances/', include('finance.api_urls')),      # Commissions propriétaires
]
