from django.urls import path

from . import api_views


app_name = "sales_api"

urlpatterns = [
    path("acquereurs", api_views.api_register_buyer, name="acquereur_creer"),
    path(
        "parcelles/<int:parcelle_id>/reservations",
        api_views.api_create_reservation,
        name="reservation_creer",
    ),
    path(
        "reservations/<int:reservation_id>/annuler",
        api_views.api_cancel_reservation,
        name="reservation_annuler",
    ),
    path(
        "parcelles/<int:parcelle_id>/ventes",
        api_views.api_create_sale,
        name="vente_creer",
    ),
    path(
        "echeances/<int:echeance_id>/payer",
        api_views.api_pay_echeance,
        name="echeance_payer",
    ),
    path("echeances/en-retard", api_views.api_overdue_echeances, name="echeances_en_retard"),
    path("echeances/a-venir", api_views.api_upcoming_echeances, name="echeances_a_venir"),
]
