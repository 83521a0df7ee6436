from django.urls import path

from . import api_views


app_name = "finance_api"

urlpatterns = [
    path(
        "commissions",
        api_views.api_commission_report,
        name="commissions",
    ),
    path(
        "paiements/<int:payment_id>/commission",
        api_views.api_payment_commission,
        name="paiement_commission",
    ),
]
