from django.urls import path

from . import api_views


app_name = "inventory_api"

urlpatterns = [
    path(
        "lotissements/<int:lotissement_id>/ilots",
        api_views.api_ilots,
        name="ilots",
    ),
    path(
        "lotissements/<int:lotissement_id>/ilots/corbeille",
        api_views.api_deleted_ilots,
        name="ilots_corbeille",
    ),
    path(
        "ilots/<int:ilot_id>",
        api_views.api_ilot_detail,
        name="ilot_detail",
    ),
    path(
        "ilots/<int:ilot_id>/restaurer",
        api_views.api_restore_ilot,
        name="ilot_restaurer",
    ),
    path(
        "lotissements/<int:lotissement_id>/parcelles",
        api_views.api_create_parcelle,
        name="parcelle_creer",
    ),
    path(
        "lotissements/<int:lotissement_id>/parcelles/lot",
        api_views.api_create_parcelles_bulk,
        name="parcelles_creer_lot",
    ),
    path(
        "parcelles/<int:parcelle_id>",
        api_views.api_parcelle_detail,
        name="parcelle_detail",
    ),
    path(
        "parcelles/<int:parcelle_id>/restaurer",
        api_views.api_restore_parcelle,
        name="parcelle_restaurer",
    ),
]
