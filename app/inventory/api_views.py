from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from core.api import api_endpoint

from . import services


def _ilot_to_item(ilot):
    item = {
        "id": ilot.pk,
        "lotissement_id": ilot.lotissement_id,
        "name": ilot.name,
        "description": ilot.description,
        "capacity": ilot.capacity,
        "assigned_to": ilot.assigned_to_id,
        "deleted": ilot.deleted_at is not None,
    }
    if hasattr(ilot, "parcelles_count"):
        item.update(
            parcelles_count=ilot.parcelles_count,
            parcelles_vendues=ilot.parcelles_vendues,
            parcelles_disponibles=ilot.parcelles_disponibles,
        )
    return item


def _parcelle_to_item(parcelle):
    return {
        "id": parcelle.pk,
        "lotissement_id": parcelle.lotissement_id,
        "ilot_id": parcelle.ilot_id,
        "plot_number": parcelle.plot_number,
        "area": str(parcelle.area),
        "price": parcelle.price,
        "status": parcelle.status,
        "assigned_to": parcelle.assigned_to_id,
        "notes": parcelle.notes,
        "deleted": parcelle.deleted_at is not None,
    }


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_endpoint
def api_ilots(request, data, lotissement_id):
    if request.method == "GET":
        ilots = services.ilots_with_stats(lotissement_id)
        return JsonResponse({"items": [_ilot_to_item(i) for i in ilots]})
    ilot = services.create_ilot(
        lotissement_id,
        name=data.get("name"),
        capacity=data.get("capacity"),
        description=data.get("description", ""),
        assigned_to=data.get("assigned_to"),
    )
    return JsonResponse(_ilot_to_item(ilot), status=201)


@csrf_exempt
@require_http_methods(["PATCH", "DELETE"])
@api_endpoint
def api_ilot_detail(request, data, ilot_id):
    if request.method == "DELETE":
        ilot = services.delete_ilot(ilot_id)
        return JsonResponse(_ilot_to_item(ilot))
    ilot = services.update_ilot(ilot_id, **data)
    return JsonResponse(_ilot_to_item(ilot))


@csrf_exempt
@require_http_methods(["GET"])
@api_endpoint
def api_deleted_ilots(request, data, lotissement_id):
    ilots = services.deleted_ilots(lotissement_id)
    return JsonResponse({"items": [_ilot_to_item(i) for i in ilots]})


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_restore_ilot(request, data, ilot_id):
    ilot = services.restore_ilot(ilot_id)
    return JsonResponse(_ilot_to_item(ilot))


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_create_parcelle(request, data, lotissement_id):
    parcelle = services.create_parcelle(
        lotissement_id,
        plot_number=data.get("plot_number"),
        area=data.get("area"),
        price=data.get("price"),
        ilot=data.get("ilot_id"),
        assigned_to=data.get("assigned_to"),
        notes=data.get("notes", ""),
    )
    return JsonResponse(_parcelle_to_item(parcelle), status=201)


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_create_parcelles_bulk(request, data, lotissement_id):
    parcelles = services.create_parcelles_bulk(
        lotissement_id,
        count=data.get("count"),
        start_number=data.get("start_number", 1),
        prefix=data.get("prefix", ""),
        area=data.get("area"),
        price=data.get("price"),
        ilot=data.get("ilot_id"),
    )
    return JsonResponse({"items": [_parcelle_to_item(p) for p in parcelles]}, status=201)


@csrf_exempt
@require_http_methods(["PATCH", "DELETE"])
@api_endpoint
def api_parcelle_detail(request, data, parcelle_id):
    if request.method == "DELETE":
        parcelle = services.delete_parcelle(parcelle_id)
        return JsonResponse(_parcelle_to_item(parcelle))
    changes = dict(data)
    if "ilot_id" in changes:
        changes["ilot"] = changes.pop("ilot_id")
    parcelle = services.update_parcelle(parcelle_id, **changes)
    return JsonResponse(_parcelle_to_item(parcelle))


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_restore_parcelle(request, data, parcelle_id):
    parcelle = services.restore_parcelle(parcelle_id)
    return JsonResponse(_parcelle_to_item(parcelle))
