from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from core.api import api_endpoint, date_param, request_user

from . import buyers, reservations, services


def _buyer_to_item(buyer):
    return {
        "id": buyer.pk,
        "name": buyer.name,
        "phone": buyer.phone,
        "email": buyer.email,
        "cni_number": buyer.cni_number,
    }


def _reservation_to_item(reservation):
    return {
        "id": reservation.pk,
        "parcelle_id": reservation.parcelle_id,
        "acquereur_id": reservation.acquereur_id,
        "deposit_amount": reservation.deposit_amount,
        "payment_method": reservation.payment_method,
        "reservation_date": reservation.reservation_date.isoformat(),
        "validity_days": reservation.validity_days,
        "expiry_date": reservation.expiry_date.isoformat(),
        "status": reservation.status,
        "converted_vente_id": str(reservation.converted_vente_id) if reservation.converted_vente_id else None,
        "is_expired": reservations.is_expired(reservation),
    }


def _vente_to_item(vente):
    return {
        "id": str(vente.pk),
        "parcelle_id": vente.parcelle_id,
        "acquereur_id": vente.acquereur_id,
        "sale_date": vente.sale_date.isoformat(),
        "total_price": vente.total_price,
        "payment_type": vente.payment_type,
        "payment_method": vente.payment_method,
        "down_payment": vente.down_payment,
        "monthly_payment": vente.monthly_payment,
        "total_installments": vente.total_installments,
        "paid_installments": vente.paid_installments,
        "status": vente.status,
        "sold_by": vente.sold_by_id,
        "echeances": [
            {"id": e.pk, "due_date": e.due_date.isoformat(), "amount": e.amount, "status": e.status}
            for e in vente.echeances.all()
        ],
    }


def _buyer_ref(data):
    # Acquéreur existant (acquereur_id) ou saisie en ligne (acquereur: {...}).
    if data.get("acquereur_id") not in (None, ""):
        return data["acquereur_id"]
    return data.get("acquereur")


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_register_buyer(request, data):
    buyer = buyers.register_buyer(data)
    return JsonResponse(_buyer_to_item(buyer), status=201)


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_create_reservation(request, data, parcelle_id):
    reservation = reservations.create_reservation(
        parcelle_id,
        _buyer_ref(data),
        deposit_amount=data.get("deposit_amount"),
        payment_method=data.get("payment_method", ""),
        validity_days=data.get("validity_days"),
        notes=data.get("notes", ""),
        created_by=request_user(request),
    )
    return JsonResponse(_reservation_to_item(reservation), status=201)


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_cancel_reservation(request, data, reservation_id):
    reservation = reservations.cancel_reservation(reservation_id, user=request_user(request))
    return JsonResponse(_reservation_to_item(reservation))


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_create_sale(request, data, parcelle_id):
    vente = services.create_sale(
        parcelle_id,
        _buyer_ref(data),
        total_price=data.get("total_price"),
        payment_type=data.get("payment_type"),
        payment_method=data.get("payment_method", ""),
        down_payment=data.get("down_payment"),
        total_installments=data.get("total_installments"),
        sold_by=data.get("sold_by") or request_user(request),
        reservation_id=data.get("reservation_id"),
        sale_date=data.get("sale_date"),
        notes=data.get("notes", ""),
    )
    return JsonResponse(_vente_to_item(vente), status=201)


@csrf_exempt
@require_http_methods(["POST"])
@api_endpoint
def api_pay_echeance(request, data, echeance_id):
    echeance = services.pay_echeance(
        echeance_id,
        paid_amount=data.get("paid_amount"),
        paid_date=data.get("paid_date"),
        payment_method=data.get("payment_method", ""),
        receipt_number=data.get("receipt_number", ""),
        user=request_user(request),
    )
    return JsonResponse(
        {
            "id": echeance.pk,
            "vente_id": str(echeance.vente_id),
            "status": echeance.status,
            "paid_date": echeance.paid_date.isoformat(),
            "paid_amount": echeance.paid_amount,
        }
    )


def _echeance_to_item(echeance):
    vente = echeance.vente
    return {
        "id": echeance.pk,
        "vente_id": str(echeance.vente_id),
        "due_date": echeance.due_date.isoformat(),
        "amount": echeance.amount,
        "status": echeance.status,
        "acquereur": {"name": vente.acquereur.name, "phone": vente.acquereur.phone},
        "parcelle": {
            "plot_number": vente.parcelle.plot_number,
            "lotissement": vente.parcelle.lotissement.name,
        },
    }


@csrf_exempt
@require_http_methods(["GET"])
@api_endpoint
def api_overdue_echeances(request, data):
    echeances = services.overdue_echeances(date_param(request, "date"), request.GET.get("lotissement"))
    return JsonResponse({"items": [_echeance_to_item(e) for e in echeances]})


@csrf_exempt
@require_http_methods(["GET"])
@api_endpoint
def api_upcoming_echeances(request, data):
    echeances = services.upcoming_echeances(
        request.GET.get("mois", 1),
        date_param(request, "date"),
        request.GET.get("lotissement"),
    )
    return JsonResponse({"items": [_echeance_to_item(e) for e in echeances]})
