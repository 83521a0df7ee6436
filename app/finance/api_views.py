from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from core.api import api_endpoint, date_param
from core.errors import ValidationError

from . import services


@csrf_exempt
@require_http_methods(["GET"])
@api_endpoint
def api_commission_report(request, data):
    start_date = date_param(request, "debut")
    end_date = date_param(request, "fin")
    if start_date and end_date and start_date > end_date:
        raise ValidationError("La date de début est postérieure à la date de fin.", code="invalid_period")
    report = services.load_commission_report(start_date, end_date)
    return JsonResponse(report.as_dict())


@csrf_exempt
@require_http_methods(["GET"])
@api_endpoint
def api_payment_commission(request, data, payment_id):
    result = services.load_payment_commission(payment_id)
    if result is None:
        return JsonResponse({"commission": None})
    result["commission_percentage"] = str(result["commission_percentage"])
    return JsonResponse({"commission": result})
