import json
from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.utils.dateparse import parse_date

from .errors import DomainError, ValidationError


def json_error(message, status=400, code="bad_request", **extra):
    return JsonResponse({"error": message, "code": code, **extra}, status=status)


def _extract_api_token(request):
    auth = request.headers.get("Authorization", "").strip()
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return request.headers.get("X-API-Key", "").strip()


def check_api_token(request):
    expected = (getattr(settings, "LOTISSEMENTS_API_TOKEN", "") or "").strip()
    if not expected:
        return None
    token = _extract_api_token(request)
    if token != expected:
        return json_error("Token invalide", status=401, code="invalid_token")
    return None


def read_json(request):
    """Request body as a dict. Raises ValueError on malformed JSON."""
    data = json.loads(request.body or b"{}")
    if not isinstance(data, dict):
        raise ValueError("JSON object expected")
    return data


def api_endpoint(view):
    """
    Token check, JSON body parsing and DomainError translation for API views.

    The wrapped view receives the decoded body as ``data``.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        token_error = check_api_token(request)
        if token_error:
            return token_error
        try:
            data = read_json(request) if request.method in ("POST", "PATCH", "PUT") else {}
        except ValueError:
            return json_error("JSON invalide", code="invalid_json")
        try:
            return view(request, data, *args, **kwargs)
        except DomainError as exc:
            return JsonResponse(exc.as_dict(), status=exc.status_code)

    return wrapper


def request_user(request):
    user = getattr(request, "user", None)
    return user if user is not None and user.is_authenticated else None


def date_param(request, name):
    """Optional ``AAAA-MM-JJ`` query parameter."""
    raw = (request.GET.get(name) or "").strip()
    if not raw:
        return None
    value = parse_date(raw)
    if value is None:
        raise ValidationError(f"Date invalide pour {name} : {raw}.", code="invalid_date")
    return value
