"""
Registre des acquéreurs.

Une création « en ligne » (depuis une réservation ou une vente) est refusée
si un acquéreur existant partage le nom, le téléphone ou le numéro CNI.
Sélectionner un acquéreur existant ne déclenche jamais ce contrôle.
"""
import logging

from django.db import transaction
from django.utils.dateparse import parse_date

from core.errors import DuplicateBuyerError, MissingBuyerError, NotFoundError, ValidationError
from core.normalization import normalize_document_number, normalize_person_name, normalize_phone
from core.parsing import as_pk

from .models import Acquereur

logger = logging.getLogger(__name__)

BUYER_FIELDS = ("name", "phone", "email", "cni_number", "address", "birth_date", "birth_place", "profession")


def find_duplicate_buyer(name, phone="", cni_number=""):
    """
    Returns ``(buyer, field)`` for the first match, checked in the order
    name, phone, cni_number, or ``(None, None)``.
    """
    name = normalize_person_name(name)
    if name:
        buyer = Acquereur.objects.filter(name__iexact=name).order_by("pk").first()
        if buyer:
            return buyer, "name"
    phone = normalize_phone(phone)
    if phone:
        buyer = Acquereur.objects.filter(phone=phone).order_by("pk").first()
        if buyer:
            return buyer, "phone"
    cni_number = normalize_document_number(cni_number)
    if cni_number:
        buyer = Acquereur.objects.filter(cni_number__iexact=cni_number).order_by("pk").first()
        if buyer:
            return buyer, "cni_number"
    return None, None


def _clean_buyer_data(data):
    cleaned = {key: data.get(key) for key in BUYER_FIELDS if data.get(key) is not None}
    cleaned["name"] = normalize_person_name(cleaned.get("name"))
    if not cleaned["name"]:
        raise MissingBuyerError("Le nom de l'acquéreur est obligatoire.")
    cleaned["phone"] = normalize_phone(cleaned.get("phone"))
    cleaned["cni_number"] = normalize_document_number(cleaned.get("cni_number"))
    for key in ("email", "address", "birth_place", "profession"):
        cleaned[key] = (cleaned.get(key) or "").strip()
    birth_date = cleaned.pop("birth_date", None)
    if birth_date:
        parsed = parse_date(str(birth_date))
        if parsed is None:
            raise ValidationError("Date de naissance invalide.", code="invalid_birth_date")
        cleaned["birth_date"] = parsed
    return cleaned


@transaction.atomic
def register_buyer(data):
    """Création d'un acquéreur avec contrôle des doublons."""
    cleaned = _clean_buyer_data(data)
    duplicate, field = find_duplicate_buyer(cleaned["name"], cleaned["phone"], cleaned["cni_number"])
    if duplicate:
        logger.info("Acquéreur en doublon (%s) avec %s", field, duplicate.pk)
        raise DuplicateBuyerError(duplicate, field)
    buyer = Acquereur.objects.create(**cleaned)
    logger.info("Acquéreur %s créé", buyer.pk)
    return buyer


def resolve_buyer(ref):
    """
    ``ref`` is an Acquereur, an existing buyer id, or a dict of inline buyer
    data that goes through ``register_buyer``.
    """
    if ref is None or (isinstance(ref, str) and not ref.strip()):
        raise MissingBuyerError("Veuillez sélectionner ou saisir un acquéreur.")
    if isinstance(ref, Acquereur):
        return ref
    if isinstance(ref, dict):
        if not normalize_person_name(ref.get("name")):
            raise MissingBuyerError("Veuillez sélectionner ou saisir un acquéreur.")
        return register_buyer(ref)
    buyer = Acquereur.objects.filter(pk=as_pk(ref)).first()
    if buyer is None:
        raise NotFoundError("Acquéreur introuvable.")
    return buyer
