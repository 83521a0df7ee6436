"""
Réservations de parcelles.

Une réservation fait passer la parcelle de « disponible » à « réservée ».
L'annulation la rend disponible et conserve l'acompte. L'expiration est
seulement indicative : rien n'est libéré automatiquement.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.errors import ConflictError, NotFoundError, ValidationError
from core.parsing import as_pk, parse_amount, parse_int
from inventory.models import Parcelle
from inventory.services import transition_parcelle

from .buyers import resolve_buyer
from .models import ActivityLog, PaymentMethod, Reservation

logger = logging.getLogger(__name__)


def _clean_deposit(value):
    try:
        deposit = parse_amount(value)
    except ValueError:
        raise ValidationError("Montant d'acompte invalide.", code="invalid_deposit") from None
    if deposit is None:
        return 0
    if deposit < 0:
        raise ValidationError("L'acompte ne peut pas être négatif.", code="invalid_deposit")
    return deposit


def _clean_validity_days(value):
    default = settings.RESERVATION_DEFAULT_VALIDITY_DAYS
    days = parse_int(value, default=default)
    return days if days >= 1 else default


def clean_payment_method(value):
    value = (value or "").strip()
    if value and value not in PaymentMethod.values:
        raise ValidationError(f"Mode de paiement inconnu : {value}.", code="invalid_payment_method")
    return value


@transaction.atomic
def create_reservation(
    parcelle_id,
    buyer,
    *,
    deposit_amount=None,
    payment_method="",
    validity_days=None,
    notes="",
    created_by=None,
):
    """
    Réserve une parcelle disponible pour un acquéreur.

    ``buyer`` peut être un acquéreur existant (id ou instance) ou un dict de
    saisie, qui passe alors par le contrôle des doublons.
    """
    deposit_amount = _clean_deposit(deposit_amount)
    validity_days = _clean_validity_days(validity_days)
    payment_method = clean_payment_method(payment_method)
    buyer = resolve_buyer(buyer)

    parcelle = transition_parcelle(
        parcelle_id,
        from_statuses=[Parcelle.Status.AVAILABLE],
        to_status=Parcelle.Status.RESERVED,
    )
    today = timezone.localdate()
    reservation = Reservation.objects.create(
        parcelle=parcelle,
        acquereur=buyer,
        deposit_amount=deposit_amount,
        payment_method=payment_method,
        reservation_date=today,
        validity_days=validity_days,
        expiry_date=today + timedelta(days=validity_days),
        notes=(notes or "").strip(),
        created_by=created_by,
    )
    ActivityLog.record(
        ActivityLog.Action.CREATE,
        reservation,
        f"Réservation du lot {parcelle.plot_number}",
        user=created_by,
        parcelle_id=parcelle.pk,
        deposit_amount=deposit_amount,
    )
    logger.info("Réservation %s créée sur la parcelle %s", reservation.pk, parcelle.pk)
    return reservation


@transaction.atomic
def cancel_reservation(reservation_id, *, user=None):
    """Annule une réservation active. L'acompte reste acquis."""
    updated = Reservation.objects.filter(pk=as_pk(reservation_id), status=Reservation.Status.ACTIVE).update(
        status=Reservation.Status.CANCELLED,
        updated_at=timezone.now(),
    )
    reservation = Reservation.objects.select_related("parcelle").filter(pk=as_pk(reservation_id)).first()
    if reservation is None:
        raise NotFoundError("Réservation introuvable.")
    if not updated:
        raise ConflictError(
            "Seule une réservation active peut être annulée.",
            code="reservation_not_active",
            current_status=reservation.status,
        )
    parcelle = transition_parcelle(
        reservation.parcelle_id,
        from_statuses=[Parcelle.Status.RESERVED],
        to_status=Parcelle.Status.AVAILABLE,
    )
    reservation.parcelle = parcelle
    ActivityLog.record(
        ActivityLog.Action.CANCEL,
        reservation,
        f"Annulation de la réservation du lot {parcelle.plot_number}",
        user=user,
        deposit_amount=reservation.deposit_amount,
    )
    logger.info("Réservation %s annulée, parcelle %s disponible", reservation.pk, parcelle.pk)
    return reservation


def convert_to_sale(reservation_id, vente):
    """Passage active -> convertie. Appelé uniquement par la création de vente."""
    updated = Reservation.objects.filter(pk=reservation_id, status=Reservation.Status.ACTIVE).update(
        status=Reservation.Status.CONVERTED,
        converted_vente=vente,
        updated_at=timezone.now(),
    )
    if not updated:
        raise ConflictError("La réservation n'est plus active.", code="reservation_not_active")
    return Reservation.objects.get(pk=reservation_id)


def is_expired(reservation, today=None):
    """Valable jusqu'au jour d'expiration inclus."""
    today = today or timezone.localdate()
    return today > reservation.expiry_date


def expired_reservations(today=None):
    today = today or timezone.localdate()
    return (
        Reservation.objects.filter(status=Reservation.Status.ACTIVE, expiry_date__lt=today)
        .select_related("parcelle__lotissement", "acquereur")
        .order_by("expiry_date")
    )
