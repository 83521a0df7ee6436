"""
Ventes de parcelles et échéanciers.
"""
import logging

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_date

from core.errors import ConflictError, NotFoundError, ValidationError
from core.parsing import as_pk, parse_amount, parse_int
from inventory.models import Parcelle
from inventory.services import transition_parcelle

from .buyers import resolve_buyer
from .models import ActivityLog, Echeance, Reservation, Vente
from .reservations import clean_payment_method, convert_to_sale

logger = logging.getLogger(__name__)


def compute_installment_plan(total_price, payment_type, down_payment=None, total_installments=None):
    """
    Returns ``(down_payment, monthly_payment, total_installments)``.

    Cash sales have no plan: the three values are None. Otherwise the
    financed amount is split with an integer ceiling, so
    ``monthly_payment * total_installments >= total_price - down_payment``.
    The count shrinks when the ceiling leaves nothing for the last months.
    """
    if payment_type == Vente.PaymentType.CASH:
        return None, None, None

    try:
        down = parse_amount(down_payment)
    except ValueError:
        down = None
    if down is None:
        down = 0
    if down < 0:
        raise ValidationError("L'apport initial ne peut pas être négatif.", code="invalid_down_payment")
    if down > total_price:
        raise ValidationError("L'apport initial dépasse le prix total.", code="invalid_down_payment")

    installments = parse_int(total_installments)
    if installments is None or installments <= 0:
        installments = settings.SALE_DEFAULT_INSTALLMENTS

    financed = total_price - down
    if financed == 0:
        raise ValidationError(
            "L'apport couvre le prix total : enregistrez une vente au comptant.",
            code="nothing_to_finance",
        )
    monthly = -(-financed // installments)
    return down, monthly, -(-financed // monthly)


def build_echeances(vente):
    """
    Une échéance par mois à partir de la date de vente. Toutes valent la
    mensualité sauf la dernière, qui porte le reliquat.
    """
    if not vente.is_installment or not vente.total_installments:
        return []
    remaining = vente.total_price - (vente.down_payment or 0)
    echeances = []
    for i in range(vente.total_installments):
        if remaining <= 0:
            break
        if i == vente.total_installments - 1:
            amount = max(remaining, 0)
        else:
            amount = min(vente.monthly_payment, max(remaining, 0))
        remaining -= amount
        echeances.append(
            Echeance(
                vente=vente,
                due_date=vente.sale_date + relativedelta(months=i + 1),
                amount=amount,
            )
        )
    return Echeance.objects.bulk_create(echeances)


def _clean_total_price(value):
    try:
        total = parse_amount(value)
    except ValueError:
        total = None
    if total is None or total <= 0:
        raise ValidationError("Le prix total doit être un montant entier positif.", code="invalid_total_price")
    return total


def _clean_payment_type(value):
    value = str(value or Vente.PaymentType.CASH).strip()
    if value not in Vente.PaymentType.values:
        raise ValidationError(f"Type de paiement inconnu : {value}.", code="invalid_payment_type")
    return value


def _clean_sale_date(value):
    if not value:
        return timezone.localdate()
    if hasattr(value, "year"):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationError("Date de vente invalide.", code="invalid_sale_date")
    return parsed


def _get_seller(sold_by):
    if sold_by in (None, ""):
        return None
    User = get_user_model()
    seller = sold_by if isinstance(sold_by, User) else User.objects.filter(pk=as_pk(sold_by)).first()
    if seller is None:
        raise NotFoundError("Vendeur introuvable.")
    if not seller.can_sell:
        raise ValidationError(f"{seller} n'est pas habilité à vendre.", code="invalid_seller")
    return seller


def _lock_reservation(reservation_id, parcelle_id):
    reservation = Reservation.objects.select_for_update().filter(pk=as_pk(reservation_id)).first()
    if reservation is None:
        raise NotFoundError("Réservation introuvable.")
    if str(reservation.parcelle_id) != str(parcelle_id):
        raise ValidationError("La réservation concerne une autre parcelle.", code="reservation_mismatch")
    if reservation.status != Reservation.Status.ACTIVE:
        raise ConflictError(
            "La réservation n'est plus active.",
            code="reservation_not_active",
            current_status=reservation.status,
        )
    return reservation


@transaction.atomic
def create_sale(
    parcelle_id,
    buyer,
    *,
    total_price,
    payment_type=Vente.PaymentType.CASH,
    payment_method="",
    down_payment=None,
    total_installments=None,
    sold_by=None,
    reservation_id=None,
    sale_date=None,
    notes="",
):
    """
    Vend une parcelle disponible ou réservée.

    Avec ``reservation_id``, la réservation (active, sur la même parcelle)
    est convertie dans la même transaction. Sans, la réservation active de la
    parcelle, s'il y en a une, est convertie aussi.
    """
    total_price = _clean_total_price(total_price)
    payment_type = _clean_payment_type(payment_type)
    payment_method = clean_payment_method(payment_method)
    sale_date = _clean_sale_date(sale_date)
    down, monthly, installments = compute_installment_plan(
        total_price, payment_type, down_payment, total_installments
    )
    seller = _get_seller(sold_by)
    buyer = resolve_buyer(buyer)

    if reservation_id not in (None, ""):
        held = [_lock_reservation(reservation_id, parcelle_id)]
    else:
        held = list(
            Reservation.objects.select_for_update().filter(
                parcelle_id=as_pk(parcelle_id),
                status=Reservation.Status.ACTIVE,
            )
        )

    parcelle = transition_parcelle(
        parcelle_id,
        from_statuses=[Parcelle.Status.AVAILABLE, Parcelle.Status.RESERVED],
        to_status=Parcelle.Status.SOLD,
    )
    vente = Vente.objects.create(
        parcelle=parcelle,
        acquereur=buyer,
        sale_date=sale_date,
        total_price=total_price,
        payment_type=payment_type,
        payment_method=payment_method,
        down_payment=down,
        monthly_payment=monthly,
        total_installments=installments,
        status=Vente.Status.IN_PROGRESS if installments else Vente.Status.SETTLED,
        sold_by=seller,
        notes=(notes or "").strip(),
    )
    build_echeances(vente)
    for reservation in held:
        convert_to_sale(reservation.pk, vente)

    ActivityLog.record(
        ActivityLog.Action.CREATE,
        vente,
        "Vente parcelle",
        user=seller,
        total_price=total_price,
        payment_type=payment_type,
        reservation_ids=[r.pk for r in held],
    )
    logger.info("Vente %s créée pour la parcelle %s (%s)", vente.pk, parcelle.pk, payment_type)
    return vente


@transaction.atomic
def pay_echeance(echeance_id, *, paid_amount=None, paid_date=None, payment_method="", receipt_number="", user=None):
    """Règlement d'une échéance en attente ; incrémente le compteur de la vente."""
    echeance = Echeance.objects.filter(pk=as_pk(echeance_id)).first()
    if echeance is None:
        raise NotFoundError("Échéance introuvable.")
    try:
        amount = parse_amount(paid_amount)
    except ValueError:
        raise ValidationError("Montant payé invalide.", code="invalid_paid_amount") from None
    if amount is not None and amount < 0:
        raise ValidationError("Montant payé invalide.", code="invalid_paid_amount")
    payment_method = clean_payment_method(payment_method)
    paid_on = parse_date(str(paid_date)) if paid_date else timezone.localdate()
    if paid_on is None:
        raise ValidationError("Date de paiement invalide.", code="invalid_paid_date")

    updated = Echeance.objects.filter(pk=echeance.pk, status=Echeance.Status.PENDING).update(
        status=Echeance.Status.PAID,
        paid_date=paid_on,
        paid_amount=echeance.amount if amount is None else amount,
        payment_method=payment_method,
        receipt_number=(receipt_number or "").strip(),
        updated_at=timezone.now(),
    )
    if not updated:
        raise ConflictError("Cette échéance est déjà payée.", code="echeance_already_paid")

    Vente.objects.filter(pk=echeance.vente_id).update(paid_installments=F("paid_installments") + 1)
    Vente.objects.filter(
        pk=echeance.vente_id,
        paid_installments__gte=F("total_installments"),
    ).update(status=Vente.Status.SETTLED)

    echeance.refresh_from_db()
    ActivityLog.record(
        ActivityLog.Action.UPDATE,
        echeance,
        "Paiement échéance",
        user=user,
        vente_id=str(echeance.vente_id),
        paid_amount=echeance.paid_amount,
    )
    logger.info("Échéance %s payée (vente %s)", echeance.pk, echeance.vente_id)
    return echeance


def _pending_echeances(lotissement=None):
    qs = Echeance.objects.filter(status=Echeance.Status.PENDING).select_related(
        "vente__acquereur", "vente__parcelle__lotissement"
    )
    if lotissement not in (None, ""):
        qs = qs.filter(vente__parcelle__lotissement_id=as_pk(lotissement))
    return qs.order_by("due_date", "pk")


def overdue_echeances(today=None, lotissement=None):
    """Échéances en attente dont la date est passée (strictement avant ``today``)."""
    today = today or timezone.localdate()
    return _pending_echeances(lotissement).filter(due_date__lt=today)


def upcoming_echeances(months_ahead=1, today=None, lotissement=None):
    """Échéances en attente entre ``today`` et ``today + months_ahead`` mois, bornes incluses."""
    today = today or timezone.localdate()
    months = parse_int(months_ahead, default=1)
    if months < 1:
        months = 1
    return _pending_echeances(lotissement).filter(
        due_date__gte=today,
        due_date__lte=today + relativedelta(months=months),
    )
