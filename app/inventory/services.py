"""
Cycle de vie des parcelles.

Le statut d'une parcelle suit ``TRANSITIONS`` et n'est écrit que par
``transition_parcelle`` (mise à jour conditionnelle). Les gardes de numéro de
lot et de capacité d'îlot s'appliquent à chaque création, modification,
création en lot et restauration.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from core.errors import ConflictError, NotFoundError, ValidationError
from core.normalization import normalize_plot_number
from core.parsing import as_pk, parse_amount, parse_decimal, parse_int

from .models import Ilot, Lotissement, Parcelle

logger = logging.getLogger(__name__)

Status = Parcelle.Status

TRANSITIONS = {
    Status.AVAILABLE: {Status.RESERVED, Status.SOLD},
    Status.RESERVED: {Status.AVAILABLE, Status.SOLD},
    Status.SOLD: set(),
}

PARCELLE_EDITABLE_FIELDS = ("plot_number", "area", "price", "ilot", "assigned_to", "notes")


def can_transition(from_status, to_status):
    return to_status in TRANSITIONS.get(from_status, set())


@transaction.atomic
def transition_parcelle(parcelle_id, *, from_statuses, to_status):
    """
    ``UPDATE parcelles SET status = to_status WHERE id = ? AND status IN from_statuses``.

    Two actors racing on the same parcel cannot both win: the loser gets a
    ConflictError carrying the status it found.
    """
    from_statuses = tuple(from_statuses)
    for from_status in from_statuses:
        if not can_transition(from_status, to_status):
            raise ConflictError(
                f"Transition interdite : {from_status} -> {to_status}.",
                code="illegal_transition",
            )

    updated = (
        Parcelle.objects.alive()
        .filter(pk=as_pk(parcelle_id), status__in=from_statuses)
        .update(status=to_status, updated_at=timezone.now())
    )
    parcelle = Parcelle.objects.alive().select_related("lotissement").filter(pk=as_pk(parcelle_id)).first()
    if not updated:
        if parcelle is None:
            raise NotFoundError("Parcelle introuvable.")
        logger.warning(
            "Transition refusée pour la parcelle %s : %s -> %s",
            parcelle.pk,
            parcelle.status,
            to_status,
        )
        raise ConflictError(
            f"La parcelle {parcelle.plot_number} est déjà {parcelle.get_status_display().lower()}.",
            code="parcelle_status_conflict",
            current_status=parcelle.status,
        )
    logger.info("Parcelle %s : %s -> %s", parcelle.pk, "/".join(from_statuses), to_status)
    return parcelle


# ---------------------------------------------------------------------------
# Gardes
# ---------------------------------------------------------------------------

def check_plot_number_available(lotissement_id, plot_number, exclude_id=None):
    qs = Parcelle.objects.alive().filter(
        lotissement_id=lotissement_id,
        plot_number__iexact=plot_number,
    )
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise ValidationError(
            f"Le numéro de lot {plot_number} existe déjà.",
            code="duplicate_plot_number",
            plot_number=plot_number,
        )


def check_ilot_capacity(ilot, exclude_id=None, adding=1):
    """Le nombre de parcelles vivantes de l'îlot ne doit pas dépasser sa capacité."""
    if ilot is None or ilot.capacity is None:
        return
    qs = ilot.parcelles.filter(deleted_at__isnull=True)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    occupied = qs.count()
    if occupied + adding > ilot.capacity:
        raise ValidationError(
            f"L'îlot {ilot.name} est complet ({occupied}/{ilot.capacity} lots).",
            code="ilot_capacity_exceeded",
            ilot_id=ilot.pk,
            capacity=ilot.capacity,
            occupied=occupied,
        )


# ---------------------------------------------------------------------------
# Lecture / conversion des entrées
# ---------------------------------------------------------------------------

def get_lotissement(lotissement):
    if isinstance(lotissement, Lotissement):
        return lotissement
    found = Lotissement.objects.alive().filter(pk=as_pk(lotissement)).first()
    if found is None:
        raise NotFoundError("Lotissement introuvable.")
    return found


def _lock_ilot(ilot_id, lotissement_id):
    if ilot_id in (None, ""):
        return None
    if isinstance(ilot_id, Ilot):
        ilot_id = ilot_id.pk
    ilot = Ilot.objects.alive().select_for_update().filter(pk=as_pk(ilot_id)).first()
    if ilot is None:
        raise NotFoundError("Îlot introuvable.")
    if ilot.lotissement_id != lotissement_id:
        raise ValidationError("L'îlot n'appartient pas à ce lotissement.", code="ilot_mismatch")
    return ilot


def _get_user(user):
    if user in (None, ""):
        return None
    User = get_user_model()
    if isinstance(user, User):
        return user
    found = User.objects.filter(pk=as_pk(user)).first()
    if found is None:
        raise NotFoundError("Utilisateur introuvable.")
    return found


def _clean_plot_number(value):
    plot_number = normalize_plot_number(value)
    if not plot_number:
        raise ValidationError("Le numéro de lot est obligatoire.", code="missing_plot_number")
    return plot_number


def _clean_area(value):
    try:
        area = parse_decimal(value)
    except ValueError:
        area = None
    if area is None or area <= 0:
        raise ValidationError("La superficie doit être un nombre positif.", code="invalid_area")
    return area


def _clean_price(value):
    try:
        price = parse_amount(value)
    except ValueError:
        price = None
    if price is None or price <= 0:
        raise ValidationError("Le prix doit être un montant entier positif.", code="invalid_price")
    return price


def _clean_capacity(value):
    if value in (None, ""):
        return None
    try:
        capacity = parse_amount(value)
    except ValueError:
        capacity = None
    if capacity is None or capacity < 0:
        raise ValidationError("La capacité doit être un entier positif ou vide.", code="invalid_capacity")
    return capacity


# ---------------------------------------------------------------------------
# Parcelles
# ---------------------------------------------------------------------------

@transaction.atomic
def create_parcelle(lotissement, *, plot_number, area, price, ilot=None, assigned_to=None, notes=""):
    """Nouvelle parcelle, toujours disponible."""
    lotissement = get_lotissement(lotissement)
    plot_number = _clean_plot_number(plot_number)
    area = _clean_area(area)
    price = _clean_price(price)
    assigned_to = _get_user(assigned_to)

    ilot = _lock_ilot(ilot, lotissement.pk)
    check_plot_number_available(lotissement.pk, plot_number)
    check_ilot_capacity(ilot)

    parcelle = Parcelle.objects.create(
        lotissement=lotissement,
        ilot=ilot,
        plot_number=plot_number,
        area=area,
        price=price,
        status=Status.AVAILABLE,
        assigned_to=assigned_to,
        notes=(notes or "").strip(),
    )
    logger.info("Parcelle %s créée (lot %s, lotissement %s)", parcelle.pk, plot_number, lotissement.pk)
    return parcelle


@transaction.atomic
def create_parcelles_bulk(lotissement, *, count, start_number=1, prefix="", area, price, ilot=None):
    """
    Création en lot : numéros ``prefix + (start_number + i)``.
    Tout ou rien : un seul numéro déjà pris annule l'opération.
    """
    lotissement = get_lotissement(lotissement)
    count = parse_int(count)
    if count is None or count < 1:
        raise ValidationError("Le nombre de lots doit être au moins 1.", code="invalid_count")
    start_number = parse_int(start_number, default=1)
    prefix = (prefix or "").strip()
    area = _clean_area(area)
    price = _clean_price(price)

    ilot = _lock_ilot(ilot, lotissement.pk)
    plot_numbers = [f"{prefix}{start_number + i}" for i in range(count)]
    for plot_number in plot_numbers:
        check_plot_number_available(lotissement.pk, plot_number)
    check_ilot_capacity(ilot, adding=count)

    parcelles = Parcelle.objects.bulk_create(
        [
            Parcelle(
                lotissement=lotissement,
                ilot=ilot,
                plot_number=plot_number,
                area=area,
                price=price,
                status=Status.AVAILABLE,
            )
            for plot_number in plot_numbers
        ]
    )
    logger.info("%s parcelles créées dans le lotissement %s", len(parcelles), lotissement.pk)
    return parcelles


def _lock_parcelle(parcelle_id, *, deleted=False):
    qs = Parcelle.objects.deleted() if deleted else Parcelle.objects.alive()
    parcelle = qs.select_for_update().filter(pk=as_pk(parcelle_id)).first()
    if parcelle is None:
        raise NotFoundError("Parcelle introuvable.")
    return parcelle


@transaction.atomic
def update_parcelle(parcelle_id, **changes):
    """
    Modification d'une parcelle. Le statut n'est jamais modifiable ici et une
    parcelle vendue ne change plus d'îlot.
    """
    parcelle = _lock_parcelle(parcelle_id)

    if "status" in changes and changes.pop("status") not in (None, "", parcelle.status):
        raise ConflictError(
            "Le statut d'une parcelle ne change que par une réservation ou une vente.",
            code="status_not_editable",
            current_status=parcelle.status,
        )
    unknown = set(changes) - set(PARCELLE_EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Champs non modifiables : {', '.join(sorted(unknown))}.", code="unknown_fields")

    if "plot_number" in changes:
        parcelle.plot_number = _clean_plot_number(changes["plot_number"])
        check_plot_number_available(parcelle.lotissement_id, parcelle.plot_number, exclude_id=parcelle.pk)
    if "area" in changes:
        parcelle.area = _clean_area(changes["area"])
    if "price" in changes:
        parcelle.price = _clean_price(changes["price"])
    if "assigned_to" in changes:
        parcelle.assigned_to = _get_user(changes["assigned_to"])
    if "notes" in changes:
        parcelle.notes = (changes["notes"] or "").strip()
    if "ilot" in changes:
        ilot = _lock_ilot(changes["ilot"], parcelle.lotissement_id)
        new_ilot_id = ilot.pk if ilot else None
        if new_ilot_id != parcelle.ilot_id:
            if parcelle.is_sold:
                raise ConflictError(
                    "Une parcelle vendue ne peut plus changer d'îlot.",
                    code="parcelle_sold",
                    current_status=parcelle.status,
                )
            check_ilot_capacity(ilot, exclude_id=parcelle.pk)
            parcelle.ilot = ilot

    parcelle.save()
    logger.info("Parcelle %s modifiée (%s)", parcelle.pk, ", ".join(sorted(changes)) or "aucun champ")
    return parcelle


@transaction.atomic
def delete_parcelle(parcelle_id):
    """
    Mise à la corbeille. Seule une parcelle disponible se supprime : une
    réservation active doit d'abord être annulée.
    """
    parcelle = _lock_parcelle(parcelle_id)
    if parcelle.is_sold:
        raise ConflictError(
            "Une parcelle vendue ne peut pas être supprimée.",
            code="parcelle_sold",
            current_status=parcelle.status,
        )
    if parcelle.status == Status.RESERVED:
        raise ConflictError(
            "Annulez la réservation avant de supprimer la parcelle.",
            code="parcelle_reserved",
            current_status=parcelle.status,
        )
    parcelle.deleted_at = timezone.now()
    parcelle.save(update_fields=["deleted_at", "updated_at"])
    logger.info("Parcelle %s mise à la corbeille", parcelle.pk)
    return parcelle


@transaction.atomic
def restore_parcelle(parcelle_id):
    """Sortie de corbeille : les gardes sont réévaluées comme pour une création."""
    parcelle = _lock_parcelle(parcelle_id, deleted=True)
    check_plot_number_available(parcelle.lotissement_id, parcelle.plot_number, exclude_id=parcelle.pk)
    if parcelle.ilot_id:
        ilot = Ilot.objects.alive().select_for_update().filter(pk=parcelle.ilot_id).first()
        if ilot is None:
            parcelle.ilot = None
        else:
            check_ilot_capacity(ilot, exclude_id=parcelle.pk)
    parcelle.deleted_at = None
    parcelle.save(update_fields=["deleted_at", "ilot", "updated_at"])
    logger.info("Parcelle %s restaurée", parcelle.pk)
    return parcelle


# ---------------------------------------------------------------------------
# Îlots
# ---------------------------------------------------------------------------

@transaction.atomic
def create_ilot(lotissement, *, name, capacity=None, description="", assigned_to=None):
    lotissement = get_lotissement(lotissement)
    name = (name or "").strip()
    if not name:
        raise ValidationError("Le nom de l'îlot est obligatoire.", code="missing_name")
    ilot = Ilot.objects.create(
        lotissement=lotissement,
        name=name,
        capacity=_clean_capacity(capacity),
        description=(description or "").strip(),
        assigned_to=_get_user(assigned_to),
    )
    logger.info("Îlot %s créé dans le lotissement %s", ilot.pk, lotissement.pk)
    return ilot


@transaction.atomic
def update_ilot(ilot_id, **changes):
    """La capacité ne peut pas descendre sous le nombre de parcelles déjà rattachées."""
    ilot = Ilot.objects.alive().select_for_update().filter(pk=as_pk(ilot_id)).first()
    if ilot is None:
        raise NotFoundError("Îlot introuvable.")

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Le nom de l'îlot est obligatoire.", code="missing_name")
        ilot.name = name
    if "description" in changes:
        ilot.description = (changes["description"] or "").strip()
    if "assigned_to" in changes:
        ilot.assigned_to = _get_user(changes["assigned_to"])
    if "capacity" in changes:
        capacity = _clean_capacity(changes["capacity"])
        if capacity is not None:
            occupied = ilot.parcelles.filter(deleted_at__isnull=True).count()
            if occupied > capacity:
                raise ValidationError(
                    f"L'îlot {ilot.name} contient déjà {occupied} lots.",
                    code="ilot_capacity_exceeded",
                    ilot_id=ilot.pk,
                    capacity=capacity,
                    occupied=occupied,
                )
        ilot.capacity = capacity

    ilot.save()
    return ilot


def _ilot_stats(qs):
    live = Q(parcelles__deleted_at__isnull=True)
    return qs.annotate(
        parcelles_count=Count("parcelles", filter=live),
        parcelles_vendues=Count("parcelles", filter=live & Q(parcelles__status=Status.SOLD)),
        parcelles_disponibles=Count("parcelles", filter=live & Q(parcelles__status=Status.AVAILABLE)),
    )


def ilots_with_stats(lotissement):
    """Îlots vivants du lotissement, annotés des comptes de parcelles vivantes."""
    lotissement = get_lotissement(lotissement)
    return _ilot_stats(Ilot.objects.alive().filter(lotissement=lotissement)).order_by("name")


def deleted_ilots(lotissement):
    lotissement = get_lotissement(lotissement)
    return Ilot.objects.deleted().filter(lotissement=lotissement).order_by("-deleted_at")


@transaction.atomic
def delete_ilot(ilot_id):
    """
    Mise à la corbeille d'un îlot. Ses parcelles vivantes en sont détachées,
    sauf s'il contient une parcelle vendue.
    """
    ilot = Ilot.objects.alive().select_for_update().filter(pk=as_pk(ilot_id)).first()
    if ilot is None:
        raise NotFoundError("Îlot introuvable.")
    parcelles = Parcelle.objects.alive().filter(ilot=ilot)
    sold = parcelles.filter(status=Status.SOLD).count()
    if sold:
        raise ConflictError(
            f"L'îlot {ilot.name} contient {sold} parcelle(s) vendue(s).",
            code="ilot_has_sold_parcelles",
            ilot_id=ilot.pk,
            sold=sold,
        )
    detached = parcelles.update(ilot=None, updated_at=timezone.now())
    ilot.deleted_at = timezone.now()
    ilot.save(update_fields=["deleted_at", "updated_at"])
    logger.info("Îlot %s mis à la corbeille, %s parcelle(s) détachée(s)", ilot.pk, detached)
    return ilot


@transaction.atomic
def restore_ilot(ilot_id):
    """Sortie de corbeille. Les parcelles détachées ne sont pas rattachées à nouveau."""
    ilot = Ilot.objects.deleted().select_for_update().filter(pk=as_pk(ilot_id)).first()
    if ilot is None:
        raise NotFoundError("Îlot introuvable dans la corbeille.")
    if ilot.lotissement.deleted_at is not None:
        raise ConflictError("Le lotissement de cet îlot est supprimé.", code="lotissement_deleted")
    ilot.deleted_at = None
    ilot.save(update_fields=["deleted_at", "updated_at"])
    logger.info("Îlot %s restauré", ilot.pk)
    return ilot
