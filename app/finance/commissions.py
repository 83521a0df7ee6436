"""
Commissions de gestion sur les loyers encaissés.

Fonctions pures : elles ne lisent que les objets passés en argument (modèles
ou tout objet exposant les mêmes attributs) et ne touchent jamais la base.
Le chargement des données est fait par ``finance.services``.
"""
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

PAID = "paid"
NO_MANAGEMENT_TYPE = "Aucun"
ALL_PERIODS = "Toutes périodes"


@dataclass(frozen=True)
class CommissionLine:
    payment_id: int
    payment_date: date
    tenant_name: str
    property_title: str
    owner_id: int
    owner_name: str
    rent_amount: int
    commission_percentage: Decimal
    commission_amount: int
    management_type_name: str


@dataclass
class OwnerCommissionSummary:
    owner_id: int
    owner_name: str
    management_type_name: str
    commission_percentage: Decimal
    total_rent: int = 0
    total_commission: int = 0
    payment_count: int = 0


@dataclass
class CommissionReport:
    period: str
    start_date: Optional[date]
    end_date: Optional[date]
    total_rent: int = 0
    total_commission: int = 0
    payment_count: int = 0
    commissions: List[CommissionLine] = field(default_factory=list)
    by_owner: List[OwnerCommissionSummary] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["start_date"] = self.start_date.isoformat() if self.start_date else ""
        data["end_date"] = self.end_date.isoformat() if self.end_date else ""
        for line in data["commissions"]:
            line["payment_date"] = line["payment_date"].isoformat()
            line["commission_percentage"] = str(line["commission_percentage"])
        for owner in data["by_owner"]:
            owner["commission_percentage"] = str(owner["commission_percentage"])
        return data


def commission_amount(amount: int, percentage) -> int:
    """``amount * percentage / 100`` arrondi au franc, demi vers le haut."""
    value = Decimal(amount) * Decimal(str(percentage or 0)) / Decimal("100")
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _management(owner):
    management_type = getattr(owner, "management_type", None)
    if management_type is None:
        return Decimal("0"), NO_MANAGEMENT_TYPE
    percentage = management_type.percentage or Decimal("0")
    return Decimal(str(percentage)), management_type.name or NO_MANAGEMENT_TYPE


def _in_period(payment, start_date, end_date) -> bool:
    if payment.status != PAID or payment.paid_date is None:
        return False
    if start_date and payment.paid_date < start_date:
        return False
    if end_date and payment.paid_date > end_date:
        return False
    return True


def _chain(payment, tenants: Dict, properties: Dict, owners: Dict):
    # Locataire -> bien -> propriétaire ; un maillon manquant exclut le paiement.
    tenant = tenants.get(payment.tenant_id)
    if tenant is None or tenant.property_id is None:
        return None
    prop = properties.get(tenant.property_id)
    if prop is None or prop.owner_id is None:
        return None
    owner = owners.get(prop.owner_id)
    if owner is None:
        return None
    return tenant, prop, owner


def compute_commission_report(
    payments: Iterable,
    owners: Iterable,
    properties: Iterable,
    tenants: Iterable,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> CommissionReport:
    tenants_by_id = {t.id: t for t in tenants}
    properties_by_id = {p.id: p for p in properties}
    owners_by_id = {o.id: o for o in owners}

    lines: List[CommissionLine] = []
    by_owner: Dict[int, OwnerCommissionSummary] = {}

    for payment in payments:
        if not _in_period(payment, start_date, end_date):
            continue
        chain = _chain(payment, tenants_by_id, properties_by_id, owners_by_id)
        if chain is None:
            continue
        tenant, prop, owner = chain
        percentage, management_type_name = _management(owner)
        amount = commission_amount(payment.amount, percentage)

        lines.append(
            CommissionLine(
                payment_id=payment.id,
                payment_date=payment.paid_date,
                tenant_name=tenant.name,
                property_title=prop.title,
                owner_id=owner.id,
                owner_name=owner.name,
                rent_amount=payment.amount,
                commission_percentage=percentage,
                commission_amount=amount,
                management_type_name=management_type_name,
            )
        )
        summary = by_owner.get(owner.id)
        if summary is None:
            summary = by_owner[owner.id] = OwnerCommissionSummary(
                owner_id=owner.id,
                owner_name=owner.name,
                management_type_name=management_type_name,
                commission_percentage=percentage,
            )
        summary.total_rent += payment.amount
        summary.total_commission += amount
        summary.payment_count += 1

    # Tris stables : les ex aequo gardent l'ordre d'entrée.
    lines.sort(key=lambda line: line.payment_date, reverse=True)
    owners_sorted = sorted(by_owner.values(), key=lambda s: s.total_commission, reverse=True)

    if start_date and end_date:
        period = f"{start_date.isoformat()} - {end_date.isoformat()}"
    else:
        period = ALL_PERIODS

    return CommissionReport(
        period=period,
        start_date=start_date,
        end_date=end_date,
        total_rent=sum(line.rent_amount for line in lines),
        total_commission=sum(line.commission_amount for line in lines),
        payment_count=len(lines),
        commissions=lines,
        by_owner=owners_sorted,
    )


def payment_commission(payment, owners: Iterable, properties: Iterable, tenants: Iterable) -> Optional[dict]:
    """Commission d'un paiement et montant net reversé au propriétaire."""
    chain = _chain(
        payment,
        {t.id: t for t in tenants},
        {p.id: p for p in properties},
        {o.id: o for o in owners},
    )
    if chain is None:
        return None
    _tenant, _prop, owner = chain
    percentage, management_type_name = _management(owner)
    amount = commission_amount(payment.amount, percentage)
    return {
        "owner_name": owner.name,
        "management_type_name": management_type_name,
        "commission_percentage": percentage,
        "commission_amount": amount,
        "net_amount": payment.amount - amount,
    }
