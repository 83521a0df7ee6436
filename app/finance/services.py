import logging

from core.errors import NotFoundError

from .commissions import compute_commission_report, payment_commission
from .models import Payment

logger = logging.getLogger(__name__)


def _related(payments):
    tenants, properties, owners = {}, {}, {}
    for payment in payments:
        tenant = payment.tenant
        tenants[tenant.id] = tenant
        if tenant.property is not None:
            properties[tenant.property.id] = tenant.property
            if tenant.property.owner is not None:
                owners[tenant.property.owner.id] = tenant.property.owner
    return list(owners.values()), list(properties.values()), list(tenants.values())


def load_commission_report(start_date=None, end_date=None):
    """
    Rapport de commissions sur un instantané unique : une seule requête
    ramène les paiements avec locataire, bien, propriétaire et mandat.
    """
    qs = Payment.objects.filter(status=Payment.Status.PAID, paid_date__isnull=False).select_related(
        "tenant__property__owner__management_type"
    )
    if start_date:
        qs = qs.filter(paid_date__gte=start_date)
    if end_date:
        qs = qs.filter(paid_date__lte=end_date)
    payments = list(qs.order_by("id"))
    owners, properties, tenants = _related(payments)
    report = compute_commission_report(payments, owners, properties, tenants, start_date, end_date)
    logger.info(
        "Rapport de commissions %s : %s paiements, %s FCFA",
        report.period,
        report.payment_count,
        report.total_commission,
    )
    return report


def load_payment_commission(payment_id):
    payment = (
        Payment.objects.select_related("tenant__property__owner__management_type")
        .filter(pk=payment_id)
        .first()
    )
    if payment is None:
        raise NotFoundError("Paiement introuvable.")
    owners, properties, tenants = _related([payment])
    return payment_commission(payment, owners, properties, tenants)
