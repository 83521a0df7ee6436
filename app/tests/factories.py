from datetime import timedelta
from decimal import Decimal
from itertools import count

from django.utils import timezone

from finance.models import ManagementType, Owner, Payment, Property, Tenant
from inventory.models import Ilot, Lotissement, Parcelle
from sales.models import Acquereur, Reservation
from users.models import RoleCode, User


class Factory:
    _seq = count(1)

    @classmethod
    def _n(cls):
        return next(cls._seq)

    @classmethod
    def user(cls, *, role=RoleCode.GESTIONNAIRE, password="pass1234", **kwargs):
        n = cls._n()
        defaults = {
            "username": f"user{n}",
            "email": f"user{n}@example.com",
            "is_active": True,
            "role": role,
        }
        defaults.update(kwargs)
        return User.objects.create_user(password=password, **defaults)

    @classmethod
    def lotissement(cls, **kwargs):
        n = cls._n()
        defaults = {
            "name": f"Lotissement {n}",
            "location": "Bingerville",
            "city": "Abidjan",
        }
        defaults.update(kwargs)
        return Lotissement.objects.create(**defaults)

    @classmethod
    def ilot(cls, *, lotissement, **kwargs):
        n = cls._n()
        defaults = {"lotissement": lotissement, "name": f"Îlot {n}"}
        defaults.update(kwargs)
        return Ilot.objects.create(**defaults)

    @classmethod
    def parcelle(cls, *, lotissement, **kwargs):
        n = cls._n()
        defaults = {
            "lotissement": lotissement,
            "plot_number": f"L{n}",
            "area": Decimal("500.00"),
            "price": 5_000_000,
            "status": Parcelle.Status.AVAILABLE,
        }
        defaults.update(kwargs)
        return Parcelle.objects.create(**defaults)

    @classmethod
    def acquereur(cls, **kwargs):
        n = cls._n()
        defaults = {
            "name": f"Acquéreur {n}",
            "phone": f"0700{n:06d}",
        }
        defaults.update(kwargs)
        return Acquereur.objects.create(**defaults)

    @classmethod
    def reservation(cls, *, parcelle, acquereur, **kwargs):
        today = timezone.localdate()
        defaults = {
            "parcelle": parcelle,
            "acquereur": acquereur,
            "deposit_amount": 250_000,
            "reservation_date": today,
            "validity_days": 30,
            "expiry_date": today + timedelta(days=30),
        }
        defaults.update(kwargs)
        return Reservation.objects.create(**defaults)

    @classmethod
    def management_type(cls, **kwargs):
        n = cls._n()
        defaults = {"name": f"Mandat {n}", "percentage": Decimal("10.00")}
        defaults.update(kwargs)
        return ManagementType.objects.create(**defaults)

    @classmethod
    def owner(cls, **kwargs):
        n = cls._n()
        defaults = {"name": f"Propriétaire {n}"}
        defaults.update(kwargs)
        return Owner.objects.create(**defaults)

    @classmethod
    def property(cls, **kwargs):
        n = cls._n()
        defaults = {"title": f"Villa {n}", "price": 500_000}
        defaults.update(kwargs)
        return Property.objects.create(**defaults)

    @classmethod
    def tenant(cls, **kwargs):
        n = cls._n()
        defaults = {"name": f"Locataire {n}"}
        defaults.update(kwargs)
        return Tenant.objects.create(**defaults)

    @classmethod
    def payment(cls, *, tenant, paid_date, **kwargs):
        defaults = {
            "tenant": tenant,
            "amount": 500_000,
            "due_date": paid_date,
            "paid_date": paid_date,
            "status": Payment.Status.PAID,
        }
        defaults.update(kwargs)
        return Payment.objects.create(**defaults)
