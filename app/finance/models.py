from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class ManagementType(models.Model):
    """Mandat de gestion : le pourcentage prélevé sur chaque loyer encaissé."""

    class Kind(models.TextChoices):
        FULL = "gestion_complete", "Gestion complète"
        COLLECTION = "encaissement", "Encaissement seul"
        RENTAL = "location", "Mise en location"

    name = models.CharField("Nom", max_length=100)
    type = models.CharField("Type", max_length=20, choices=Kind.choices, default=Kind.FULL)
    percentage = models.DecimalField(
        "Commission (%)",
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    description = models.TextField("Description", blank=True)
    is_default = models.BooleanField("Par défaut", default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "management_types"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.percentage}%)"


class Owner(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "actif", "Actif"
        INACTIVE = "inactif", "Inactif"

    name = models.CharField("Nom", max_length=200)
    email = models.EmailField("Email", blank=True)
    phone = models.CharField("Téléphone", max_length=30, blank=True)
    management_type = models.ForeignKey(
        ManagementType,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="owners",
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "owners"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Property(models.Model):
    title = models.CharField("Titre", max_length=200)
    address = models.CharField("Adresse", max_length=255, blank=True)
    owner = models.ForeignKey(
        Owner,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="properties",
    )
    price = models.PositiveBigIntegerField("Loyer (FCFA)", default=0)
    property_type = models.CharField("Type de bien", max_length=50, blank=True)
    status = models.CharField("Statut", max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "properties"
        ordering = ["title"]
        verbose_name_plural = "properties"

    def __str__(self):
        return self.title


class Tenant(models.Model):
    name = models.CharField("Nom", max_length=200)
    email = models.EmailField("Email", blank=True)
    phone = models.CharField("Téléphone", max_length=30, blank=True)
    property = models.ForeignKey(
        Property,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="tenants",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = "tenants"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Payment(models.Model):
    """Loyer dû ou encaissé. Seuls les paiements ``paid`` portent commission."""

    class Status(models.TextChoices):
        PAID = "paid", "Payé"
        PENDING = "pending", "En attente"
        LATE = "late", "En retard"
        UPCOMING = "upcoming", "À venir"

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="payments")
    amount = models.BigIntegerField("Montant (FCFA)")
    due_date = models.DateField("Échéance")
    paid_date = models.DateField("Date de paiement", blank=True, null=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    method = models.CharField("Mode de paiement", max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "payments"
        ordering = ["-due_date"]
        indexes = [models.Index(fields=["status", "paid_date"], name="payments_status_paid_idx")]

    def __str__(self):
        return f"Paiement #{self.pk} - {self.amount:,} FCFA"
