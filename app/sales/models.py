import uuid

from django.db import models
from django.utils import timezone


class PaymentMethod(models.TextChoices):
    CASH = "especes", "Espèces"
    TRANSFER = "virement", "Virement"
    MOBILE_MONEY = "mobile_money", "Mobile money"
    CHEQUE = "cheque", "Chèque"


class Acquereur(models.Model):
    """
    Acheteur d'une parcelle. Le téléphone est stocké en chiffres seuls pour
    que la détection de doublons compare des valeurs normalisées.
    """
    name = models.CharField("Nom complet", max_length=200)
    phone = models.CharField("Téléphone", max_length=30, blank=True)
    email = models.EmailField("Email", blank=True)
    cni_number = models.CharField("Numéro CNI", max_length=50, blank=True)
    address = models.CharField("Adresse", max_length=255, blank=True)
    birth_date = models.DateField("Date de naissance", blank=True, null=True)
    birth_place = models.CharField("Lieu de naissance", max_length=150, blank=True)
    profession = models.CharField("Profession", max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "acquereurs"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Reservation(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        CANCELLED = "cancelled", "Annulée"
        CONVERTED = "converted", "Convertie en vente"

    parcelle = models.ForeignKey("inventory.Parcelle", on_delete=models.PROTECT, related_name="reservations")
    acquereur = models.ForeignKey(Acquereur, on_delete=models.PROTECT, related_name="reservations")
    deposit_amount = models.PositiveBigIntegerField("Acompte (FCFA)", default=0)
    payment_method = models.CharField(
        "Mode de paiement", max_length=20, choices=PaymentMethod.choices, blank=True
    )
    reservation_date = models.DateField("Date de réservation", default=timezone.localdate)
    validity_days = models.PositiveIntegerField("Validité (jours)", default=30)
    expiry_date = models.DateField("Date d'expiration")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.ACTIVE)
    converted_vente = models.ForeignKey(
        "sales.Vente",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="converted_reservations",
    )
    notes = models.TextField("Notes", blank=True)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="reservations_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reservations_parcelles"
        ordering = ["-reservation_date", "-created_at"]

    def __str__(self):
        return f"Réservation {self.parcelle_id} - {self.acquereur}"


class Vente(models.Model):
    class PaymentType(models.TextChoices):
        CASH = "comptant", "Comptant"
        INSTALLMENT = "echelonne", "Échelonné"

    class Status(models.TextChoices):
        IN_PROGRESS = "en_cours", "En cours"
        SETTLED = "solde", "Soldée"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    parcelle = models.ForeignKey("inventory.Parcelle", on_delete=models.PROTECT, related_name="ventes")
    acquereur = models.ForeignKey(Acquereur, on_delete=models.PROTECT, related_name="ventes")
    sale_date = models.DateField("Date de vente", default=timezone.localdate)
    total_price = models.PositiveBigIntegerField("Prix total (FCFA)")
    payment_type = models.CharField(max_length=12, choices=PaymentType.choices, default=PaymentType.CASH)
    payment_method = models.CharField(
        "Mode de paiement", max_length=20, choices=PaymentMethod.choices, blank=True
    )
    down_payment = models.PositiveBigIntegerField("Apport initial", blank=True, null=True)
    monthly_payment = models.PositiveBigIntegerField("Mensualité", blank=True, null=True)
    total_installments = models.PositiveIntegerField("Nombre d'échéances", blank=True, null=True)
    paid_installments = models.PositiveIntegerField("Échéances payées", default=0)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.IN_PROGRESS)
    sold_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="ventes_parcelles",
    )
    notes = models.TextField("Notes", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "ventes_parcelles"
        ordering = ["-sale_date", "-created_at"]

    def __str__(self):
        return f"Vente {self.id}"

    @property
    def is_installment(self):
        return self.payment_type == self.PaymentType.INSTALLMENT


class Echeance(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "En attente"
        PAID = "paid", "Payée"

    vente = models.ForeignKey(Vente, on_delete=models.CASCADE, related_name="echeances")
    due_date = models.DateField("Date d'échéance")
    amount = models.PositiveBigIntegerField("Montant")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    paid_date = models.DateField("Date de paiement", blank=True, null=True)
    paid_amount = models.PositiveBigIntegerField("Montant payé", blank=True, null=True)
    payment_method = models.CharField(
        "Mode de paiement", max_length=20, choices=PaymentMethod.choices, blank=True
    )
    receipt_number = models.CharField("Numéro de reçu", max_length=50, blank=True)
    notes = models.TextField("Notes", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "echeances_parcelles"
        ordering = ["vente", "due_date"]

    def __str__(self):
        return f"Échéance {self.due_date} - {self.amount}"


class ActivityLog(models.Model):
    class Action(models.TextChoices):
        CREATE = "create", "Création"
        UPDATE = "update", "Modification"
        CANCEL = "cancel", "Annulation"

    action = models.CharField(max_length=20, choices=Action.choices)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64, blank=True)
    message = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "activity_logs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.get_action_display()} {self.entity_type} {self.entity_id}"

    @classmethod
    def record(cls, action, entity, message="", *, user=None, **metadata):
        return cls.objects.create(
            action=action,
            entity_type=entity._meta.model_name,
            entity_id=str(entity.pk),
            message=message,
            metadata=metadata,
            created_by=user,
        )
