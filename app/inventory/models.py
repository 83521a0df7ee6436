from django.db import models
from django.db.models.functions import Lower


class LiveQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)


class Lotissement(models.Model):
    """
    Opération de lotissement : un terrain découpé en îlots et parcelles.
    """
    name = models.CharField("Nom du lotissement", max_length=150)
    location = models.CharField("Localisation", max_length=200)
    city = models.CharField("Ville", max_length=100, blank=True)
    description = models.TextField("Description", blank=True)
    total_area = models.DecimalField(
        "Superficie totale (m²)", max_digits=14, decimal_places=2, blank=True, null=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        db_table = "lotissements"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Ilot(models.Model):
    """
    Îlot : regroupement nommé de parcelles, avec une capacité optionnelle.
    """
    lotissement = models.ForeignKey(Lotissement, on_delete=models.CASCADE, related_name="ilots")
    name = models.CharField("Nom de l'îlot", max_length=100)
    description = models.TextField("Description", blank=True)
    capacity = models.PositiveIntegerField(
        "Nombre de lots",
        db_column="plots_count",
        blank=True,
        null=True,
        help_text="Vide = pas de limite",
    )
    assigned_to = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="assigned_ilots",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        db_table = "ilots"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.lotissement.name})"

    @property
    def is_limited(self):
        return self.capacity is not None


class Parcelle(models.Model):
    """
    Parcelle vendable. Le statut n'est modifié que par les réservations et
    les ventes (voir inventory.services).
    """
    class Status(models.TextChoices):
        AVAILABLE = "disponible", "Disponible"
        RESERVED = "reserve", "Réservée"
        SOLD = "vendu", "Vendue"

    lotissement = models.ForeignKey(Lotissement, on_delete=models.PROTECT, related_name="parcelles")
    ilot = models.ForeignKey(
        Ilot,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="parcelles",
    )
    plot_number = models.CharField("Numéro de lot", max_length=50)
    area = models.DecimalField("Superficie (m²)", max_digits=12, decimal_places=2)
    price = models.PositiveBigIntegerField("Prix (FCFA)")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.AVAILABLE)
    assigned_to = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="assigned_parcelles",
    )
    notes = models.TextField("Notes", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = LiveQuerySet.as_manager()

    class Meta:
        db_table = "parcelles"
        ordering = ["lotissement", "plot_number"]
        constraints = [
            models.UniqueConstraint(
                Lower("plot_number"),
                "lotissement",
                condition=models.Q(deleted_at__isnull=True),
                name="unique_live_plot_number_per_lotissement",
            ),
        ]

    def __str__(self):
        return f"Lot {self.plot_number} ({self.lotissement.name})"

    @property
    def is_sold(self):
        return self.status == self.Status.SOLD
