from django.db import models
from django.contrib.auth.models import AbstractUser


class RoleCode(models.TextChoices):
    ADMIN = 'ADMIN', 'Administrateur'
    GESTIONNAIRE = 'GESTIONNAIRE', 'Gestionnaire'
    COMMERCIAL = 'COMMERCIAL', 'Commercial'
    COMPTABLE = 'COMPTABLE', 'Comptable'


class User(AbstractUser):
    """
    Membre de l'agence.
    Les gestionnaires et commerciaux sont crédités des ventes (sold_by)
    et peuvent être assignés à des parcelles.
    """
    Role = RoleCode

    role = models.CharField(max_length=20, choices=RoleCode.choices, default=RoleCode.GESTIONNAIRE)
    phone = models.CharField("Téléphone", max_length=20, blank=True)

    def __str__(self):
        return f"{self.get_full_name() or self.username} ({self.role})"

    @property
    def can_sell(self):
        return self.is_active and self.role in (RoleCode.ADMIN, RoleCode.GESTIONNAIRE, RoleCode.COMMERCIAL)
