import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


PAYMENT_METHOD_CHOICES = [
    ("especes", "Espèces"),
    ("virement", "Virement"),
    ("mobile_money", "Mobile money"),
    ("cheque", "Chèque"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Acquereur",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="Nom complet")),
                ("phone", models.CharField(blank=True, max_length=30, verbose_name="Téléphone")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="Email")),
                ("cni_number", models.CharField(blank=True, max_length=50, verbose_name="Numéro CNI")),
                ("address", models.CharField(blank=True, max_length=255, verbose_name="Adresse")),
                ("birth_date", models.DateField(blank=True, null=True, verbose_name="Date de naissance")),
                ("birth_place", models.CharField(blank=True, max_length=150, verbose_name="Lieu de naissance")),
                ("profession", models.CharField(blank=True, max_length=150, verbose_name="Profession")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "acquereurs",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Vente",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sale_date", models.DateField(default=django.utils.timezone.localdate, verbose_name="Date de vente")),
                ("total_price", models.PositiveBigIntegerField(verbose_name="Prix total (FCFA)")),
                ("payment_type", models.CharField(choices=[("comptant", "Comptant"), ("echelonne", "Échelonné")], default="comptant", max_length=12)),
                ("payment_method", models.CharField(blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=20, verbose_name="Mode de paiement")),
                ("down_payment", models.PositiveBigIntegerField(blank=True, null=True, verbose_name="Apport initial")),
                ("monthly_payment", models.PositiveBigIntegerField(blank=True, null=True, verbose_name="Mensualité")),
                ("total_installments", models.PositiveIntegerField(blank=True, null=True, verbose_name="Nombre d'échéances")),
                ("paid_installments", models.PositiveIntegerField(default=0, verbose_name="Échéances payées")),
                ("status", models.CharField(choices=[("en_cours", "En cours"), ("solde", "Soldée")], default="en_cours", max_length=12)),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("acquereur", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ventes", to="sales.acquereur")),
                ("parcelle", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ventes", to="inventory.parcelle")),
                ("sold_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ventes_parcelles", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "ventes_parcelles",
                "ordering": ["-sale_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("deposit_amount", models.PositiveBigIntegerField(default=0, verbose_name="Acompte (FCFA)")),
                ("payment_method", models.CharField(blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=20, verbose_name="Mode de paiement")),
                ("reservation_date", models.DateField(default=django.utils.timezone.localdate, verbose_name="Date de réservation")),
                ("validity_days", models.PositiveIntegerField(default=30, verbose_name="Validité (jours)")),
                ("expiry_date", models.DateField(verbose_name="Date d'expiration")),
                ("status", models.CharField(choices=[("active", "Active"), ("cancelled", "Annulée"), ("converted", "Convertie en vente")], default="active", max_length=12)),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("acquereur", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="reservations", to="sales.acquereur")),
                ("converted_vente", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="converted_reservations", to="sales.vente")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reservations_created", to=settings.AUTH_USER_MODEL)),
                ("parcelle", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="reservations", to="inventory.parcelle")),
            ],
            options={
                "db_table": "reservations_parcelles",
                "ordering": ["-reservation_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Echeance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("due_date", models.DateField(verbose_name="Date d'échéance")),
                ("amount", models.PositiveBigIntegerField(verbose_name="Montant")),
                ("status", models.CharField(choices=[("pending", "En attente"), ("paid", "Payée")], default="pending", max_length=10)),
                ("paid_date", models.DateField(blank=True, null=True, verbose_name="Date de paiement")),
                ("paid_amount", models.PositiveBigIntegerField(blank=True, null=True, verbose_name="Montant payé")),
                ("payment_method", models.CharField(blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=20, verbose_name="Mode de paiement")),
                ("receipt_number", models.CharField(blank=True, max_length=50, verbose_name="Numéro de reçu")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("vente", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="echeances", to="sales.vente")),
            ],
            options={
                "db_table": "echeances_parcelles",
                "ordering": ["vente", "due_date"],
            },
        ),
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=[("create", "Création"), ("update", "Modification"), ("cancel", "Annulation")], max_length=20)),
                ("entity_type", models.CharField(max_length=50)),
                ("entity_id", models.CharField(blank=True, max_length=64)),
                ("message", models.CharField(blank=True, max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="activity_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "activity_logs",
                "ordering": ["-created_at"],
            },
        ),
    ]
