from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ManagementType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, verbose_name="Nom")),
                ("type", models.CharField(choices=[("gestion_complete", "Gestion complète"), ("encaissement", "Encaissement seul"), ("location", "Mise en location")], default="gestion_complete", max_length=20, verbose_name="Type")),
                ("percentage", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal("0")), django.core.validators.MaxValueValidator(Decimal("100"))], verbose_name="Commission (%)")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("is_default", models.BooleanField(default=False, verbose_name="Par défaut")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "management_types",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Owner",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="Nom")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="Email")),
                ("phone", models.CharField(blank=True, max_length=30, verbose_name="Téléphone")),
                ("status", models.CharField(choices=[("actif", "Actif"), ("inactif", "Inactif")], default="actif", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("management_type", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="owners", to="finance.managementtype")),
            ],
            options={
                "db_table": "owners",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Titre")),
                ("address", models.CharField(blank=True, max_length=255, verbose_name="Adresse")),
                ("price", models.PositiveBigIntegerField(default=0, verbose_name="Loyer (FCFA)")),
                ("property_type", models.CharField(blank=True, max_length=50, verbose_name="Type de bien")),
                ("status", models.CharField(blank=True, max_length=20, verbose_name="Statut")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="properties", to="finance.owner")),
            ],
            options={
                "db_table": "properties",
                "ordering": ["title"],
                "verbose_name_plural": "properties",
            },
        ),
        migrations.CreateModel(
            name="Tenant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="Nom")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="Email")),
                ("phone", models.CharField(blank=True, max_length=30, verbose_name="Téléphone")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("property", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="tenants", to="finance.property")),
            ],
            options={
                "db_table": "tenants",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.BigIntegerField(verbose_name="Montant (FCFA)")),
                ("due_date", models.DateField(verbose_name="Échéance")),
                ("paid_date", models.DateField(blank=True, null=True, verbose_name="Date de paiement")),
                ("status", models.CharField(choices=[("paid", "Payé"), ("pending", "En attente"), ("late", "En retard"), ("upcoming", "À venir")], default="pending", max_length=10)),
                ("method", models.CharField(blank=True, max_length=20, verbose_name="Mode de paiement")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="finance.tenant")),
            ],
            options={
                "db_table": "payments",
                "ordering": ["-due_date"],
                "indexes": [models.Index(fields=["status", "paid_date"], name="payments_status_paid_idx")],
            },
        ),
    ]
