import django.db.models.deletion
import django.db.models.functions.text
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lotissement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, verbose_name="Nom du lotissement")),
                ("location", models.CharField(max_length=200, verbose_name="Localisation")),
                ("city", models.CharField(blank=True, max_length=100, verbose_name="Ville")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("total_area", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True, verbose_name="Superficie totale (m²)")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "lotissements",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Ilot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, verbose_name="Nom de l'îlot")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("capacity", models.PositiveIntegerField(blank=True, db_column="plots_count", help_text="Vide = pas de limite", null=True, verbose_name="Nombre de lots")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_ilots", to=settings.AUTH_USER_MODEL)),
                ("lotissement", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ilots", to="inventory.lotissement")),
            ],
            options={
                "db_table": "ilots",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Parcelle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("plot_number", models.CharField(max_length=50, verbose_name="Numéro de lot")),
                ("area", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="Superficie (m²)")),
                ("price", models.PositiveBigIntegerField(verbose_name="Prix (FCFA)")),
                ("status", models.CharField(choices=[("disponible", "Disponible"), ("reserve", "Réservée"), ("vendu", "Vendue")], default="disponible", max_length=12)),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_parcelles", to=settings.AUTH_USER_MODEL)),
                ("ilot", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="parcelles", to="inventory.ilot")),
                ("lotissement", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="parcelles", to="inventory.lotissement")),
            ],
            options={
                "db_table": "parcelles",
                "ordering": ["lotissement", "plot_number"],
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("plot_number"),
                        models.F("lotissement"),
                        condition=models.Q(("deleted_at__isnull", True)),
                        name="unique_live_plot_number_per_lotissement",
                    ),
                ],
            },
        ),
    ]
