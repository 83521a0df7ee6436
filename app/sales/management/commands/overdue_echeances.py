"""
Liste les échéances en retard, ou celles à venir avec --upcoming.

Usage :
    python manage.py overdue_echeances
    python manage.py overdue_echeances --date 2025-03-01 --lotissement 3
    python manage.py overdue_echeances --upcoming 2
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from sales.services import overdue_echeances, upcoming_echeances


class Command(BaseCommand):
    help = "Liste les échéances en attente en retard (ou à venir)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            type=str,
            default=None,
            help="Date de référence AAAA-MM-JJ (défaut : aujourd'hui).",
        )
        parser.add_argument(
            "--upcoming",
            type=int,
            default=None,
            help="Lister les échéances des N prochains mois au lieu des retards.",
        )
        parser.add_argument("--lotissement", type=int, default=None, help="Filtrer sur un lotissement.")

    def handle(self, *args, **options):
        today = None
        if options["date"]:
            today = parse_date(options["date"])
            if today is None:
                raise CommandError(f"Date invalide : {options['date']}")

        if options["upcoming"] is not None:
            if options["upcoming"] < 1:
                raise CommandError("--upcoming attend un nombre de mois positif.")
            echeances = list(upcoming_echeances(options["upcoming"], today, options["lotissement"]))
            label = "à venir"
        else:
            echeances = list(overdue_echeances(today, options["lotissement"]))
            label = "en retard"

        if not echeances:
            self.stdout.write(self.style.SUCCESS(f"Aucune échéance {label}."))
            return

        total = 0
        for echeance in echeances:
            vente = echeance.vente
            parcelle = vente.parcelle
            total += echeance.amount
            self.stdout.write(
                f"  #{echeance.pk}  lot {parcelle.plot_number} ({parcelle.lotissement.name})"
                f"  {vente.acquereur.name}  due le {echeance.due_date.isoformat()}"
                f"  montant {echeance.amount}"
            )
        self.stdout.write(self.style.WARNING(f"{len(echeances)} échéance(s) {label}, total {total} FCFA."))
