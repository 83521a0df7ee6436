"""
Liste les réservations actives dont la date d'expiration est dépassée.

Usage :
    python manage.py expired_reservations
    python manage.py expired_reservations --date 2025-01-31

Rien n'est modifié : la libération d'une parcelle reste une annulation
explicite.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from sales.reservations import expired_reservations


class Command(BaseCommand):
    help = "Liste les réservations actives expirées (sans les modifier)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            type=str,
            default=None,
            help="Date de référence AAAA-MM-JJ (défaut : aujourd'hui).",
        )

    def handle(self, *args, **options):
        today = None
        if options["date"]:
            today = parse_date(options["date"])
            if today is None:
                raise CommandError(f"Date invalide : {options['date']}")

        reservations = list(expired_reservations(today))
        if not reservations:
            self.stdout.write(self.style.SUCCESS("Aucune réservation expirée."))
            return

        for reservation in reservations:
            parcelle = reservation.parcelle
            self.stdout.write(
                f"  #{reservation.pk}  lot {parcelle.plot_number} ({parcelle.lotissement.name})"
                f"  {reservation.acquereur.name}  expirée le {reservation.expiry_date.isoformat()}"
                f"  acompte {reservation.deposit_amount}"
            )
        self.stdout.write(self.style.WARNING(f"{len(reservations)} réservation(s) expirée(s)."))
