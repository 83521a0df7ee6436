"""
Rapport mensuel des commissions de gestion.

Usage :
    python manage.py commission_report                  # mois précédent
    python manage.py commission_report --year 2025 --month 3
    python manage.py commission_report --start 2025-01-01 --end 2025-03-31
"""
from datetime import date

from dateutil.relativedelta import relativedelta
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_date

from finance.services import load_commission_report


def month_bounds(year, month):
    start = date(year, month, 1)
    return start, start + relativedelta(months=1, days=-1)


class Command(BaseCommand):
    help = "Affiche les commissions par propriétaire (défaut : mois précédent)."

    def add_arguments(self, parser):
        parser.add_argument("--year", type=int, default=None)
        parser.add_argument("--month", type=int, default=None)
        parser.add_argument("--start", type=str, default=None, help="AAAA-MM-JJ")
        parser.add_argument("--end", type=str, default=None, help="AAAA-MM-JJ")

    def _period(self, options):
        if options["start"] or options["end"]:
            start = parse_date(options["start"]) if options["start"] else None
            end = parse_date(options["end"]) if options["end"] else None
            if (options["start"] and start is None) or (options["end"] and end is None):
                raise CommandError("Dates attendues au format AAAA-MM-JJ.")
            if start and end and start > end:
                raise CommandError("La date de début est postérieure à la date de fin.")
            return start, end
        if options["year"] or options["month"]:
            if not (options["year"] and options["month"]):
                raise CommandError("--year et --month vont ensemble.")
            if not 1 <= options["month"] <= 12:
                raise CommandError("--month doit être entre 1 et 12.")
            return month_bounds(options["year"], options["month"])
        previous = timezone.localdate() - relativedelta(months=1)
        return month_bounds(previous.year, previous.month)

    def handle(self, *args, **options):
        start, end = self._period(options)
        report = load_commission_report(start, end)

        self.stdout.write(self.style.SUCCESS(f"Commissions : {report.period}"))
        if not report.payment_count:
            self.stdout.write(self.style.WARNING("Aucun paiement encaissé sur la période."))
            return

        for owner in report.by_owner:
            self.stdout.write(
                f"  {owner.owner_name:<30} {owner.management_type_name:<20}"
                f" {owner.payment_count:>4} paiements"
                f" {owner.total_rent:>14,} loyers"
                f" {owner.total_commission:>12,} commission"
            )
        self.stdout.write("")
        self.stdout.write(
            f"  Total : {report.payment_count} paiements, {report.total_rent:,} FCFA encaissés,"
            f" {report.total_commission:,} FCFA de commissions"
        )
